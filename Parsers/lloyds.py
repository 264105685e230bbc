# lloyds.py
"""Lloyds / Halifax statement parser.

Both banks share the Lloyds Banking Group statement template, so Halifax is
routed here too.

Exports:
- extract_transactions(lines, year) -> list[dict]

Row layout after text extraction:
    01 Jan 24 TESCO STORES 3041 DEB -45.67 1,154.33
    02/01/2024 ACME PAYROLL BGC 2,000.00 3,154.33

Amounts carry an explicit sign for money out. Unsigned rows fall back to the
payment-type code (BGC, FPI, DEP ... mean money in).
"""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Dict, List, Optional

logger = logging.getLogger("parsers.lloyds")


# -----------------------------
# Helpers
# -----------------------------

_MONTH_ABBR_TO_NUM = {
    "JAN": 1,
    "FEB": 2,
    "MAR": 3,
    "APR": 4,
    "MAY": 5,
    "JUN": 6,
    "JUL": 7,
    "AUG": 8,
    "SEP": 9,
    "OCT": 10,
    "NOV": 11,
    "DEC": 12,
}

_DATE_MON_RE = re.compile(r"^\s*(\d{1,2})\s+([A-Za-z]{3})[a-z]*\s+(\d{2}|\d{4})\b(?!\.\d)\s*(.*)$")
_DATE_SLASH_RE = re.compile(r"^\s*(\d{1,2})/(\d{1,2})/(\d{2}|\d{4})\b\s*(.*)$")

_MONEY_RE = re.compile(r"(?<![\w.])([+\-−–—]?\s?£?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})(?!\d)")

_CREDIT_CODES = {"BGC", "FPI", "DEP", "CR", "TFR IN", "PAY IN", "CHQ IN"}
_TYPE_CODE_RE = re.compile(
    r"\s+(BGC|FPI|FPO|DEB|DD|SO|BP|CPT|CHG|DEP|TFR|CR|PAY IN|CHQ IN|CHQ)\s*$"
)

_SKIP_CONTAINS = (
    "balance on",
    "balance brought forward",
    "balance carried forward",
    "money in",
    "money out",
    "interest rate",
    "lloyds bank plc",
    "halifax is a division",
    "transaction types",
)


def _parse_money(value: Optional[str]) -> Optional[float]:
    """Parse '£1,234.56', '-£4.80', '− 4.80', '1,234.56'."""
    if value is None:
        return None
    s = str(value).strip()
    if not s:
        return None
    s = s.replace("−", "-").replace("–", "-").replace("—", "-")
    s = s.replace("£", "").replace(",", "").replace(" ", "")
    try:
        return float(s)
    except ValueError:
        return None


def _year4(y: str) -> int:
    yy = int(y)
    return yy + 2000 if yy < 100 else yy


def _parse_row_date(line: str) -> tuple[Optional[date], str]:
    m = _DATE_MON_RE.match(line)
    if m:
        mm = _MONTH_ABBR_TO_NUM.get(m.group(2).upper())
        if not mm:
            return None, ""
        try:
            return date(_year4(m.group(3)), mm, int(m.group(1))), m.group(4)
        except ValueError:
            return None, ""

    m = _DATE_SLASH_RE.match(line)
    if m:
        try:
            return date(_year4(m.group(3)), int(m.group(2)), int(m.group(1))), m.group(4)
        except ValueError:
            return None, ""

    return None, ""


# -----------------------------
# Public API
# -----------------------------

def extract_transactions(lines: List[str], year: int | None = None) -> List[Dict]:
    txns: List[Dict] = []

    for line in lines:
        low = line.lower()
        if any(s in low for s in _SKIP_CONTAINS):
            continue

        d, rest = _parse_row_date(line)
        if d is None:
            continue

        m_first = _MONEY_RE.search(rest)
        if not m_first:
            continue

        tokens = _MONEY_RE.findall(rest)
        amount_tok = tokens[0]
        balance_tok = tokens[1] if len(tokens) > 1 else None

        amount = _parse_money(amount_tok)
        if amount is None:
            continue

        head = rest[: m_first.start()].strip()
        code = ""
        mc = _TYPE_CODE_RE.search(" " + head)
        if mc:
            code = mc.group(1)
            head = (" " + head)[: mc.start()].strip()

        signed = amount_tok.strip().replace("−", "-").replace("–", "-").replace("—", "-")
        if signed.startswith("-"):
            txn_type = "expense"
        elif signed.startswith("+"):
            txn_type = "income"
        else:
            txn_type = "income" if code in _CREDIT_CODES else "expense"

        txns.append(
            {
                "Date": d,
                "Description": re.sub(r"\s+", " ", head).strip(),
                "Amount": round(abs(amount), 2),
                "Type": txn_type,
                "Balance": _parse_money(balance_tok),
            }
        )

    return txns

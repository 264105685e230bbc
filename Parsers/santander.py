"""Santander statement parser (text-based, no OCR)

File: santander.py
Version: 2.0

Notes:
- Personal current account layout: "3rd Jan <description> <money in|out> <balance>".
  Rows omit the year, so the detected statement year is used and rolled
  forward when the rows cross from December into January.
- The printed money-in / money-out columns collapse into a single unsigned
  amount once text is extracted, so direction comes from description keywords.
"""

__version__ = "2.0"

import logging
import re
import datetime as _dt
from typing import List, Dict, Optional

logger = logging.getLogger("parsers.santander")


# -----------------------------
# Helpers: text + money parsing
# -----------------------------

_MONTHS = {
    "jan": 1, "january": 1,
    "feb": 2, "february": 2,
    "mar": 3, "march": 3,
    "apr": 4, "april": 4,
    "may": 5,
    "jun": 6, "june": 6,
    "jul": 7, "july": 7,
    "aug": 8, "august": 8,
    "sep": 9, "sept": 9, "september": 9,
    "oct": 10, "october": 10,
    "nov": 11, "november": 11,
    "dec": 12, "december": 12,
}

# Only tokens with exactly two decimal places count as money ("Page 1 of 3" must not).
_MONEY_RE = re.compile(r'(?<![\w.])([\-−–—]?£?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})(?!\d)')

# 3rd Jan / 03 Jan / 3rd January 2024
_DATE_RE = re.compile(
    r'^\s*(\d{1,2})(?:st|nd|rd|th)?\s+([A-Za-z]{3,9})\b(?:\s+(\d{4})\b(?!\.\d))?\s*(.*)$',
    re.IGNORECASE,
)

_SKIP_CONTAINS = (
    "balance brought forward",
    "balance carried forward",
    "total money in",
    "total money out",
    "interest rate",
    "aer/gross",
    "average balance",
    "santander uk plc",
    "sort code",
    "date description",
)

# Checked against the upper-cased description; any hit means money in.
_INCOME_KEYWORDS = (
    "RECEIPT",
    "REFUND",
    "INTEREST PAID",
    "CASHBACK",
    "TRANSFER",
    "PAYMENT FROM",
    "DEPOSIT",
)


def _clean_text(s: str) -> str:
    s = (s or "").replace("\u00a0", " ")
    s = re.sub(r"\s+", " ", s)
    return s.strip()


def _parse_money(token: str) -> Optional[float]:
    if token is None:
        return None
    t = token.strip().replace("−", "-").replace("–", "-").replace("—", "-")
    t = t.replace("£", "").replace(",", "")
    try:
        return float(t)
    except ValueError:
        return None


def _direction(description: str) -> str:
    up = (description or "").upper()
    if any(k in up for k in _INCOME_KEYWORDS):
        return "income"
    return "expense"


# -----------------------------
# Public API
# -----------------------------

def extract_transactions(lines: List[str], year: int) -> List[Dict]:
    txns: List[Dict] = []
    current_year = int(year)
    prev_month: Optional[int] = None

    for line in lines:
        low = line.lower()
        if any(s in low for s in _SKIP_CONTAINS):
            continue

        m = _DATE_RE.match(line)
        if not m:
            continue

        mm = _MONTHS.get(m.group(2).lower())
        if not mm:
            continue

        # Header lines carry dates too; only money rows move the year along.
        rest = m.group(4)
        tokens = _MONEY_RE.findall(rest)
        if not tokens:
            continue

        if m.group(3):
            yy = int(m.group(3))
            current_year = yy
        else:
            if prev_month == 12 and mm == 1:
                current_year += 1
            yy = current_year
        prev_month = mm

        try:
            d = _dt.date(yy, mm, int(m.group(1)))
        except ValueError:
            logger.debug("Skipping row with invalid date: %s", line)
            continue

        if len(tokens) >= 2:
            amount_tok, balance_tok = tokens[-2], tokens[-1]
        else:
            amount_tok, balance_tok = tokens[-1], None

        amount = _parse_money(amount_tok)
        if amount is None:
            continue

        # Description is everything before the first money column.
        description = _clean_text(rest[: rest.find(tokens[0])] if len(tokens) <= 2 else _MONEY_RE.sub(" ", rest))

        txns.append(
            {
                "Date": d,
                "Description": description,
                "Amount": round(abs(amount), 2),
                "Type": _direction(description),
                "Balance": _parse_money(balance_tok) if balance_tok else None,
            }
        )

    return txns

# Version: chase.py
"""Chase UK statement parser.

Input: segmented statement lines (one transaction per line), plus the detected
statement year (unused; Chase prints the full date on every row).

Row layout:
    15 Jan 2024 TESCO STORES Purchase -£45.67 £1,200.00
    <date> <description> <type word> <signed amount> <balance>

Output rows (dict):
- Date (datetime.date)
- Description (str)
- Amount (float, absolute)
- Type ("income" | "expense")
- Balance (float | None)
"""

from __future__ import annotations

import logging
import re
from datetime import date

logger = logging.getLogger("parsers.chase")


# ----------------------------
# Helpers
# ----------------------------

MONTHS = {
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

ROW_RE = re.compile(
    r"(?P<dd>\d{1,2})\s+(?P<mon>[A-Za-z]{3})\s+(?P<yyyy>\d{4})\s+"
    r"(?P<desc>.*?)\s+(?P<kind>Purchase|Transfer|Refund|Payment)\s+"
    r"(?P<amount>[+\-−–—]?\s*£\s*[\d,]*\.?\d+)\s+"
    r"(?P<balance>[+\-−–—]?\s*£\s*[\d,]*\.?\d+)"
)

SKIP_CONTAINS = [
    "Account number",
    "Opening balance",
    "Closing balance",
    "Interest rate",
]

# Used only when the amount carries no sign.
INCOME_KINDS = {"Refund"}


def _normalise_minus(s: str) -> str:
    return s.replace("−", "-").replace("–", "-").replace("—", "-")


def _money_to_float(s: str) -> float:
    s = _normalise_minus(s).replace("£", "").replace(",", "").replace(" ", "")
    return float(s)


def _description(raw: str) -> str:
    # "Card payment - TESCO STORES" -> "TESCO STORES"
    return raw.split(" - ")[-1].strip()


# ----------------------------
# Required API
# ----------------------------

def extract_transactions(lines: list[str], year: int | None = None) -> list[dict]:
    txns: list[dict] = []

    for line in lines:
        if any(s in line for s in SKIP_CONTAINS):
            continue

        m = ROW_RE.search(line)
        if not m:
            continue

        mm = MONTHS.get(m.group("mon").upper())
        if not mm:
            continue

        try:
            dt = date(int(m.group("yyyy")), mm, int(m.group("dd")))
        except ValueError:
            logger.debug("Skipping row with invalid date: %s", line)
            continue

        amount_raw = _normalise_minus(m.group("amount")).strip()
        value = _money_to_float(amount_raw)
        kind = m.group("kind")

        if amount_raw.startswith("-"):
            txn_type = "expense"
        elif amount_raw.startswith("+"):
            txn_type = "income"
        else:
            txn_type = "income" if kind in INCOME_KINDS else "expense"

        txns.append(
            {
                "Date": dt,
                "Description": _description(m.group("desc")),
                "Amount": round(abs(value), 2),
                "Type": txn_type,
                "Balance": round(_money_to_float(m.group("balance")), 2),
            }
        )

    return txns

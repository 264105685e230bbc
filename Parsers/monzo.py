# Version: monzo.py
# Monzo statement parser
# Defines:
#   extract_transactions(lines, year) -> list[dict]
#
# Monzo rows carry a full date and a signed amount:
#   2024-01-30 Pret A Manger -4.50 1,195.50
#   30/01/2024 Salary ACME LTD +2,000.00 3,195.50

from __future__ import annotations

import logging
import re
import datetime as _dt
from typing import Optional

logger = logging.getLogger("parsers.monzo")


# ----------------------------
# Helpers
# ----------------------------

_ROW_RE = re.compile(
    r"(?P<date>\d{4}-\d{2}-\d{2}|\d{2}/\d{2}/\d{4})\s+(?P<desc>.+?)\s+"
    r"(?P<amount>[+\-−–—]?\s*£?\s*[\d,]+\.\d{2})(?!\d)"
)

_SKIP_CONTAINS = (
    "balance brought forward",
    "opening balance",
    "closing balance",
    "total balance",
    "total outgoings",
    "total deposits",
    "monzo bank limited",
    "financial services compensation",
    "sort code",
)


def _normalise_minus(s: str) -> str:
    return s.replace("−", "-").replace("–", "-").replace("—", "-")


def _money_to_float(s: str) -> Optional[float]:
    if s is None:
        return None
    s = _normalise_minus(str(s)).replace("£", "").replace(",", "").replace(" ", "").strip()
    if not s:
        return None
    try:
        return float(s)
    except ValueError:
        return None


def _parse_date(s: str) -> Optional[_dt.date]:
    for fmt in ("%Y-%m-%d", "%d/%m/%Y"):
        try:
            return _dt.datetime.strptime(s, fmt).date()
        except ValueError:
            continue
    return None


def _clean_spaces(s: str) -> str:
    return re.sub(r"\s+", " ", (s or "").strip())


# ----------------------------
# Required API
# ----------------------------

def extract_transactions(lines: list[str], year: int | None = None) -> list[dict]:
    txns: list[dict] = []

    for line in lines:
        low = line.lower()
        if any(s in low for s in _SKIP_CONTAINS):
            continue

        m = _ROW_RE.search(line)
        if not m:
            continue

        d = _parse_date(m.group("date"))
        if d is None:
            logger.debug("Skipping row with invalid date: %s", line)
            continue

        value = _money_to_float(m.group("amount"))
        if value is None:
            continue

        txns.append(
            {
                "Date": d,
                "Description": _clean_spaces(m.group("desc")),
                "Amount": round(abs(value), 2),
                "Type": "expense" if value < 0 else "income",
                "Balance": None,
            }
        )

    return txns

# Version: generic.py
"""Layout-agnostic fallback parser.

Used when no bank was recognised, or the bank's own parser found nothing.
Takes the whole extracted statement text and the detected statement year.

Strategy: find every date-looking token, treat the text up to the next date
as that row, and take the first money amount in it. Whatever sits between the
date and the amount is the description. Direction comes from an explicit sign
or CR/DR marker, then from income keywords, and defaults to money out.
"""

from __future__ import annotations

import logging
import re
from datetime import date

logger = logging.getLogger("parsers.generic")


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

MAX_ROW_CHARS = 200

DATE_RE = re.compile(
    r"(?<![\d/.-])(?:"
    r"(?P<iso_y>\d{4})-(?P<iso_m>\d{2})-(?P<iso_d>\d{2})"
    r"|(?P<n_d>\d{1,2})[/.-](?P<n_m>\d{1,2})[/.-](?P<n_y>\d{4}|\d{2})"
    r"|(?P<t_d>\d{1,2})(?:st|nd|rd|th)?\s+(?P<t_m>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\.?(?:\s+(?P<t_y>\d{4})(?![\d.,]))?"
    r")(?![\d/])",
    re.IGNORECASE,
)

AMOUNT_RE = re.compile(
    r"(?<![\w.,])(?P<sign>[+\-−–—])?\s?£?\s?(?P<num>(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})(?!\d)"
    r"(?:\s?(?P<crdr>CR|DR)\b)?",
    re.IGNORECASE,
)

SKIP_CONTAINS = (
    "balance brought forward",
    "balance carried forward",
    "opening balance",
    "closing balance",
    "start balance",
    "end balance",
    "statement period",
    "statement date",
    "total money",
    "total payments",
    "total receipts",
    "interest rate",
)

INCOME_KEYWORDS = (
    "salary",
    "wages",
    "payroll",
    "refund",
    "interest paid",
    "interest earned",
    "cashback",
    "payment from",
    "received",
    "deposit",
    "credit from",
    "bank giro credit",
)


def _normalise_minus(s: str) -> str:
    return s.replace("−", "-").replace("–", "-").replace("—", "-")


def _resolve_date(m: re.Match, year: int) -> date | None:
    try:
        if m.group("iso_y"):
            return date(int(m.group("iso_y")), int(m.group("iso_m")), int(m.group("iso_d")))
        if m.group("n_d"):
            yy = int(m.group("n_y"))
            if yy < 100:
                yy += 2000
            return date(yy, int(m.group("n_m")), int(m.group("n_d")))
        mm = MONTHS.get(m.group("t_m")[:3].upper())
        if not mm:
            return None
        yy = int(m.group("t_y")) if m.group("t_y") else int(year)
        return date(yy, mm, int(m.group("t_d")))
    except ValueError:
        return None


def _direction(sign: str | None, crdr: str | None, description: str) -> str:
    if sign:
        return "expense" if _normalise_minus(sign) == "-" else "income"
    if crdr:
        return "income" if crdr.upper() == "CR" else "expense"
    low = description.lower()
    if any(k in low for k in INCOME_KEYWORDS):
        return "income"
    return "expense"


# ----------------------------
# Required API
# ----------------------------

def extract_transactions(text: str, year: int) -> list[dict]:
    blob = " ".join((text or "").split())
    txns: list[dict] = []

    matches = list(DATE_RE.finditer(blob))
    for idx, m in enumerate(matches):
        d = _resolve_date(m, year)
        if d is None or not (2000 <= d.year <= 2099):
            continue

        end = matches[idx + 1].start() if idx + 1 < len(matches) else len(blob)
        row = blob[m.end():min(end, m.end() + MAX_ROW_CHARS)]

        if any(s in row.lower() for s in SKIP_CONTAINS):
            continue

        a = AMOUNT_RE.search(row)
        if not a:
            continue

        description = " ".join(row[: a.start()].split()).strip(" -–,.:;|£")
        if sum(ch.isalpha() for ch in description) < 3:
            continue

        try:
            amount = float(a.group("num").replace(",", ""))
        except ValueError:
            continue

        txns.append(
            {
                "Date": d,
                "Description": description,
                "Amount": round(amount, 2),
                "Type": _direction(a.group("sign"), a.group("crdr"), description),
                "Balance": None,
            }
        )

    logger.debug("Generic parser found %d rows from %d date tokens", len(txns), len(matches))
    return txns

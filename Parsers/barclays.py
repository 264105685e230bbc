# Version: barclays.py
"""Barclays (personal and Business Current Account) statement parser.

Text-based statements only (no OCR).

Barclays prints Money out / Money in / Balance columns, and once the text is
extracted the description and running-balance columns interleave in a way
that line splitting destroys. The whole statement is therefore read as one
whitespace-collapsed blob:

1. scan every money token and look at adjacent (amount, balance) pairs
2. accept a pair only when it reconciles with the running balance:
   |balance - running| == amount within RECONCILE_TOLERANCE; the sign of
   balance - running gives the direction
3. rebuild the description from the text between the previous pair and this
   one (at most DESCRIPTION_LOOKBACK characters), stripped of letterhead,
   sort codes, page numbers and scheme disclaimers

A pair whose cleaned description is DESCRIPTION_MIN_LENGTH characters or
fewer is dropped and does not move the running balance.

Output rows (dict): Date, Description, Amount (absolute), Type, Balance.
"""

from __future__ import annotations

import logging
import re
from datetime import date

logger = logging.getLogger("parsers.barclays")


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

RECONCILE_TOLERANCE = 0.05
DESCRIPTION_LOOKBACK = 250
DESCRIPTION_MIN_LENGTH = 2

# Money like 1,234.56 or 1234.56
MONEY_RE = re.compile(r"(?<![\d,.])(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}(?!\d)")

# Anything other than whitespace / a pound sign between amount and balance breaks the pair.
PAIR_GAP_RE = re.compile(r"^[\s£]*$")

OPENING_BALANCE_RE = re.compile(
    r"(?:Start\s+balance|Opening\s+balance|Balance\s+brought\s+forward)\s*£?\s*"
    r"(?P<amt>(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2})",
    re.IGNORECASE,
)

DATE_RE = re.compile(
    r"\b(?P<dd>\d{1,2})\s+(?P<mon>Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\b",
    re.IGNORECASE,
)

# "Card Payment to PRET On 09 Jan": the card-use date, not the posting date.
CARD_DATE_RE = re.compile(
    r"\bOn\s+\d{1,2}\s+(?:Jan|Feb|Mar|Apr|May|Jun|Jul|Aug|Sep|Oct|Nov|Dec)[a-z]*\b",
    re.IGNORECASE,
)

# Applied in order; each match is replaced with a space.
DESCRIPTION_REMOVALS = [
    r"Barclays Bank UK PLC is authorised by the Prudential Regulation Authority and regulated by "
    r"the Financial Conduct Authority and the Prudential Regulation Authority\.?",
    r"\(?Financial Services Register No\.?:?\s*\d+\)?\.?",
    r"Registered in England\.?\s*Registered No\.?:?\s*\d+\.?",
    r"Registered Office:?\s*1 Churchill Place,?\s*London,?\s*E14\s*5HP\.?",
    r"Your deposit is eligible for protection by the Financial Services Compensation Scheme\.?",
    r"\bFinancial Services Compensation Scheme\b",
    r"\bFSCS\b",
    r"\bBarclays Bank UK PLC\b",
    r"\bBarclays\.co\.uk\b",
    r"\bYour business accounts?\s*[-–]?\s*At a glance\b",
    r"\bYour business current account\b",
    r"\bAt a glance\b",
    r"\bDate\s+Description\s+Money out\s*£?\s+Money in\s*£?\s+Balance\s*£?",
    r"\bBalance (?:brought|carried) forward\b",
    r"\bSWIFTBIC:?\s*[A-Z0-9]{8,11}\b",
    r"\bIBAN:?\s*GB\d{2}\s?[A-Z]{4}(?:\s?\d{2,4}){2,5}",
    r"\bSort\s*code:?\s*\d{2}[- ]\d{2}[- ]\d{2}\b",
    r"\b\d{2}-\d{2}-\d{2}\b",
    r"\bAccount\s*(?:no\.?|number):?\s*\d{6,8}\b",
    r"\bPage\s+\d+(?:\s+of\s+\d+)?\b",
    r"\bContinued\b",
    r"\bOn \d{1,2} [A-Za-z]{3}\b",
    r"£?(?:\d{1,3}(?:,\d{3})+|\d+)\.\d{2}",
]
_DESCRIPTION_REMOVAL_RES = [re.compile(p, re.IGNORECASE) for p in DESCRIPTION_REMOVALS]


def _money_to_float(s: str) -> float:
    return float(s.replace(",", ""))


def _month_num(mon: str) -> int | None:
    if not mon:
        return None
    return MONTHS.get(mon.strip()[:3].upper())


def scan_money_tokens(blob: str, start: int = 0) -> list[tuple[float, int, int]]:
    """(value, start, end) for every money-looking token from `start` on."""
    return [
        (_money_to_float(m.group(0)), m.start(), m.end())
        for m in MONEY_RE.finditer(blob, start)
    ]


def reconcile(amount: float, balance: float, running: float) -> str | None:
    """Direction of a candidate pair, or None when it does not reconcile."""
    delta = round(balance - running, 2)
    if abs(abs(delta) - amount) > RECONCILE_TOLERANCE:
        return None
    return "income" if delta > 0 else "expense"


def clean_description(text: str) -> str:
    s = text or ""
    for rx in _DESCRIPTION_REMOVAL_RES:
        s = rx.sub(" ", s)
    s = " ".join(s.split())
    return s.strip(" -–,.:;|")


def _split_date(span: str) -> tuple[tuple[int, int] | None, str]:
    """Pull the row date off a description span.

    Text in front of the first date belongs to page furniture, not the row.
    Card-use dates are removed first so a same-day row without a posting
    date keeps its description.
    """
    span = CARD_DATE_RE.sub(" ", span)
    m = DATE_RE.search(span)
    if not m:
        return None, span
    mm = _month_num(m.group("mon"))
    if not mm:
        return None, span
    return (int(m.group("dd")), mm), span[m.end():]


# ----------------------------
# Required API
# ----------------------------

def extract_transactions(blob: str, year: int) -> list[dict]:
    txns: list[dict] = []

    m_open = OPENING_BALANCE_RE.search(blob)
    running: float | None = _money_to_float(m_open.group("amt")) if m_open else None
    scan_from = m_open.end() if m_open else 0

    tokens = scan_money_tokens(blob, scan_from)

    prev_end = scan_from
    current_year = int(year)
    prev_month: int | None = None
    current_dt: date | None = None

    i = 0
    while i < len(tokens) - 1:
        amount, a_start, a_end = tokens[i]
        balance, b_start, b_end = tokens[i + 1]

        if not PAIR_GAP_RE.match(blob[a_end:b_start]):
            i += 1
            continue

        if running is None:
            # No opening balance printed: the first pair only seeds the running balance.
            logger.debug("No opening balance; seeding running balance with %.2f", balance)
            running = balance
            prev_end = b_end
            i += 2
            continue

        direction = reconcile(amount, balance, running)
        if direction is None:
            i += 1
            continue

        span = blob[max(prev_end, a_start - DESCRIPTION_LOOKBACK):a_start]
        prev_end = b_end
        i += 2

        day_month, rest = _split_date(span)
        description = clean_description(rest)
        if len(description) <= DESCRIPTION_MIN_LENGTH:
            logger.debug("Dropping boilerplate-only pair %.2f / %.2f", amount, balance)
            continue

        running = balance

        if day_month:
            dd, mm = day_month
            if prev_month == 12 and mm == 1:
                current_year += 1
            prev_month = mm
            try:
                current_dt = date(current_year, mm, dd)
            except ValueError:
                current_dt = None

        if current_dt is None:
            logger.debug("No date for row '%s'; skipping", description)
            continue

        txns.append(
            {
                "Date": current_dt,
                "Description": description,
                "Amount": round(amount, 2),
                "Type": direction,
                "Balance": round(balance, 2),
            }
        )

    return txns

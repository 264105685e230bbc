# Version: 1.0
"""Recurring payment detection (subscriptions, regular bills).

Expenses are bucketed by a normalised merchant key; a bucket is recurring
when it has at least MIN_OCCURRENCES payments of similar size at a regular
interval.
"""
import re
from dataclasses import dataclass, field
from datetime import date, timedelta

from core import Transaction

AMOUNT_VARIANCE_THRESHOLD = 0.10
MIN_OCCURRENCES = 2

# (type, lower bound, upper bound, nominal days, label); bounds are inclusive
# and the first matching bucket wins.
FREQUENCY_BUCKETS = [
    ("weekly", 4, 10, 7, "Weekly"),
    ("fortnightly", 10, 18, 14, "Every 2 weeks"),
    ("monthly", 23, 37, 30, "Monthly"),
    ("quarterly", 75, 105, 90, "Quarterly"),
    ("yearly", 335, 395, 365, "Yearly"),
]

_SUFFIX_RE = re.compile(r"ltd|limited|uk|plc|corp|inc")
_NON_ALNUM_RE = re.compile(r"[^a-z0-9\s]")


@dataclass(frozen=True)
class Frequency:
    type: str
    days: int
    label: str


@dataclass
class RecurringPaymentGroup:
    merchant: str
    normalized_name: str
    frequency: str
    frequency_days: int
    frequency_type: str
    avg_amount: float
    min_amount: float
    max_amount: float
    occurrences: int
    total_spent: float
    annual_cost: float
    last_payment: str
    days_since_last_payment: int
    next_payment_date: str | None
    category: str
    potentially_unused: bool
    transactions: list = field(default_factory=list, repr=False)


def normalize_merchant(description: str) -> str:
    """Lossy merchant key: 'NETFLIX UK' and 'Netflix UK Ltd' both give 'netflix'.

    Suffix fragments are removed anywhere in the text, and only the first two
    words are kept, so unrelated merchants can share a key.
    """
    s = _SUFFIX_RE.sub("", (description or "").lower())
    s = _NON_ALNUM_RE.sub("", s)
    return " ".join(s.split()[:2])


def _days_between(d1: str, d2: str) -> int:
    a = date.fromisoformat(d1)
    b = date.fromisoformat(d2)
    return abs((b - a).days)


def _amounts_similar(amount1: float, amount2: float) -> bool:
    avg = (amount1 + amount2) / 2
    if avg == 0:
        return amount1 == amount2
    return abs(amount1 - amount2) / avg <= AMOUNT_VARIANCE_THRESHOLD


def determine_frequency(intervals: list[int]) -> Frequency:
    if not intervals:
        return Frequency("unknown", 0, "Unknown")

    avg_interval = sum(intervals) / len(intervals)
    for ftype, low, high, days, label in FREQUENCY_BUCKETS:
        if low <= avg_interval <= high:
            return Frequency(ftype, days, label)

    rounded = round(avg_interval)
    return Frequency("irregular", rounded, f"Every {rounded} days")


def detect_recurring_transactions(transactions: list[Transaction], today: date | None = None) -> list[RecurringPaymentGroup]:
    today = today or date.today()
    today_iso = today.isoformat()

    groups: dict[str, list[Transaction]] = {}
    for t in transactions:
        if t.type != "expense":
            continue
        groups.setdefault(normalize_merchant(t.description), []).append(t)

    recurring: list[RecurringPaymentGroup] = []

    for normalized_name, txns in groups.items():
        if len(txns) < MIN_OCCURRENCES:
            continue

        # Stable sort keeps equal-date rows in statement order.
        txns = sorted(txns, key=lambda t: t.date)

        amounts = [t.amount for t in txns]
        avg_amount = sum(amounts) / len(amounts)
        if not all(_amounts_similar(a, avg_amount) for a in amounts):
            continue

        intervals = [_days_between(txns[i - 1].date, txns[i].date) for i in range(1, len(txns))]
        frequency = determine_frequency(intervals)

        last = txns[-1]
        days_since = _days_between(last.date, today_iso)

        next_in = frequency.days - days_since
        next_payment = (today + timedelta(days=next_in)).isoformat() if next_in > 0 else None

        if frequency.days > 0:
            annual_cost = avg_amount * 365 / frequency.days
        else:
            annual_cost = avg_amount * len(txns)

        recurring.append(
            RecurringPaymentGroup(
                merchant=txns[0].description,
                normalized_name=normalized_name,
                frequency=frequency.label,
                frequency_days=frequency.days,
                frequency_type=frequency.type,
                avg_amount=avg_amount,
                min_amount=min(amounts),
                max_amount=max(amounts),
                occurrences=len(txns),
                total_spent=sum(amounts),
                annual_cost=annual_cost,
                last_payment=last.date,
                days_since_last_payment=days_since,
                next_payment_date=next_payment,
                category=txns[0].category,
                potentially_unused=days_since > frequency.days * 2,
                transactions=txns,
            )
        )

    recurring.sort(key=lambda r: r.annual_cost, reverse=True)
    return recurring


def get_recurring_summary(groups: list[RecurringPaymentGroup]) -> dict:
    total_monthly = 0.0
    for r in groups:
        if r.frequency_days > 0:
            total_monthly += r.avg_amount * 30 / r.frequency_days
        else:
            total_monthly += r.annual_cost / 12

    by_frequency: dict[str, dict] = {}
    for r in groups:
        bucket = by_frequency.setdefault(r.frequency_type, {"count": 0, "total": 0.0})
        bucket["count"] += 1
        bucket["total"] += r.annual_cost

    unused = [r for r in groups if r.potentially_unused]

    return {
        "count": len(groups),
        "total_monthly": total_monthly,
        "total_annual": sum(r.annual_cost for r in groups),
        "by_frequency": by_frequency,
        "potential_savings": sum(r.annual_cost for r in unused),
        "potentially_unused_count": len(unused),
    }


def generate_recurring_insights(groups: list[RecurringPaymentGroup], summary: dict) -> list[str]:
    insights: list[str] = []

    if summary["total_monthly"] > 0:
        insights.append(
            f"You have {summary['count']} recurring payments totaling "
            f"£{summary['total_monthly']:.2f}/month (£{summary['total_annual']:.2f}/year)"
        )

    unused_count = summary["potentially_unused_count"]
    if unused_count > 0:
        plural = "s" if unused_count > 1 else ""
        insights.append(
            f"{unused_count} subscription{plural} may be unused - potential savings: "
            f"£{summary['potential_savings']:.2f}/year"
        )

    if groups:
        top = groups[0]
        insights.append(
            f"Your biggest recurring expense is {top.merchant} at £{top.avg_amount:.2f} {top.frequency.lower()}"
        )

    monthly = [r for r in groups if r.frequency_type == "monthly"]
    if len(monthly) >= 5:
        insights.append(
            f"You have {len(monthly)} monthly subscriptions - consider annual plans for savings"
        )

    return insights

# Version: 1.0
"""Multi-month spending analysis: per-month stats, comparisons and trends."""
import calendar
import math
from dataclasses import dataclass, field

from core import Transaction

# Month-over-month changes smaller than these are noise, not insights.
SPENDING_CHANGE_PCT = 5
INCOME_CHANGE_ABS = 100
SAVINGS_RATE_CHANGE_PTS = 5
CATEGORY_CHANGE_ABS = 50
CATEGORY_CHANGE_PCT = 20
CONSISTENCY_CV_PCT = 20
TREND_REPORT_ABS = 100
TOP_CATEGORIES = 5

INSUFFICIENT_DATA = "insufficient-data"
INSUFFICIENT_DATA_MESSAGE = "Upload more months to see trends"


@dataclass(frozen=True)
class MonthlyStats:
    total_income: float
    total_expenses: float
    net_balance: float
    savings_rate: float
    transaction_count: int
    income_count: int
    expense_count: int
    avg_transaction: float
    category_spending: dict
    top_categories: list
    month: str | None = None


@dataclass(frozen=True)
class MonthComparison:
    insights: list
    spending_change: float
    spending_change_percent: float
    income_change: float
    savings_rate_change: float
    category_changes: list


@dataclass(frozen=True)
class TrendAnalysis:
    trend: str
    message: str | None = None
    overall_spending_change: float = 0.0
    avg_monthly_spending: float = 0.0
    best_month: MonthlyStats | None = None
    worst_month: MonthlyStats | None = None
    is_consistent: bool = False
    coefficient_of_variation: float = 0.0
    month_count: int = 0
    stats: list = field(default_factory=list)


def format_month(key: str) -> str:
    """'2024-03' -> 'March 2024'"""
    year, month = key.split("-")
    return f"{calendar.month_name[int(month)]} {year}"


def group_by_month(transactions: list[Transaction]) -> dict[str, list[Transaction]]:
    months: dict[str, list[Transaction]] = {}
    for t in transactions:
        months.setdefault(t.date[:7], []).append(t)
    return months


def calculate_monthly_stats(transactions: list[Transaction], month: str | None = None) -> MonthlyStats:
    income = [t for t in transactions if t.type == "income"]
    expenses = [t for t in transactions if t.type == "expense"]

    total_income = sum(t.amount for t in income)
    total_expenses = sum(t.amount for t in expenses)
    net_balance = total_income - total_expenses
    savings_rate = (net_balance / total_income) * 100 if total_income > 0 else 0

    category_spending: dict[str, float] = {}
    for t in expenses:
        category_spending[t.category] = category_spending.get(t.category, 0) + t.amount

    top_categories = sorted(category_spending.items(), key=lambda kv: kv[1], reverse=True)[:TOP_CATEGORIES]

    return MonthlyStats(
        total_income=total_income,
        total_expenses=total_expenses,
        net_balance=net_balance,
        savings_rate=savings_rate,
        transaction_count=len(transactions),
        income_count=len(income),
        expense_count=len(expenses),
        avg_transaction=total_expenses / len(expenses) if expenses else 0,
        category_spending=category_spending,
        top_categories=top_categories,
        month=month,
    )


def compare_months(stats1: MonthlyStats, stats2: MonthlyStats, key1: str, key2: str) -> MonthComparison:
    insights: list[str] = []
    name1 = format_month(key1)
    name2 = format_month(key2)

    spending_change = stats2.total_expenses - stats1.total_expenses
    spending_change_percent = (
        (spending_change / stats1.total_expenses) * 100 if stats1.total_expenses > 0 else 0
    )

    if abs(spending_change_percent) > SPENDING_CHANGE_PCT:
        direction = "increased" if spending_change > 0 else "decreased"
        insights.append(
            f"Spending {direction} by £{abs(spending_change):.2f} "
            f"({abs(spending_change_percent):.1f}%) from {name1} to {name2}"
        )
    else:
        insights.append(f"Spending remained stable between {name1} and {name2}")

    income_change = stats2.total_income - stats1.total_income
    if abs(income_change) > INCOME_CHANGE_ABS:
        direction = "increased" if income_change > 0 else "decreased"
        insights.append(f"Income {direction} by £{abs(income_change):.2f}")

    savings_rate_change = stats2.savings_rate - stats1.savings_rate
    if abs(savings_rate_change) > SAVINGS_RATE_CHANGE_PTS:
        direction = "improved" if savings_rate_change > 0 else "declined"
        insights.append(
            f"Savings rate {direction} from {stats1.savings_rate:.1f}% to {stats2.savings_rate:.1f}%"
        )

    category_changes = []
    categories = list(dict.fromkeys(list(stats1.category_spending) + list(stats2.category_spending)))
    for category in categories:
        prev = stats1.category_spending.get(category, 0)
        curr = stats2.category_spending.get(category, 0)
        change = curr - prev
        if prev > 0:
            change_percent = (change / prev) * 100
        else:
            change_percent = 100 if curr > 0 else 0

        if abs(change) > CATEGORY_CHANGE_ABS and abs(change_percent) > CATEGORY_CHANGE_PCT:
            category_changes.append(
                {
                    "category": category,
                    "change": change,
                    "change_percent": change_percent,
                    "direction": "increased" if change > 0 else "decreased",
                }
            )

    if category_changes:
        category_changes.sort(key=lambda c: abs(c["change"]), reverse=True)
        top = category_changes[0]
        insights.append(
            f"{top['category']} {top['direction']} by £{abs(top['change']):.2f} "
            f"({abs(top['change_percent']):.0f}%)"
        )

    return MonthComparison(
        insights=insights,
        spending_change=spending_change,
        spending_change_percent=spending_change_percent,
        income_change=income_change,
        savings_rate_change=savings_rate_change,
        category_changes=category_changes,
    )


def analyze_trends(monthly_data: dict[str, list[Transaction]]) -> TrendAnalysis:
    months = sorted(monthly_data)
    if len(months) < 2:
        return TrendAnalysis(trend=INSUFFICIENT_DATA, message=INSUFFICIENT_DATA_MESSAGE, month_count=len(months))

    stats = [calculate_monthly_stats(monthly_data[m], month=m) for m in months]

    first, last = stats[0], stats[-1]
    overall_change = last.total_expenses - first.total_expenses
    trend = "increasing" if overall_change > 0 else "decreasing"

    spending = [s.total_expenses for s in stats]
    avg_spending = sum(spending) / len(spending)

    # Earliest month wins ties.
    best = stats[0]
    worst = stats[0]
    for s in stats[1:]:
        if s.savings_rate > best.savings_rate:
            best = s
        if s.savings_rate < worst.savings_rate:
            worst = s

    # No spending at all leaves the variation undefined (NaN), which never counts as consistent.
    if avg_spending > 0:
        variance = sum((v - avg_spending) ** 2 for v in spending) / len(spending)
        cv = math.sqrt(variance) / avg_spending * 100
    else:
        cv = math.nan

    return TrendAnalysis(
        trend=trend,
        overall_spending_change=overall_change,
        avg_monthly_spending=avg_spending,
        best_month=best,
        worst_month=worst,
        is_consistent=cv < CONSISTENCY_CV_PCT,
        coefficient_of_variation=cv,
        month_count=len(stats),
        stats=stats,
    )


def generate_multi_month_insights(transactions: list[Transaction]) -> list[str]:
    monthly_data = group_by_month(transactions)
    trends = analyze_trends(monthly_data)

    if trends.trend == INSUFFICIENT_DATA:
        return [trends.message]

    insights: list[str] = []

    if trends.overall_spending_change > TREND_REPORT_ABS:
        insights.append(
            f"Spending trend over {trends.month_count} months: {trends.trend} by "
            f"£{abs(trends.overall_spending_change):.2f}"
        )

    insights.append(
        f"Best month: {format_month(trends.best_month.month)} with "
        f"{trends.best_month.savings_rate:.1f}% savings rate"
    )

    if trends.worst_month.month != trends.best_month.month:
        insights.append(
            f"Worst month: {format_month(trends.worst_month.month)} with "
            f"{trends.worst_month.savings_rate:.1f}% savings rate"
        )

    if trends.is_consistent:
        insights.append(f"Your spending is consistent (avg £{trends.avg_monthly_spending:.2f}/month)")
    else:
        insights.append(
            "Your spending varies significantly month-to-month - consider budgeting for consistency"
        )

    prev_stats, last_stats = trends.stats[-2], trends.stats[-1]
    comparison = compare_months(prev_stats, last_stats, prev_stats.month, last_stats.month)
    insights.extend(comparison.insights[:2])

    return insights

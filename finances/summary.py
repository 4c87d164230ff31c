# pitcrew-backend/finances/summary.py
"""
Aggregations behind the finances overview: totals, the month-by-month
series and the category breakdown. All functions take an iterable of
FinanceRecord (already filtered) so views and tests share them.
"""
from collections import OrderedDict
from datetime import date
from decimal import Decimal

from django.db.models import Q, Sum

from .models import Budget, FinanceRecord


RANGE_1_MONTH = "1month"
RANGE_3_MONTHS = "3months"
RANGE_6_MONTHS = "6months"
RANGE_1_YEAR = "1year"
RANGE_ALL = "all"

# Months to step back from the current month; the window opens on the 1st
RANGE_MONTHS_BACK = {
    RANGE_1_MONTH: 0,
    RANGE_3_MONTHS: 3,
    RANGE_6_MONTHS: 6,
    RANGE_1_YEAR: 12,
}

DEFAULT_RANGE = RANGE_3_MONTHS

ZERO = Decimal("0.00")


def months_back(day: date, months: int) -> date:
    """First day of the month `months` months before `day`."""
    index = day.year * 12 + (day.month - 1) - months
    return date(index // 12, index % 12 + 1, 1)


def range_start(range_key: str, today: date):
    """
    Window start for a range key, or None for "all".
    Raises ValueError for unknown keys.
    """
    if range_key == RANGE_ALL:
        return None
    if range_key not in RANGE_MONTHS_BACK:
        raise ValueError(f"Unknown range '{range_key}'")
    return months_back(today, RANGE_MONTHS_BACK[range_key])


def totals(records) -> dict:
    income = ZERO
    expenses = ZERO
    for record in records:
        if record.type == FinanceRecord.TYPE_INCOME:
            income += record.amount
        else:
            expenses += record.amount
    return {
        "total_income": income,
        "total_expenses": expenses,
        "net_balance": income - expenses,
    }


def monthly_series(records) -> list:
    """
    [{month: "Mar 2025", income, expenses}, ...] oldest month first.
    Months without records are omitted.
    """
    buckets = {}
    for record in records:
        key = (record.date.year, record.date.month)
        bucket = buckets.setdefault(key, {
            "month": record.date.strftime("%b %Y"),
            "income": ZERO,
            "expenses": ZERO,
        })
        if record.type == FinanceRecord.TYPE_INCOME:
            bucket["income"] += record.amount
        else:
            bucket["expenses"] += record.amount

    return [buckets[key] for key in sorted(buckets)]


def category_breakdown(records) -> list:
    """
    [{name, value}] per display category, largest first.
    """
    breakdown = OrderedDict()
    for record in records:
        name = record.display_category
        breakdown[name] = breakdown.get(name, ZERO) + record.amount

    return [
        {"name": name, "value": value}
        for name, value in sorted(breakdown.items(), key=lambda item: item[1], reverse=True)
    ]


def budget_period_start(budget, today: date) -> date:
    if budget.period == Budget.PERIOD_MONTHLY:
        return today.replace(day=1)
    return today.replace(month=1, day=1)


def budget_spent(budget, today: date) -> Decimal:
    """
    Expenses in the budget's category since the start of its current period.
    A record counts towards a budget when its category or expense_category
    matches the budget category.
    """
    total = (
        FinanceRecord.objects.filter(
            team_id=budget.team_id,
            type=FinanceRecord.TYPE_EXPENSE,
            date__gte=budget_period_start(budget, today),
            date__lte=today,
        )
        .filter(Q(category=budget.category) | Q(expense_category=budget.category))
        .aggregate(total=Sum("amount"))["total"]
    )
    return total or ZERO

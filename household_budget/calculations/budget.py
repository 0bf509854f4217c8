"""
Budget Aggregator

Folds already-fetched transactions, income and budgets into the figures
the budget and insights views show.

DESIGN DECISION: Categories with no transactions are ABSENT from the
spend mapping, not zero. Callers use .get(category_id, ZERO).
"""

from collections import defaultdict
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from household_budget.calculations.money import ZERO, decimal_sum, to_decimal
from household_budget.models.finance import (
    Account,
    Budget,
    Category,
    IncomeEntry,
    Transaction,
    TransactionType,
)
from household_budget.models.reports import (
    BudgetComparison,
    CategorySpend,
    DailySpend,
    NetWorthTotals,
    SpendingTrend,
)

DEFAULT_CATEGORY_COLOR = "#94a3b8"
TREND_THRESHOLD_PCT = Decimal("10")


def aggregate_spend_by_category(
    transactions: Iterable[Transaction],
) -> dict[str, Decimal]:
    """
    Sum transaction amounts per category.

    The caller decides which transactions count (e.g. this month's
    expenses); every transaction given is summed.
    """
    totals: dict[str, Decimal] = {}
    for t in transactions:
        totals[t.category_id] = totals.get(t.category_id, ZERO) + to_decimal(t.amount)
    return totals


def sum_income(entries: Iterable[IncomeEntry]) -> Decimal:
    """Total of the income entries for a period."""
    return decimal_sum(e.amount for e in entries)


def expenses(transactions: Iterable[Transaction]) -> list[Transaction]:
    return [t for t in transactions if t.type == TransactionType.EXPENSE]


def spent_by_member_by_category(
    transactions: Iterable[Transaction],
) -> dict[str, dict[str, Decimal]]:
    """
    category_id -> user_id -> amount, for the household view.

    Transactions without a user are grouped under "unknown".
    """
    result: dict[str, dict[str, Decimal]] = defaultdict(dict)
    for t in transactions:
        member = t.user_id or "unknown"
        per_member = result[t.category_id]
        per_member[member] = per_member.get(member, ZERO) + to_decimal(t.amount)
    return dict(result)


def category_breakdown(
    transactions: Iterable[Transaction],
    categories: Iterable[Category] = (),
    limit: Optional[int] = 5,
) -> list[CategorySpend]:
    """
    Top spending categories with their share of total expenses.

    Only expense transactions count. Unknown categories show as "Other".
    """
    lookup = {c.id: c for c in categories}
    spent = expenses(transactions)
    total = decimal_sum(t.amount for t in spent)

    values: dict[str, Decimal] = {}
    counts: dict[str, int] = {}
    for t in spent:
        values[t.category_id] = values.get(t.category_id, ZERO) + to_decimal(t.amount)
        counts[t.category_id] = counts.get(t.category_id, 0) + 1

    ordered = sorted(values.items(), key=lambda kv: kv[1], reverse=True)
    if limit is not None:
        ordered = ordered[:limit]

    result = []
    for category_id, value in ordered:
        category = lookup.get(category_id)
        percent = (value / total * 100) if total > 0 else ZERO
        result.append(CategorySpend(
            category_id=category_id,
            name=category.name if category else "Other",
            color=category.color if category else DEFAULT_CATEGORY_COLOR,
            value=value,
            count=counts[category_id],
            percent=percent,
        ))
    return result


def budget_comparison(
    transactions: Iterable[Transaction],
    budgets: Iterable[Budget],
    categories: Iterable[Category] = (),
) -> list[BudgetComparison]:
    """Spent vs budgeted per budget line, largest allocation first."""
    lookup = {c.id: c for c in categories}
    spent = aggregate_spend_by_category(expenses(transactions))

    rows = []
    for b in budgets:
        category = lookup.get(b.category_id)
        row = BudgetComparison(
            category_id=b.category_id,
            name=category.name if category else "Unknown",
            color=category.color if category else DEFAULT_CATEGORY_COLOR,
            spent=spent.get(b.category_id, ZERO),
            budgeted=to_decimal(b.allocated),
        )
        if row.budgeted > 0 or row.spent > 0:
            rows.append(row)
    rows.sort(key=lambda r: r.budgeted, reverse=True)
    return rows


def compute_net_worth(accounts: Iterable[Account]) -> NetWorthTotals:
    """Assets minus liabilities. Liability balances are positive amounts owed."""
    assets = ZERO
    liabilities = ZERO
    for a in accounts:
        if a.is_asset:
            assets += to_decimal(a.balance)
        else:
            liabilities += to_decimal(a.balance)
    return NetWorthTotals(
        total_assets=assets,
        total_liabilities=liabilities,
        net_worth=assets - liabilities,
    )


def daily_spending(
    transactions: Iterable[Transaction],
    today: date,
    days: int,
) -> list[DailySpend]:
    """Expense totals for each of the last `days` days, oldest first, gaps as zero."""
    if days <= 0:
        return []
    by_date: dict[date, Decimal] = {}
    for t in expenses(transactions):
        by_date[t.date] = by_date.get(t.date, ZERO) + to_decimal(t.amount)

    start = today - timedelta(days=days - 1)
    result = []
    for offset in range(days):
        day = start + timedelta(days=offset)
        result.append(DailySpend(
            date=day,
            amount=by_date.get(day, ZERO),
            label=f"{day.strftime('%b')} {day.day}",
        ))
    return result


def average_daily_spending(
    transactions: Iterable[Transaction],
    today: date,
    days: int,
) -> Decimal:
    if days <= 0:
        return ZERO
    return decimal_sum(d.amount for d in daily_spending(transactions, today, days)) / days


def spending_trend(
    transactions: Iterable[Transaction],
    today: date,
    days: int,
) -> SpendingTrend:
    """
    Compare average daily spend in the second half of the window to the first.

    More than 10% either way is a trend; anything else is stable.
    """
    daily: Sequence[DailySpend] = daily_spending(transactions, today, days)
    if len(daily) < 2:
        return SpendingTrend.STABLE

    midpoint = len(daily) // 2
    first, second = daily[:midpoint], daily[midpoint:]
    first_avg = decimal_sum(d.amount for d in first) / len(first)
    second_avg = decimal_sum(d.amount for d in second) / len(second)

    # A zero baseline divides by 1 instead
    change_pct = (second_avg - first_avg) / (first_avg or Decimal("1")) * 100
    if change_pct > TREND_THRESHOLD_PCT:
        return SpendingTrend.UP
    if change_pct < -TREND_THRESHOLD_PCT:
        return SpendingTrend.DOWN
    return SpendingTrend.STABLE

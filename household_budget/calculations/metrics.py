"""Derived display metrics: momentum of net worth month over month."""

from decimal import Decimal
from typing import Optional

from household_budget.calculations.money import to_decimal
from household_budget.models.reports import Momentum, MonthlyChange


def classify_momentum(
    monthly_change: Decimal,
    last_month_change: Optional[Decimal] = None,
) -> Momentum:
    """
    Classify this month's change for display.

    Zero change counts as positive. "Improving" needs last month's change
    to compare against and a strictly larger change this month.
    """
    change = to_decimal(monthly_change)
    previous = None if last_month_change is None else to_decimal(last_month_change)
    return Momentum(
        monthly_change=change,
        last_month_change=previous,
        is_positive=change >= 0,
        is_improving=previous is not None and change > previous,
    )


def momentum_from_change(change: MonthlyChange) -> Momentum:
    return classify_momentum(change.monthly_change, change.last_month_change)

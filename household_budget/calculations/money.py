"""
Amount and date primitives shared by the calculations.

DESIGN DECISION: Amounts are converted through str() before becoming
Decimal, so a float like 0.1 becomes Decimal("0.1") and not its binary
approximation. Rounding is half-even everywhere we quantize.
"""

import calendar
from datetime import date
from decimal import ROUND_HALF_EVEN, Decimal
from typing import Any, Iterable

from dateutil.relativedelta import relativedelta

CENT = Decimal("0.01")
ZERO = Decimal("0")


def to_decimal(value: Any) -> Decimal:
    """Parse an amount exactly. None counts as zero."""
    if value is None:
        return ZERO
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_cents(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_EVEN)


def decimal_sum(values: Iterable[Any]) -> Decimal:
    total = ZERO
    for v in values:
        total += to_decimal(v)
    return total


def whole_months_between(start: date, end: date) -> int:
    """
    Complete calendar months from start to end.

    Truncates toward zero, so it is negative when end is before start.
    """
    delta = relativedelta(end, start)
    return delta.years * 12 + delta.months


def fractional_months_between(start: date, end: date) -> Decimal:
    """
    Calendar months from start to end, with the partial month as a fraction.

    The fraction is the leftover days over the length of the month they
    fall in, so Jan 15 -> Feb 15 is exactly 1 and Jan 15 -> Jan 30 is 15/31.
    """
    whole = whole_months_between(start, end)
    anchor = start + relativedelta(months=whole)
    leftover = (end - anchor).days
    days_in_month = calendar.monthrange(anchor.year, anchor.month)[1]
    return Decimal(whole) + Decimal(leftover) / Decimal(days_in_month)


def add_months(value: date, months: int) -> date:
    """Calendar month add; clamps to the last valid day of the target month."""
    return value + relativedelta(months=months)


def first_of_month(value: date) -> date:
    return value.replace(day=1)

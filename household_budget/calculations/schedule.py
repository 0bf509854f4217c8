"""
Recurring Schedule Advancer

Moves a bill's due date forward one cycle and defines what "mark paid"
does to a bill.

DESIGN DECISION: An unknown frequency is not an error.
It advances by one calendar month, the most common billing cycle.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Any, Iterable

import structlog
from dateutil.relativedelta import relativedelta

from household_budget.calculations.money import decimal_sum, to_decimal
from household_budget.models.finance import Bill, Frequency
from household_budget.models.reports import (
    BillPaymentUpdate,
    BillState,
    UpcomingBill,
)

logger = structlog.get_logger(__name__)


_STEPS = {
    Frequency.WEEKLY: relativedelta(weeks=1),
    Frequency.FORTNIGHTLY: relativedelta(weeks=2),
    Frequency.MONTHLY: relativedelta(months=1),
    Frequency.QUARTERLY: relativedelta(months=3),
    Frequency.YEARLY: relativedelta(years=1),
}

# Multipliers to turn a per-cycle amount into a monthly figure
MONTHLY_MULTIPLIERS = {
    Frequency.WEEKLY: Decimal("4.33"),
    Frequency.FORTNIGHTLY: Decimal("2.17"),
    Frequency.MONTHLY: Decimal("1"),
    Frequency.QUARTERLY: Decimal("1") / Decimal("3"),
    Frequency.YEARLY: Decimal("1") / Decimal("12"),
}


def next_due_date(current_due: date, frequency: Any) -> date:
    """
    Next due date one cycle after `current_due`.

    relativedelta keeps the day of month where it exists and clamps to the
    month's last day otherwise (Jan 31 + 1 month -> Feb 28/29).
    """
    parsed = Frequency.parse(frequency)
    if parsed is None:
        logger.debug("unknown_frequency_defaulting_to_monthly", frequency=frequency)
        parsed = Frequency.MONTHLY
    return current_due + _STEPS[parsed]


def apply_payment(bill: Bill, today: date) -> BillPaymentUpdate:
    """
    Work out what marking `bill` paid on `today` changes.

    One-off bills are deactivated and keep their due date.
    Recurring bills move to the next cycle and stay active.
    """
    if bill.is_one_off:
        return BillPaymentUpdate(
            bill_id=bill.id,
            last_paid_date=today,
            is_active=False,
            resulting_state=BillState.PAID_AND_INACTIVE,
        )
    return BillPaymentUpdate(
        bill_id=bill.id,
        last_paid_date=today,
        next_due=next_due_date(bill.next_due, bill.frequency),
        resulting_state=BillState.PAID_AND_ADVANCED,
    )


def bill_state(bill: Bill) -> BillState:
    """Resting state of a bill as stored (advanced bills are pending again)."""
    if not bill.is_active:
        return BillState.PAID_AND_INACTIVE
    return BillState.PENDING


def monthly_equivalent(amount: Any, frequency: Any) -> Decimal:
    """Per-cycle amount expressed per month. Unknown frequencies count as monthly."""
    parsed = Frequency.parse(frequency) or Frequency.MONTHLY
    return to_decimal(amount) * MONTHLY_MULTIPLIERS[parsed]


def total_monthly_bills(bills: Iterable[Bill]) -> Decimal:
    """Monthly cost of active recurring bills. One-offs are excluded."""
    return decimal_sum(
        monthly_equivalent(b.amount, b.frequency)
        for b in bills
        if b.is_active and not b.is_one_off
    )


def days_until_due(bill: Bill, today: date) -> int:
    return (bill.next_due - today).days


def upcoming_bills(
    bills: Iterable[Bill],
    today: date,
    within_days: int = 14,
    include_overdue: bool = True,
) -> list[UpcomingBill]:
    """Active bills due in the next `within_days` days, soonest first."""
    horizon = today + timedelta(days=within_days)
    result = []
    for bill in bills:
        if not bill.is_active or bill.next_due > horizon:
            continue
        overdue = bill.next_due < today
        if overdue and not include_overdue:
            continue
        result.append(UpcomingBill(
            bill=bill,
            days_until_due=days_until_due(bill, today),
            is_overdue=overdue,
        ))
    result.sort(key=lambda u: (u.bill.next_due, u.bill.name))
    return result


def frequency_counts(bills: Iterable[Bill]) -> dict[Frequency, int]:
    """How many active recurring bills use each frequency."""
    counts: dict[Frequency, int] = {}
    for bill in bills:
        if not bill.is_active or bill.is_one_off:
            continue
        key = Frequency.parse(bill.frequency) or Frequency.MONTHLY
        counts[key] = counts.get(key, 0) + 1
    return counts

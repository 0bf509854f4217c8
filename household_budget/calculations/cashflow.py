"""
Cash Flow Timeline

Projects the spendable balance day by day from recurring income and
active bills.

Spendable balance = bank + cash accounts - credit card balances owed.
Investments, loans and other debts do not move with day-to-day spending.

DESIGN DECISION: Bills move between occurrences with next_due_date, the
same step used when a bill is marked paid, so the timeline and the bills
list always agree on when a bill is next due.
"""

from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional, Sequence

from dateutil.relativedelta import relativedelta

from household_budget.calculations.money import ZERO, quantize_cents, to_decimal
from household_budget.calculations.schedule import next_due_date
from household_budget.models.finance import (
    Account,
    AccountType,
    Bill,
    Frequency,
    IncomeEntry,
)
from household_budget.models.reports import (
    CashflowDay,
    CashflowEvent,
    CashflowEventType,
    LowestBalance,
)

SPENDABLE_ACCOUNT_TYPES = (AccountType.BANK, AccountType.CASH)
OWED_ACCOUNT_TYPES = (AccountType.CREDIT, AccountType.CREDIT_CARD)

WEEKDAY_FREQUENCIES = (Frequency.WEEKLY, Frequency.FORTNIGHTLY)


def spendable_balance(accounts: Iterable[Account]) -> Decimal:
    """Cash on hand minus what is owed on credit cards."""
    balance = ZERO
    for account in accounts:
        if account.type in SPENDABLE_ACCOUNT_TYPES:
            balance += to_decimal(account.balance)
        elif account.type in OWED_ACCOUNT_TYPES:
            balance -= to_decimal(account.balance)
    return balance


def _day_of_month(year: int, month: int, day: int) -> date:
    # relativedelta(day=31) lands on the month's last day when it is shorter
    return date(year, month, 1) + relativedelta(day=max(1, day))


def _sunday_based_weekday(value: date) -> int:
    return (value.weekday() + 1) % 7


def next_pay_date(today: date, frequency: Frequency, pay_day: int) -> date:
    """
    First payday after `today` for a pay schedule.

    Weekly and fortnightly pay falls on weekday `pay_day` (0 = Sunday); a
    payday that is today counts for weekly pay and moves a fortnight out
    for fortnightly pay. Other frequencies pay on day `pay_day` of the
    month, moving to next month once this month's has passed.
    """
    if frequency in WEEKDAY_FREQUENCIES:
        days_ahead = (pay_day - _sunday_based_weekday(today)) % 7
        if days_ahead == 0 and frequency == Frequency.FORTNIGHTLY:
            days_ahead = 14
        return today + timedelta(days=days_ahead)

    this_month = _day_of_month(today.year, today.month, pay_day)
    if this_month > today:
        return this_month
    following = today + relativedelta(months=1)
    return _day_of_month(following.year, following.month, pay_day)


def _following_pay_date(current: date, frequency: Frequency, pay_day: int) -> date:
    if frequency == Frequency.MONTHLY:
        following = current + relativedelta(months=1)
        return _day_of_month(following.year, following.month, pay_day)
    return next_due_date(current, frequency)


def income_dates(entry: IncomeEntry, start: date, end: date) -> list[date]:
    """Paydays of one income between start and end, both inclusive."""
    if not entry.has_pay_schedule:
        return []

    pay_date = entry.next_pay_date
    if pay_date is None or pay_date < start:
        pay_date = next_pay_date(start, entry.pay_frequency, entry.pay_day)

    dates = []
    while pay_date <= end:
        dates.append(pay_date)
        pay_date = _following_pay_date(pay_date, entry.pay_frequency, entry.pay_day)
    return dates


def first_bill_date(bill: Bill, start: date) -> Optional[date]:
    """
    The bill's first occurrence on or after `start`.

    An overdue one-off bill has no future occurrence.
    """
    if bill.next_due >= start:
        return bill.next_due
    if bill.is_one_off:
        return None
    due = bill.next_due
    while due < start:
        due = next_due_date(due, bill.frequency)
    return due


def bill_dates(bill: Bill, start: date, end: date) -> list[date]:
    """Due dates of one active bill between start and end, both inclusive."""
    if not bill.is_active:
        return []
    due = first_bill_date(bill, start)
    dates = []
    while due is not None and due <= end:
        dates.append(due)
        if bill.is_one_off:
            break
        due = next_due_date(due, bill.frequency)
    return dates


def calculate_timeline(
    accounts: Iterable[Account],
    income_entries: Iterable[IncomeEntry],
    bills: Iterable[Bill],
    *,
    start: date,
    days: int,
) -> list[CashflowDay]:
    """
    Projected balance for `start` and each of the next `days` days.

    Each day's income is added before its bills are taken off.
    Balances are kept exact and reported to the cent.
    """
    end = start + timedelta(days=days)

    income_by_day: dict[date, list[CashflowEvent]] = {}
    for entry in income_entries:
        for day in income_dates(entry, start, end):
            income_by_day.setdefault(day, []).append(CashflowEvent(
                type=CashflowEventType.INCOME,
                name=entry.source,
                amount=to_decimal(entry.amount),
            ))

    bills_by_day: dict[date, list[CashflowEvent]] = {}
    for bill in bills:
        for day in bill_dates(bill, start, end):
            bills_by_day.setdefault(day, []).append(CashflowEvent(
                type=CashflowEventType.BILL,
                name=bill.name,
                amount=to_decimal(bill.amount),
            ))

    balance = spendable_balance(accounts)
    timeline = []
    for offset in range(days + 1):
        day = start + timedelta(days=offset)
        events = income_by_day.get(day, []) + bills_by_day.get(day, [])
        for event in events:
            if event.type == CashflowEventType.INCOME:
                balance += event.amount
            else:
                balance -= event.amount
        timeline.append(CashflowDay(
            date=day,
            projected_balance=quantize_cents(balance),
            events=events,
            is_negative=balance < 0,
        ))
    return timeline


def find_lowest_balance(timeline: Sequence[CashflowDay]) -> Optional[LowestBalance]:
    """The day with the lowest projected balance; the earliest wins a tie."""
    if not timeline:
        return None
    lowest = min(timeline, key=lambda d: d.projected_balance)
    return LowestBalance(date=lowest.date, balance=lowest.projected_balance)


def has_negative_balance(timeline: Iterable[CashflowDay]) -> bool:
    return any(d.is_negative for d in timeline)


def get_first_negative_date(timeline: Iterable[CashflowDay]) -> Optional[date]:
    return next((d.date for d in timeline if d.is_negative), None)

"""Tests for the day-by-day cash flow projection."""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from household_budget.calculations.cashflow import (
    bill_dates,
    calculate_timeline,
    find_lowest_balance,
    first_bill_date,
    get_first_negative_date,
    has_negative_balance,
    income_dates,
    next_pay_date,
    spendable_balance,
)
from household_budget.models import AccountType, CashflowEventType, Frequency, IncomeEntry

from conftest import make_account, make_bill

# A Friday
TODAY = date(2024, 3, 15)


def make_income(
    amount: str = "1000",
    frequency: str = "weekly",
    pay_day: int = 5,
    next_pay: Optional[date] = None,
    is_recurring: bool = True,
) -> IncomeEntry:
    return IncomeEntry(
        amount=Decimal(amount),
        month=date(2024, 3, 1),
        source="Salary",
        is_recurring=is_recurring,
        pay_frequency=frequency,
        pay_day=pay_day,
        next_pay_date=next_pay,
    )


class TestSpendableBalance:

    def test_cash_and_bank_less_cards(self):
        accounts = [
            make_account("bank", "1000", type=AccountType.BANK),
            make_account("wallet", "50", type=AccountType.CASH),
            make_account("card", "300", is_asset=False, type=AccountType.CREDIT_CARD),
            make_account("shares", "5000", type=AccountType.INVESTMENT),
            make_account("car", "10000", is_asset=False, type=AccountType.LOAN),
        ]
        assert spendable_balance(accounts) == Decimal("750")

    def test_no_accounts(self):
        assert spendable_balance([]) == Decimal("0")


class TestNextPayDate:

    @pytest.mark.parametrize("frequency,pay_day,expected", [
        (Frequency.WEEKLY, 5, date(2024, 3, 15)),
        (Frequency.FORTNIGHTLY, 5, date(2024, 3, 29)),
        (Frequency.WEEKLY, 1, date(2024, 3, 18)),
        (Frequency.WEEKLY, 0, date(2024, 3, 17)),
        (Frequency.FORTNIGHTLY, 4, date(2024, 3, 21)),
    ])
    def test_weekday_pay(self, frequency, pay_day, expected):
        assert next_pay_date(TODAY, frequency, pay_day) == expected

    @pytest.mark.parametrize("today,pay_day,expected", [
        (TODAY, 20, date(2024, 3, 20)),
        (TODAY, 15, date(2024, 4, 15)),
        (TODAY, 1, date(2024, 4, 1)),
        (date(2024, 2, 10), 31, date(2024, 2, 29)),
        (date(2024, 12, 20), 5, date(2025, 1, 5)),
    ])
    def test_monthly_pay(self, today, pay_day, expected):
        assert next_pay_date(today, Frequency.MONTHLY, pay_day) == expected


class TestIncomeDates:

    def test_weekly_from_stored_next_pay_date(self):
        entry = make_income(next_pay=date(2024, 3, 22))
        assert income_dates(entry, TODAY, date(2024, 4, 14)) == [
            date(2024, 3, 22),
            date(2024, 3, 29),
            date(2024, 4, 5),
            date(2024, 4, 12),
        ]

    def test_stale_next_pay_date_is_recalculated(self):
        entry = make_income(next_pay=date(2024, 3, 1))
        assert income_dates(entry, TODAY, date(2024, 3, 29)) == [
            date(2024, 3, 15),
            date(2024, 3, 22),
            date(2024, 3, 29),
        ]

    def test_monthly_keeps_pay_day_after_short_month(self):
        entry = make_income(frequency="monthly", pay_day=31)
        assert income_dates(entry, date(2024, 1, 15), date(2024, 4, 15)) == [
            date(2024, 1, 31),
            date(2024, 2, 29),
            date(2024, 3, 31),
        ]

    def test_without_pay_schedule(self):
        assert income_dates(make_income(is_recurring=False), TODAY, date(2024, 4, 14)) == []
        assert income_dates(make_income(frequency="Weekly"), TODAY, date(2024, 4, 14)) == []


class TestBillDates:

    def test_weekly_bill(self):
        bill = make_bill(next_due=date(2024, 3, 20), frequency="weekly")
        assert bill_dates(bill, TODAY, date(2024, 4, 14)) == [
            date(2024, 3, 20),
            date(2024, 3, 27),
            date(2024, 4, 3),
            date(2024, 4, 10),
        ]

    def test_overdue_recurring_bill_rolls_forward(self):
        bill = make_bill(next_due=date(2024, 1, 31))
        assert first_bill_date(bill, TODAY) == date(2024, 3, 29)

    def test_overdue_one_off_has_no_occurrence(self):
        bill = make_bill(next_due=date(2024, 3, 1), is_one_off=True)
        assert first_bill_date(bill, TODAY) is None
        assert bill_dates(bill, TODAY, date(2024, 4, 14)) == []

    def test_one_off_occurs_once(self):
        bill = make_bill(next_due=date(2024, 3, 20), frequency="weekly", is_one_off=True)
        assert bill_dates(bill, TODAY, date(2024, 4, 14)) == [date(2024, 3, 20)]

    def test_inactive_bill(self):
        bill = make_bill(next_due=date(2024, 3, 20), is_active=False)
        assert bill_dates(bill, TODAY, date(2024, 4, 14)) == []

    def test_unknown_frequency_advances_monthly(self):
        bill = make_bill(next_due=date(2024, 3, 16), frequency="Weekly")
        assert bill_dates(bill, TODAY, date(2024, 4, 14)) == [date(2024, 3, 16)]


class TestCalculateTimeline:

    @pytest.fixture
    def timeline(self):
        return calculate_timeline(
            [make_account("bank", "500")],
            [make_income(next_pay=date(2024, 3, 22))],
            [make_bill("rent", next_due=date(2024, 3, 18), amount="800", name="Rent")],
            start=TODAY,
            days=10,
        )

    def test_covers_start_and_each_following_day(self, timeline):
        assert len(timeline) == 11
        assert timeline[0].date == TODAY
        assert timeline[-1].date == date(2024, 3, 25)

    def test_balances(self, timeline):
        balances = {d.date: d.projected_balance for d in timeline}
        assert balances[date(2024, 3, 17)] == Decimal("500.00")
        assert balances[date(2024, 3, 18)] == Decimal("-300.00")
        assert balances[date(2024, 3, 22)] == Decimal("700.00")
        assert balances[date(2024, 3, 25)] == Decimal("700.00")

    def test_events_and_negative_flags(self, timeline):
        rent_day = timeline[3]
        assert [(e.type, e.name, e.amount) for e in rent_day.events] == [
            (CashflowEventType.BILL, "Rent", Decimal("800")),
        ]
        assert rent_day.is_negative
        assert not timeline[0].is_negative
        assert timeline[0].events == []

    def test_lowest_balance(self, timeline):
        lowest = find_lowest_balance(timeline)
        assert lowest.date == date(2024, 3, 18)
        assert lowest.balance == Decimal("-300.00")

    def test_first_negative_date(self, timeline):
        assert has_negative_balance(timeline)
        assert get_first_negative_date(timeline) == date(2024, 3, 18)

    def test_income_lands_before_bills_on_the_same_day(self):
        timeline = calculate_timeline(
            [make_account("bank", "500")],
            [make_income(pay_day=1, next_pay=date(2024, 3, 18))],
            [make_bill("rent", next_due=date(2024, 3, 18), amount="800")],
            start=TODAY,
            days=3,
        )
        payday = timeline[3]
        assert [e.type for e in payday.events] == [CashflowEventType.INCOME, CashflowEventType.BILL]
        assert payday.projected_balance == Decimal("700.00")
        assert not has_negative_balance(timeline)
        assert get_first_negative_date(timeline) is None

    def test_lowest_balance_tie_goes_to_earliest_day(self):
        timeline = calculate_timeline([make_account("bank", "100")], [], [], start=TODAY, days=5)
        lowest = find_lowest_balance(timeline)
        assert lowest.date == TODAY
        assert lowest.balance == Decimal("100.00")

    def test_empty_timeline(self):
        assert find_lowest_balance([]) is None
        assert not has_negative_balance([])
        assert get_first_negative_date([]) is None

"""
Shared fixtures.

No test talks to a real backend: services run against InMemoryStore
and the REST client against httpx.MockTransport.
"""

from datetime import date
from decimal import Decimal
from typing import Optional

import pytest

from household_budget.audit import AuditLogger
from household_budget.clock import FixedClock
from household_budget.config import AppSettings
from household_budget.models.finance import (
    Account,
    Bill,
    NetWorthSnapshot,
    Transaction,
    TransactionType,
)
from household_budget.services.storage import InMemoryStore


TODAY = date(2024, 3, 15)


def make_bill(
    bill_id: str = "bill-1",
    user_id: str = "user-1",
    next_due: date = date(2024, 3, 20),
    frequency: str = "monthly",
    amount: str = "100",
    is_one_off: bool = False,
    is_active: bool = True,
    household_id: Optional[str] = None,
    name: str = "Electricity",
) -> Bill:
    return Bill(
        id=bill_id,
        user_id=user_id,
        household_id=household_id,
        name=name,
        amount=Decimal(amount),
        frequency=frequency,
        next_due=next_due,
        is_one_off=is_one_off,
        is_active=is_active,
    )


def make_transaction(
    tx_id: str,
    amount: str,
    category_id: str,
    on: date = TODAY,
    user_id: Optional[str] = "user-1",
    type: TransactionType = TransactionType.EXPENSE,
) -> Transaction:
    return Transaction(
        id=tx_id,
        amount=Decimal(amount),
        category_id=category_id,
        date=on,
        user_id=user_id,
        type=type,
    )


def make_snapshot(on: date, net_worth: str) -> NetWorthSnapshot:
    return NetWorthSnapshot(snapshot_date=on, net_worth=Decimal(net_worth))


def make_account(
    account_id: str,
    balance: str,
    is_asset: bool = True,
    **kwargs,
) -> Account:
    return Account(id=account_id, name=account_id, balance=Decimal(balance), is_asset=is_asset, **kwargs)


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def clock() -> FixedClock:
    return FixedClock(TODAY)


@pytest.fixture
def audit_logger(store: InMemoryStore) -> AuditLogger:
    return AuditLogger(storage=store)


@pytest.fixture
def app_settings() -> AppSettings:
    return AppSettings(
        default_currency="AUD",
        snapshot_tolerance_days=5,
        projection_horizon_months=60,
        max_payoff_months=360,
        upcoming_bill_days=14,
        cashflow_days=30,
    )

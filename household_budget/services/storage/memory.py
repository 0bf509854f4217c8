"""
In-Memory Storage

Dictionary-backed implementation of every storage interface.
Used by the tests and for local development without a backend.

Ledger rows are filed under an owner key: the household id for
household-scoped rows, otherwise the user id. A view reads the rows
filed under its scope's key. Categories and snapshots always belong to
a user, so they are filed and read by user id in either scope. Pay
schedules (recurring income) are also read by user id.
"""

from datetime import date
from typing import Any, Iterable, Optional
from uuid import UUID

import structlog

from household_budget.calculations.money import first_of_month
from household_budget.models.audit import AuditEvent
from household_budget.models.finance import (
    Account,
    Bill,
    Budget,
    Category,
    Goal,
    IncomeEntry,
    NetWorthSnapshot,
    Transaction,
    ViewScope,
)
from household_budget.services.storage.interface import (
    AuditStorageInterface,
    BillStorageInterface,
    LedgerStorageInterface,
)

logger = structlog.get_logger(__name__)

LEDGER_TABLES = (
    "transactions",
    "categories",
    "budgets",
    "income",
    "accounts",
    "snapshots",
    "goals",
)

USER_TABLES = ("categories", "snapshots")


def owner_key(scope: ViewScope, table: str = "transactions") -> str:
    if scope.is_household and table not in USER_TABLES:
        return scope.household_id
    return scope.user_id


class InMemoryStore(BillStorageInterface, LedgerStorageInterface, AuditStorageInterface):
    """
    Holds bills, ledger rows and audit events in process memory.

    Set `fail_updates_with` to an exception to make update_bill raise it,
    or `fail_reads_with` to make every bill and ledger read raise it.
    Every update_bill call is recorded in `bill_updates`.
    """

    def __init__(self):
        self._bills: dict[str, Bill] = {}
        self._ledger: dict[str, dict[str, list]] = {name: {} for name in LEDGER_TABLES}
        self._events: list[AuditEvent] = []
        self.bill_updates: list[tuple[str, str, dict[str, Any]]] = []
        self.fail_updates_with: Optional[Exception] = None
        self.fail_reads_with: Optional[Exception] = None

    # -------------------------------------------------------------------------
    # Seeding
    # -------------------------------------------------------------------------

    def add_bills(self, *bills: Bill) -> None:
        for bill in bills:
            self._bills[bill.id] = bill

    def add_rows(self, table: str, owner: str, rows: Iterable[Any]) -> None:
        """File `rows` in a ledger table under `owner` (user or household id)."""
        if table not in self._ledger:
            raise KeyError(f"Unknown ledger table: {table}")
        self._ledger[table].setdefault(owner, []).extend(rows)

    def _check_reads(self) -> None:
        if self.fail_reads_with is not None:
            raise self.fail_reads_with

    def _rows(self, table: str, scope: ViewScope) -> list:
        self._check_reads()
        return list(self._ledger[table].get(owner_key(scope, table), []))

    # -------------------------------------------------------------------------
    # Bills
    # -------------------------------------------------------------------------

    async def get_bill(self, bill_id: str, user_id: str) -> Optional[Bill]:
        self._check_reads()
        bill = self._bills.get(bill_id)
        if bill is None or bill.user_id != user_id:
            return None
        return bill

    async def update_bill(
        self,
        bill_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> bool:
        self.bill_updates.append((bill_id, user_id, dict(changes)))
        if self.fail_updates_with is not None:
            raise self.fail_updates_with

        bill = self._bills.get(bill_id)
        if bill is None or bill.user_id != user_id:
            return False

        # Validate so ISO strings land as dates, as they would from the backend
        self._bills[bill_id] = Bill.model_validate({**bill.model_dump(), **changes})
        logger.debug("bill_updated", bill_id=bill_id, columns=sorted(changes))
        return True

    async def list_bills(
        self,
        scope: ViewScope,
        active_only: bool = True,
    ) -> list[Bill]:
        self._check_reads()
        if scope.is_household:
            bills = [b for b in self._bills.values() if b.household_id == scope.household_id]
        else:
            bills = [
                b for b in self._bills.values()
                if b.user_id == scope.user_id and b.household_id is None
            ]
        if active_only:
            bills = [b for b in bills if b.is_active]
        return sorted(bills, key=lambda b: b.next_due)

    # -------------------------------------------------------------------------
    # Ledger
    # -------------------------------------------------------------------------

    async def list_transactions(
        self,
        scope: ViewScope,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        rows = self._rows("transactions", scope)
        if date_from is not None:
            rows = [t for t in rows if t.date >= date_from]
        if date_to is not None:
            rows = [t for t in rows if t.date <= date_to]
        return sorted(rows, key=lambda t: t.date, reverse=True)

    async def list_categories(self, scope: ViewScope) -> list[Category]:
        return self._rows("categories", scope)

    async def list_budgets(self, scope: ViewScope, month: date) -> list[Budget]:
        wanted = first_of_month(month)
        return [b for b in self._rows("budgets", scope) if first_of_month(b.month) == wanted]

    async def list_income(self, scope: ViewScope, month: date) -> list[IncomeEntry]:
        wanted = first_of_month(month)
        return [i for i in self._rows("income", scope) if first_of_month(i.month) == wanted]

    async def list_recurring_income(self, scope: ViewScope) -> list[IncomeEntry]:
        self._check_reads()
        # Pay schedules belong to a user, whatever the scope
        rows = self._ledger["income"].get(scope.user_id, [])
        return [i for i in rows if i.is_recurring]

    async def list_accounts(self, scope: ViewScope) -> list[Account]:
        return self._rows("accounts", scope)

    async def list_snapshots(self, scope: ViewScope) -> list[NetWorthSnapshot]:
        return sorted(self._rows("snapshots", scope), key=lambda s: s.snapshot_date)

    async def list_goals(self, scope: ViewScope) -> list[Goal]:
        return self._rows("goals", scope)

    # -------------------------------------------------------------------------
    # Audit
    # -------------------------------------------------------------------------

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        events = [e for e in self._events if e.correlation_id == correlation_id]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        return sorted(events, key=lambda e: e.timestamp)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        return sorted(self._events, key=lambda e: e.timestamp, reverse=True)[:limit]

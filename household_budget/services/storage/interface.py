"""
Abstract Storage Interface

DESIGN DECISION: Services talk to storage only through these interfaces.
This allows us to:
1. Run against the hosted REST backend in production
2. Use in-memory storage for testing
3. Keep calculations decoupled from where rows come from

Row-level access rules live in the backend. Implementations pass the
requesting user (or household) through and never widen it.
"""

from abc import ABC, abstractmethod
from datetime import date
from typing import Any, Optional
from uuid import UUID

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


class BillStorageInterface(ABC):
    """
    Abstract interface for bill storage operations.
    """

    @abstractmethod
    async def get_bill(self, bill_id: str, user_id: str) -> Optional[Bill]:
        """
        Retrieve one bill visible to `user_id`.

        Returns:
            The bill if found, None otherwise
        """
        pass

    @abstractmethod
    async def update_bill(
        self,
        bill_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> bool:
        """
        Write `changes` to one bill in a single operation.

        Args:
            bill_id: The bill's backend identifier
            user_id: Owner the update is scoped to
            changes: Column -> JSON-ready value

        Returns:
            True if a row was updated

        Raises:
            StorageError: If the update fails
        """
        pass

    @abstractmethod
    async def list_bills(
        self,
        scope: ViewScope,
        active_only: bool = True,
    ) -> list[Bill]:
        """Bills in scope, ordered by next_due ascending."""
        pass


class LedgerStorageInterface(ABC):
    """
    Read access to the rows the dashboards are computed from.
    """

    @abstractmethod
    async def list_transactions(
        self,
        scope: ViewScope,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        """Transactions in scope with date_from <= date <= date_to."""
        pass

    @abstractmethod
    async def list_categories(self, scope: ViewScope) -> list[Category]:
        pass

    @abstractmethod
    async def list_budgets(self, scope: ViewScope, month: date) -> list[Budget]:
        """Budgets whose month is the first day of `month`."""
        pass

    @abstractmethod
    async def list_income(self, scope: ViewScope, month: date) -> list[IncomeEntry]:
        pass

    @abstractmethod
    async def list_recurring_income(self, scope: ViewScope) -> list[IncomeEntry]:
        """The user's recurring income entries, in any month."""
        pass

    @abstractmethod
    async def list_accounts(self, scope: ViewScope) -> list[Account]:
        pass

    @abstractmethod
    async def list_snapshots(self, scope: ViewScope) -> list[NetWorthSnapshot]:
        """Net worth snapshots ordered by snapshot_date ascending."""
        pass

    @abstractmethod
    async def list_goals(self, scope: ViewScope) -> list[Goal]:
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        """Related events in chronological order."""
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity.

        Args:
            entity_type: Type of entity (e.g., 'bill', 'dashboard')
            entity_id: The entity's ID

        Returns:
            List of events in chronological order
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """Most recent events, newest first."""
        pass


# Service name used when auditing backend connectivity failures
BACKEND_SERVICE = "backend"


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class BackendUnavailableError(StorageError):
    """Could not reach the storage backend."""
    pass

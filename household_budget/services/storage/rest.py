"""
REST Backend Storage Implementation

Talks to a hosted database-as-a-service through its PostgREST-style API:
one URL per table, filters as query parameters (`user_id=eq.<id>`),
JSON rows in and out.

DESIGN DECISION: Access rules live in the backend (row-level security
keyed on the access token). We still send the scope filters explicitly
so a misconfigured policy can never widen what a view reads.

Scope rules:
- Personal scope: rows owned by the user that belong to no household
- Household scope: rows shared with the household
- Categories, snapshots and pay schedules are always the user's own
"""

import json
from datetime import date
from typing import Any, Optional, TypeVar
from uuid import UUID

import httpx
import structlog
from pydantic import BaseModel, ValidationError
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)
from tenacity.wait import wait_base

from household_budget.calculations.money import first_of_month
from household_budget.config import BackendSettings, get_settings
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
    BackendUnavailableError,
    BillStorageInterface,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)

logger = structlog.get_logger(__name__)

ModelT = TypeVar("ModelT", bound=BaseModel)

Params = list[tuple[str, str]]


# Table names on the backend
BILLS_TABLE = "bills"
TRANSACTIONS_TABLE = "transactions"
CATEGORIES_TABLE = "categories"
BUDGETS_TABLE = "budgets"
INCOME_TABLE = "income_entries"
ACCOUNTS_TABLE = "accounts"
SNAPSHOTS_TABLE = "net_worth_snapshots"
GOALS_TABLE = "goals"
AUDIT_TABLE = "audit_events"


def scope_filters(scope: ViewScope) -> Params:
    """Query parameters restricting a table to the rows a scope may see."""
    if scope.is_household:
        return [("household_id", f"eq.{scope.household_id}")]
    return [("user_id", f"eq.{scope.user_id}"), ("household_id", "is.null")]


def user_filter(user_id: str) -> Params:
    return [("user_id", f"eq.{user_id}")]


def parse_rows(model: type[ModelT], rows: list[dict], table: str) -> list[ModelT]:
    """Validate backend rows into models, skipping malformed ones."""
    parsed = []
    for row in rows:
        try:
            parsed.append(model.model_validate(row))
        except ValidationError as e:
            logger.warning(
                "skipping_malformed_row",
                table=table,
                row_id=row.get("id"),
                errors=e.error_count(),
            )
    return parsed


class RestBackendClient:
    """
    Low-level client for the hosted REST API.

    Handles authentication headers and retries transport failures.
    Pass `transport` to route requests somewhere other than the network
    (httpx.MockTransport in tests).
    """

    def __init__(
        self,
        settings: Optional[BackendSettings] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        retry_wait: Optional[wait_base] = None,
    ):
        self._settings = settings or get_settings().backend
        self._transport = transport
        self._retry_wait = retry_wait or wait_exponential(multiplier=0.5, min=0.5, max=5)
        self._client: Optional[httpx.AsyncClient] = None

    def _headers(self) -> dict[str, str]:
        token = self._settings.access_token or self._settings.api_key
        return {
            "apikey": self._settings.api_key,
            "Authorization": f"Bearer {token}",
            "Content-Type": "application/json",
            "Accept": "application/json",
        }

    def connect(self) -> httpx.AsyncClient:
        """Create the underlying HTTP client on first use."""
        if self._client is None:
            self._client = httpx.AsyncClient(
                base_url=f"{self._settings.url}{self._settings.rest_path}",
                headers=self._headers(),
                timeout=self._settings.timeout_seconds,
                transport=self._transport,
            )
        return self._client

    async def aclose(self) -> None:
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    async def __aenter__(self) -> "RestBackendClient":
        self.connect()
        return self

    async def __aexit__(self, *exc_info) -> None:
        await self.aclose()

    async def _request(
        self,
        method: str,
        table: str,
        params: Optional[Params] = None,
        body: Any = None,
        headers: Optional[dict[str, str]] = None,
    ) -> httpx.Response:
        client = self.connect()
        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(self._settings.max_retries),
                wait=self._retry_wait,
                retry=retry_if_exception_type(httpx.TransportError),
                reraise=True,
            ):
                with attempt:
                    response = await client.request(
                        method,
                        f"/{table}",
                        params=params,
                        json=body,
                        headers=headers,
                    )
        except httpx.TransportError as e:
            logger.error("backend_unreachable", table=table, method=method, error=str(e))
            raise BackendUnavailableError(f"Backend unreachable ({method} {table}): {e}") from e

        if response.status_code == 404:
            raise NotFoundError(f"Table not found: {table}")
        if response.status_code >= 400:
            logger.error(
                "backend_request_failed",
                table=table,
                method=method,
                status=response.status_code,
                body=response.text[:500],
            )
            raise StorageError(
                f"{method} {table} failed with status {response.status_code}: {response.text[:200]}"
            )
        return response

    async def select(
        self,
        table: str,
        filters: Params,
        order: Optional[str] = None,
        limit: Optional[int] = None,
    ) -> list[dict]:
        params: Params = [("select", "*"), *filters]
        if order:
            params.append(("order", order))
        if limit is not None:
            params.append(("limit", str(limit)))
        response = await self._request("GET", table, params=params)
        return response.json()

    async def update(
        self,
        table: str,
        filters: Params,
        changes: dict[str, Any],
    ) -> list[dict]:
        """PATCH matching rows; returns the updated rows."""
        response = await self._request(
            "PATCH",
            table,
            params=filters,
            body=changes,
            headers={"Prefer": "return=representation"},
        )
        return response.json()

    async def insert(self, table: str, row: dict[str, Any]) -> None:
        await self._request(
            "POST",
            table,
            body=row,
            headers={"Prefer": "return=minimal"},
        )


class RestBillStorage(BillStorageInterface):
    """Bills table over the REST API."""

    def __init__(self, client: Optional[RestBackendClient] = None):
        self._client = client or RestBackendClient()

    async def get_bill(self, bill_id: str, user_id: str) -> Optional[Bill]:
        rows = await self._client.select(
            BILLS_TABLE,
            [("id", f"eq.{bill_id}"), *user_filter(user_id)],
            limit=1,
        )
        bills = parse_rows(Bill, rows, BILLS_TABLE)
        return bills[0] if bills else None

    async def update_bill(
        self,
        bill_id: str,
        user_id: str,
        changes: dict[str, Any],
    ) -> bool:
        updated = await self._client.update(
            BILLS_TABLE,
            [("id", f"eq.{bill_id}"), *user_filter(user_id)],
            changes,
        )
        return len(updated) > 0

    async def list_bills(
        self,
        scope: ViewScope,
        active_only: bool = True,
    ) -> list[Bill]:
        filters = scope_filters(scope)
        if active_only:
            filters.append(("is_active", "eq.true"))
        rows = await self._client.select(BILLS_TABLE, filters, order="next_due.asc")
        return parse_rows(Bill, rows, BILLS_TABLE)


class RestLedgerStorage(LedgerStorageInterface):
    """Transactions, budgets, income, accounts, snapshots and goals."""

    def __init__(self, client: Optional[RestBackendClient] = None):
        self._client = client or RestBackendClient()

    async def list_transactions(
        self,
        scope: ViewScope,
        date_from: Optional[date] = None,
        date_to: Optional[date] = None,
    ) -> list[Transaction]:
        filters = scope_filters(scope)
        if date_from is not None:
            filters.append(("date", f"gte.{date_from.isoformat()}"))
        if date_to is not None:
            filters.append(("date", f"lte.{date_to.isoformat()}"))
        rows = await self._client.select(TRANSACTIONS_TABLE, filters, order="date.desc")
        return parse_rows(Transaction, rows, TRANSACTIONS_TABLE)

    async def list_categories(self, scope: ViewScope) -> list[Category]:
        rows = await self._client.select(
            CATEGORIES_TABLE,
            user_filter(scope.user_id),
            order="sort_order.asc",
        )
        return parse_rows(Category, rows, CATEGORIES_TABLE)

    async def list_budgets(self, scope: ViewScope, month: date) -> list[Budget]:
        filters = scope_filters(scope) + [("month", f"eq.{first_of_month(month).isoformat()}")]
        rows = await self._client.select(BUDGETS_TABLE, filters)
        return parse_rows(Budget, rows, BUDGETS_TABLE)

    async def list_income(self, scope: ViewScope, month: date) -> list[IncomeEntry]:
        filters = scope_filters(scope) + [("month", f"eq.{first_of_month(month).isoformat()}")]
        rows = await self._client.select(INCOME_TABLE, filters)
        return parse_rows(IncomeEntry, rows, INCOME_TABLE)

    async def list_recurring_income(self, scope: ViewScope) -> list[IncomeEntry]:
        filters = user_filter(scope.user_id) + [("is_recurring", "eq.true")]
        rows = await self._client.select(INCOME_TABLE, filters)
        return parse_rows(IncomeEntry, rows, INCOME_TABLE)

    async def list_accounts(self, scope: ViewScope) -> list[Account]:
        rows = await self._client.select(ACCOUNTS_TABLE, scope_filters(scope), order="name.asc")
        return parse_rows(Account, rows, ACCOUNTS_TABLE)

    async def list_snapshots(self, scope: ViewScope) -> list[NetWorthSnapshot]:
        rows = await self._client.select(
            SNAPSHOTS_TABLE,
            user_filter(scope.user_id),
            order="snapshot_date.asc",
        )
        return parse_rows(NetWorthSnapshot, rows, SNAPSHOTS_TABLE)

    async def list_goals(self, scope: ViewScope) -> list[Goal]:
        rows = await self._client.select(GOALS_TABLE, scope_filters(scope), order="created_at.asc")
        return parse_rows(Goal, rows, GOALS_TABLE)


class RestAuditStorage(AuditStorageInterface):
    """
    Audit events table over the REST API.

    Audit events are append-only.
    """

    def __init__(self, client: Optional[RestBackendClient] = None):
        self._client = client or RestBackendClient()

    async def append_event(self, event: AuditEvent) -> bool:
        try:
            await self._client.insert(AUDIT_TABLE, event.to_record())
            return True
        except StorageError as e:
            # Audit logging should not break the main flow
            logger.warning("audit_event_not_persisted", event_id=str(event.event_id), error=str(e))
            return False

    async def get_events_by_correlation_id(
        self,
        correlation_id: UUID,
    ) -> list[AuditEvent]:
        rows = await self._client.select(
            AUDIT_TABLE,
            [("correlation_id", f"eq.{correlation_id}")],
            order="timestamp.asc",
        )
        return parse_rows(AuditEvent, [_decode_details(r) for r in rows], AUDIT_TABLE)

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        rows = await self._client.select(
            AUDIT_TABLE,
            [("entity_type", f"eq.{entity_type}"), ("entity_id", f"eq.{entity_id}")],
            order="timestamp.asc",
        )
        return parse_rows(AuditEvent, [_decode_details(r) for r in rows], AUDIT_TABLE)

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        rows = await self._client.select(AUDIT_TABLE, [], order="timestamp.desc", limit=limit)
        return parse_rows(AuditEvent, [_decode_details(r) for r in rows], AUDIT_TABLE)


def _decode_details(row: dict) -> dict:
    """details is stored as JSON text; turn it back into a dict."""
    raw = row.get("details")
    if isinstance(raw, str):
        return {**row, "details": json.loads(raw) if raw else {}}
    if raw is None:
        return {**row, "details": {}}
    return row

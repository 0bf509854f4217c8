"""Tests for the REST backend storage, using httpx.MockTransport."""

import json
from datetime import date
from decimal import Decimal
from uuid import uuid4

import httpx
import pytest
from tenacity import wait_none

from household_budget.config import BackendSettings
from household_budget.models import AuditEventType, Frequency, ViewScope
from household_budget.models.audit import AuditEventBuilder
from household_budget.services.storage import (
    BackendUnavailableError,
    NotFoundError,
    RestAuditStorage,
    RestBackendClient,
    RestBillStorage,
    RestLedgerStorage,
    StorageError,
)
from household_budget.services.storage.rest import scope_filters

BILL_ROW = {
    "id": "bill-1",
    "user_id": "user-1",
    "household_id": None,
    "name": "Rent",
    "amount": "1200.50",
    "frequency": "monthly",
    "next_due": "2024-03-20",
    "is_one_off": False,
    "is_active": True,
}


class Backend:
    """Records requests and answers each with the next queued response."""

    def __init__(self, *responses):
        self.requests: list[httpx.Request] = []
        self._responses = list(responses)

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        response = self._responses.pop(0) if len(self._responses) > 1 else self._responses[0]
        if isinstance(response, Exception):
            raise response
        return response

    @property
    def last(self) -> httpx.Request:
        return self.requests[-1]

    def params(self, index: int = -1) -> list[tuple[str, str]]:
        return self.requests[index].url.params.multi_items()


def _client(backend: Backend, **settings) -> RestBackendClient:
    return RestBackendClient(
        BackendSettings(url="https://db.example.co/", api_key="anon-key", **settings),
        transport=httpx.MockTransport(backend),
        retry_wait=wait_none(),
    )


def _json(rows, status_code: int = 200) -> httpx.Response:
    return httpx.Response(status_code, json=rows)


class TestScopeFilters:
    """Tests for scope-to-query translation."""

    def test_personal(self):
        assert scope_filters(ViewScope.personal("u1")) == [
            ("user_id", "eq.u1"),
            ("household_id", "is.null"),
        ]

    def test_household(self):
        assert scope_filters(ViewScope.household("u1", "h1")) == [("household_id", "eq.h1")]


class TestRestBackendClient:
    """Tests for requests, headers and error mapping."""

    @pytest.mark.asyncio
    async def test_headers_and_url(self):
        backend = Backend(_json([]))
        async with _client(backend) as client:
            await client.select("bills", [])

        request = backend.last
        assert str(request.url).startswith("https://db.example.co/rest/v1/bills?")
        assert request.headers["apikey"] == "anon-key"
        assert request.headers["Authorization"] == "Bearer anon-key"

    @pytest.mark.asyncio
    async def test_access_token_preferred_for_bearer(self):
        backend = Backend(_json([]))
        async with _client(backend, access_token="user-jwt") as client:
            await client.select("bills", [])
        assert backend.last.headers["Authorization"] == "Bearer user-jwt"

    @pytest.mark.asyncio
    async def test_transport_errors_retried(self):
        backend = Backend(httpx.ConnectError("refused"), _json([{"id": "x"}]))
        async with _client(backend) as client:
            rows = await client.select("bills", [])
        assert rows == [{"id": "x"}]
        assert len(backend.requests) == 2

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        backend = Backend(httpx.ConnectError("refused"))
        async with _client(backend, max_retries=2) as client:
            with pytest.raises(BackendUnavailableError, match="unreachable"):
                await client.select("bills", [])
        assert len(backend.requests) == 2

    @pytest.mark.asyncio
    async def test_server_error_not_retried(self):
        backend = Backend(httpx.Response(500, text="boom"))
        async with _client(backend) as client:
            with pytest.raises(StorageError, match="500"):
                await client.select("bills", [])
        assert len(backend.requests) == 1

    @pytest.mark.asyncio
    async def test_missing_table(self):
        backend = Backend(httpx.Response(404))
        async with _client(backend) as client:
            with pytest.raises(NotFoundError):
                await client.select("nope", [])


class TestRestBillStorage:
    """Tests for the bills table."""

    @pytest.mark.asyncio
    async def test_get_bill(self):
        backend = Backend(_json([BILL_ROW]))
        storage = RestBillStorage(_client(backend))

        bill = await storage.get_bill("bill-1", "user-1")

        assert bill.amount == Decimal("1200.50")
        assert bill.frequency == Frequency.MONTHLY
        assert bill.next_due == date(2024, 3, 20)
        assert backend.params() == [
            ("select", "*"),
            ("id", "eq.bill-1"),
            ("user_id", "eq.user-1"),
            ("limit", "1"),
        ]

    @pytest.mark.asyncio
    async def test_get_missing_bill(self):
        storage = RestBillStorage(_client(Backend(_json([]))))
        assert await storage.get_bill("bill-1", "user-1") is None

    @pytest.mark.asyncio
    async def test_update_is_one_patch(self):
        backend = Backend(_json([BILL_ROW]))
        storage = RestBillStorage(_client(backend))
        changes = {"last_paid_date": "2024-03-15", "next_due": "2024-04-20"}

        assert await storage.update_bill("bill-1", "user-1", changes) is True

        assert len(backend.requests) == 1
        request = backend.last
        assert request.method == "PATCH"
        assert json.loads(request.content) == changes
        assert request.headers["Prefer"] == "return=representation"
        assert backend.params() == [("id", "eq.bill-1"), ("user_id", "eq.user-1")]

    @pytest.mark.asyncio
    async def test_update_matching_nothing(self):
        storage = RestBillStorage(_client(Backend(_json([]))))
        assert await storage.update_bill("bill-1", "user-1", {"is_active": False}) is False

    @pytest.mark.asyncio
    async def test_list_bills_household(self):
        backend = Backend(_json([BILL_ROW]))
        storage = RestBillStorage(_client(backend))

        bills = await storage.list_bills(ViewScope.household("user-1", "hh-1"))

        assert [b.id for b in bills] == ["bill-1"]
        assert backend.params() == [
            ("select", "*"),
            ("household_id", "eq.hh-1"),
            ("is_active", "eq.true"),
            ("order", "next_due.asc"),
        ]

    @pytest.mark.asyncio
    async def test_malformed_rows_skipped(self):
        broken = {k: v for k, v in BILL_ROW.items() if k != "next_due"}
        broken["id"] = "bill-2"
        storage = RestBillStorage(_client(Backend(_json([broken, BILL_ROW]))))

        bills = await storage.list_bills(ViewScope.personal("user-1"), active_only=False)
        assert [b.id for b in bills] == ["bill-1"]


class TestRestLedgerStorage:
    """Tests for the ledger tables."""

    @pytest.mark.asyncio
    async def test_transactions_date_range(self):
        backend = Backend(_json([
            {"id": "t1", "amount": "12.30", "category_id": "food", "type": "expense", "date": "2024-03-02"},
        ]))
        storage = RestLedgerStorage(_client(backend))

        rows = await storage.list_transactions(
            ViewScope.personal("user-1"),
            date_from=date(2024, 3, 1),
            date_to=date(2024, 3, 31),
        )

        assert rows[0].amount == Decimal("12.30")
        assert backend.last.url.path == "/rest/v1/transactions"
        assert backend.params() == [
            ("select", "*"),
            ("user_id", "eq.user-1"),
            ("household_id", "is.null"),
            ("date", "gte.2024-03-01"),
            ("date", "lte.2024-03-31"),
            ("order", "date.desc"),
        ]

    @pytest.mark.asyncio
    async def test_budgets_use_first_of_month(self):
        backend = Backend(_json([]))
        storage = RestLedgerStorage(_client(backend))

        await storage.list_budgets(ViewScope.household("user-1", "hh-1"), date(2024, 3, 17))

        assert ("month", "eq.2024-03-01") in backend.params()
        assert ("household_id", "eq.hh-1") in backend.params()

    @pytest.mark.asyncio
    async def test_snapshots_always_per_user(self):
        backend = Backend(_json([
            {"snapshot_date": "2024-01-31", "net_worth": "1000"},
        ]))
        storage = RestLedgerStorage(_client(backend))

        snapshots = await storage.list_snapshots(ViewScope.household("user-1", "hh-1"))

        assert snapshots[0].net_worth == Decimal("1000")
        assert backend.last.url.path == "/rest/v1/net_worth_snapshots"
        assert ("user_id", "eq.user-1") in backend.params()
        assert all(name != "household_id" for name, _ in backend.params())

    @pytest.mark.asyncio
    async def test_recurring_income_per_user(self):
        backend = Backend(_json([{
            "id": "i1", "amount": "2500", "month": "2024-01-01", "source": "Salary",
            "is_recurring": True, "pay_frequency": "fortnightly", "pay_day": 4,
            "next_pay_date": "2024-03-21",
        }]))
        storage = RestLedgerStorage(_client(backend))

        income = await storage.list_recurring_income(ViewScope.household("user-1", "hh-1"))

        assert income[0].pay_frequency == Frequency.FORTNIGHTLY
        assert income[0].has_pay_schedule
        assert backend.last.url.path == "/rest/v1/income_entries"
        assert backend.params() == [
            ("select", "*"),
            ("user_id", "eq.user-1"),
            ("is_recurring", "eq.true"),
        ]


class TestRestAuditStorage:
    """Tests for the audit events table."""

    @pytest.mark.asyncio
    async def test_append_sends_json_details(self):
        backend = Backend(httpx.Response(201))
        storage = RestAuditStorage(_client(backend))
        event = AuditEventBuilder.bill_not_found("bill-1", "user-1")

        assert await storage.append_event(event) is True

        body = json.loads(backend.last.content)
        assert backend.last.method == "POST"
        assert body["event_type"] == "bill_not_found"
        assert body["event_id"] == str(event.event_id)

    @pytest.mark.asyncio
    async def test_append_failure_returns_false(self):
        storage = RestAuditStorage(_client(Backend(httpx.Response(500, text="nope"))))
        event = AuditEventBuilder.bill_not_found("bill-1", "user-1")
        assert await storage.append_event(event) is False

    @pytest.mark.asyncio
    async def test_details_decoded(self):
        correlation_id = uuid4()
        backend = Backend(_json([{
            "event_id": str(uuid4()),
            "timestamp": "2024-03-15T10:00:00+00:00",
            "event_type": "dashboard_computed",
            "severity": "debug",
            "entity_type": "dashboard",
            "entity_id": "bills_overview",
            "correlation_id": str(correlation_id),
            "description": "Computed bills_overview view (personal)",
            "details": json.dumps({"rows": {"bills": 3}}),
        }]))
        storage = RestAuditStorage(_client(backend))

        events = await storage.get_events_by_correlation_id(correlation_id)

        assert events[0].event_type == AuditEventType.DASHBOARD_COMPUTED
        assert events[0].details == {"rows": {"bills": 3}}
        assert ("correlation_id", f"eq.{correlation_id}") in backend.params()

"""
Tests for Household Budget models

Test strategy:
1. Unit tests for models and pure calculations
2. Service tests against the in-memory store
3. No real backend calls in tests (httpx.MockTransport for the REST client)
"""

import json
from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest
from pydantic import ValidationError

from household_budget.models import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
    Bill,
    BillPaymentUpdate,
    BillState,
    BudgetComparison,
    Category,
    Frequency,
    Goal,
    ScopeKind,
    Transaction,
    ViewScope,
)


class TestFinanceModels:
    """Tests for the backend row models."""

    def test_bill_parses_backend_row(self):
        """ISO dates and numeric strings from JSON become exact types."""
        bill = Bill.model_validate({
            "id": "b1",
            "user_id": "u1",
            "name": "  Rent  ",
            "amount": "1850.50",
            "frequency": "monthly",
            "next_due": "2024-04-01",
            "is_one_off": False,
            "unexpected_column": "ignored",
        })
        assert bill.name == "Rent"
        assert bill.amount == Decimal("1850.50")
        assert bill.frequency == Frequency.MONTHLY
        assert bill.next_due == date(2024, 4, 1)
        assert bill.is_active is True

    def test_bill_keeps_unknown_frequency(self):
        """Unknown frequencies are tolerated, not rejected."""
        bill = Bill(id="b1", next_due=date(2024, 1, 1), frequency="every-blue-moon")
        assert bill.frequency == "every-blue-moon"

    def test_bill_frequency_is_case_sensitive(self):
        bill = Bill(id="b1", next_due=date(2024, 1, 1), frequency="Weekly")
        assert bill.frequency == "Weekly"
        assert bill.frequency != Frequency.WEEKLY

    def test_bill_frequency_keeps_surrounding_whitespace(self):
        bill = Bill(id="b1", next_due=date(2024, 1, 1), frequency=" weekly ")
        assert bill.frequency == " weekly "
        assert bill.frequency != Frequency.WEEKLY

    def test_bill_rejects_negative_amount(self):
        with pytest.raises(ValidationError):
            Bill(id="b1", next_due=date(2024, 1, 1), amount=Decimal("-5"))

    def test_bill_is_immutable(self):
        bill = Bill(id="b1", next_due=date(2024, 1, 1))
        with pytest.raises(ValidationError):
            bill.is_active = False

    def test_transaction_date_field(self):
        tx = Transaction.model_validate({
            "id": "t1",
            "amount": "12.30",
            "category_id": "c1",
            "date": "2024-03-02",
            "type": "expense",
        })
        assert tx.date == date(2024, 3, 2)
        assert tx.amount == Decimal("12.3")

    def test_category_defaults(self):
        category = Category(id="c1", name="Groceries")
        assert category.icon == "circle"
        assert category.color == "#94a3b8"

    def test_goal_requires_created_at(self):
        with pytest.raises(ValidationError):
            Goal(id="g1", name="House", target_amount=Decimal("1000"))


class TestViewScope:
    """Tests for personal/household scoping."""

    def test_personal_scope(self):
        scope = ViewScope.personal("u1")
        assert scope.kind == ScopeKind.PERSONAL
        assert not scope.is_household

    def test_household_scope(self):
        scope = ViewScope.household("u1", "h1")
        assert scope.is_household
        assert scope.household_id == "h1"

    def test_household_scope_requires_household_id(self):
        with pytest.raises(ValidationError, match="household_id"):
            ViewScope(user_id="u1", kind=ScopeKind.HOUSEHOLD)

    def test_scope_requires_user(self):
        with pytest.raises(ValidationError):
            ViewScope(user_id="")


class TestReportModels:
    """Tests for derived result models."""

    def test_payment_update_changes_recurring(self):
        update = BillPaymentUpdate(
            bill_id="b1",
            last_paid_date=date(2024, 3, 15),
            next_due=date(2024, 4, 20),
            resulting_state=BillState.PAID_AND_ADVANCED,
        )
        assert update.changes() == {
            "last_paid_date": "2024-03-15",
            "next_due": "2024-04-20",
        }

    def test_payment_update_changes_one_off(self):
        update = BillPaymentUpdate(
            bill_id="b1",
            last_paid_date=date(2024, 3, 15),
            is_active=False,
            resulting_state=BillState.PAID_AND_INACTIVE,
        )
        assert update.changes() == {"last_paid_date": "2024-03-15", "is_active": False}

    def test_payment_update_apply_to(self):
        bill = Bill(id="b1", next_due=date(2024, 3, 20))
        update = BillPaymentUpdate(
            bill_id="b1",
            last_paid_date=date(2024, 3, 15),
            next_due=date(2024, 4, 20),
            resulting_state=BillState.PAID_AND_ADVANCED,
        )
        paid = update.apply_to(bill)
        assert paid.next_due == date(2024, 4, 20)
        assert paid.last_paid_date == date(2024, 3, 15)
        assert bill.last_paid_date is None

    def test_budget_comparison_properties(self):
        row = BudgetComparison(
            category_id="c1",
            name="Dining",
            color="#fff",
            spent=Decimal("120"),
            budgeted=Decimal("100"),
        )
        assert row.remaining == Decimal("-20")
        assert row.is_over_budget


class TestAuditModels:
    """Tests for audit models."""

    def test_audit_event_creation(self):
        event = AuditEvent(
            event_type=AuditEventType.BILL_PAID,
            description="Paid",
        )
        assert event.severity == AuditSeverity.INFO
        assert event.timestamp.tzinfo is not None

    def test_audit_event_to_log_dict(self):
        correlation_id = uuid4()
        event = AuditEvent(
            event_type=AuditEventType.BILL_NOT_FOUND,
            entity_type="bill",
            entity_id="b1",
            correlation_id=correlation_id,
            description="Missing",
        )
        log_dict = event.to_log_dict()
        assert log_dict["event_type"] == "bill_not_found"
        assert log_dict["entity_id"] == "b1"
        assert log_dict["correlation_id"] == str(correlation_id)

    def test_audit_event_to_record_serialises_details(self):
        event = AuditEventBuilder.bill_paid(
            bill_id="b1",
            user_id="u1",
            paid_on=date(2024, 3, 15),
            next_due=date(2024, 4, 20),
            deactivated=False,
        )
        record = event.to_record()
        assert json.loads(record["details"]) == {
            "paid_on": "2024-03-15",
            "next_due": "2024-04-20",
        }

    def test_builder_bill_paid_one_off_is_deactivation(self):
        event = AuditEventBuilder.bill_paid(
            bill_id="b1",
            user_id="u1",
            paid_on=date(2024, 3, 15),
            next_due=None,
            deactivated=True,
        )
        assert event.event_type == AuditEventType.BILL_DEACTIVATED
        assert event.is_user_action

    def test_builder_bill_not_found_is_warning(self):
        event = AuditEventBuilder.bill_not_found("b1", "u1")
        assert event.severity == AuditSeverity.WARNING

    def test_builder_external_service_error(self):
        event = AuditEventBuilder.external_service_error("backend", "get_bill", "timeout", user_id="u1")
        assert event.severity == AuditSeverity.ERROR
        assert event.entity_type == "backend"
        assert event.entity_id == "get_bill"
        assert event.error_message == "timeout"
        assert event.details == {"service": "backend", "operation": "get_bill"}

    def test_builder_system_error_carries_code(self):
        event = AuditEventBuilder.system_error("bills_overview_read_failed", "status 500", user_id="u1")
        assert event.event_type == AuditEventType.SYSTEM_ERROR
        assert event.error_code == "bills_overview_read_failed"
        assert event.user_id == "u1"
        assert event.details == {}

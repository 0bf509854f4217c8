"""
Audit Models for Household Budget

Every mutation and every failed lookup is logged for audit purposes.
This provides:
1. Traceability of who marked which bill paid, and when
2. Debugging information when the backend misbehaves
3. Ability to reconstruct a bill's payment history

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import date, datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """
    Types of events we audit.
    """
    # Bill lifecycle
    BILL_PAID = "bill_paid"
    BILL_DEACTIVATED = "bill_deactivated"
    BILL_NOT_FOUND = "bill_not_found"
    BILL_UPDATE_FAILED = "bill_update_failed"

    # Read views
    DASHBOARD_COMPUTED = "dashboard_computed"

    # System events
    SYSTEM_ERROR = "system_error"
    EXTERNAL_SERVICE_ERROR = "external_service_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'bill', 'dashboard')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Backend ID of the entity this event relates to"
    )
    user_id: Optional[str] = Field(
        default=None,
        description="User the action was performed for"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = Field(
        default=None,
        description="ID to correlate related events (e.g., one request)"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )

    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "user_id": self.user_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }

    def to_record(self) -> dict:
        """
        Convert to a row for the backend's audit_events table.

        details are stored as a JSON string so the column type stays text.
        """
        record = self.to_log_dict()
        record["details"] = json.dumps(self.details, default=str) if self.details else None
        return record


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.bill_paid(bill_id, user_id, ...)
        event = AuditEventBuilder.bill_not_found(bill_id, user_id, correlation_id)
    """

    @staticmethod
    def bill_paid(
        bill_id: str,
        user_id: str,
        paid_on: date,
        next_due: Optional[date],
        deactivated: bool,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        if deactivated:
            event_type = AuditEventType.BILL_DEACTIVATED
            description = "One-off bill paid and deactivated"
        else:
            event_type = AuditEventType.BILL_PAID
            description = f"Bill paid, next due {next_due.isoformat() if next_due else 'unchanged'}"
        return AuditEvent(
            event_type=event_type,
            entity_type="bill",
            entity_id=bill_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description=description,
            details={
                "paid_on": paid_on.isoformat(),
                "next_due": next_due.isoformat() if next_due else None,
            },
            is_user_action=True,
        )

    @staticmethod
    def bill_not_found(
        bill_id: str,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_NOT_FOUND,
            severity=AuditSeverity.WARNING,
            entity_type="bill",
            entity_id=bill_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Mark-paid requested for a bill that is missing or not visible to the user",
            is_user_action=True,
        )

    @staticmethod
    def bill_update_failed(
        bill_id: str,
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.BILL_UPDATE_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="bill",
            entity_id=bill_id,
            user_id=user_id,
            correlation_id=correlation_id,
            description="Bill update was rejected by storage",
            error_message=error_message,
        )

    @staticmethod
    def dashboard_computed(
        view: str,
        scope: str,
        user_id: str,
        row_counts: dict[str, int],
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DASHBOARD_COMPUTED,
            severity=AuditSeverity.DEBUG,
            entity_type="dashboard",
            entity_id=view,
            user_id=user_id,
            correlation_id=correlation_id,
            description=f"Computed {view} view ({scope})",
            details={"scope": scope, "rows": row_counts},
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        user_id: Optional[str] = None,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        """A storage or computation failure that is not a connectivity problem."""
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"Failed: {error_type}",
            error_code=error_type,
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )

    @staticmethod
    def external_service_error(
        service: str,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> AuditEvent:
        """The hosted backend could not be reached while running `operation`."""
        return AuditEvent(
            event_type=AuditEventType.EXTERNAL_SERVICE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type=service,
            entity_id=operation,
            user_id=user_id,
            description=f"{service} unreachable during {operation}",
            error_message=error_message,
            details={"service": service, "operation": operation},
            correlation_id=correlation_id,
        )

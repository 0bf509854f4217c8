"""
Audit Logger

DESIGN DECISION: Every bill mutation and every failed lookup is logged.
This provides:
1. Traceability of payments across household members
2. Debugging capability when the backend misbehaves
3. A record users can review

The audit logger:
- Is async so it fits the storage calls around it
- Never fails the caller when persisting an event fails
- Supports correlation IDs to trace related events
"""

from datetime import date
from typing import Optional
from uuid import UUID, uuid4

import structlog

from household_budget.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from household_budget.services.storage.interface import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The backend's audit table, when a storage is given
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger(__name__)

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_bill_paid(
        self,
        bill_id: str,
        user_id: str,
        paid_on: date,
        next_due: Optional[date],
        deactivated: bool,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful mark-paid."""
        event = AuditEventBuilder.bill_paid(
            bill_id=bill_id,
            user_id=user_id,
            paid_on=paid_on,
            next_due=next_due,
            deactivated=deactivated,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_bill_not_found(
        self,
        bill_id: str,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.bill_not_found(
            bill_id=bill_id,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_bill_update_failed(
        self,
        bill_id: str,
        user_id: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        event = AuditEventBuilder.bill_update_failed(
            bill_id=bill_id,
            user_id=user_id,
            error_message=error_message,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_dashboard_computed(
        self,
        view: str,
        scope: str,
        user_id: str,
        row_counts: dict[str, int],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log which view was computed and how many rows fed it."""
        event = AuditEventBuilder.dashboard_computed(
            view=view,
            scope=scope,
            user_id=user_id,
            row_counts=row_counts,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_error(
        self,
        error_type: str,
        error_message: str,
        user_id: Optional[str] = None,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a storage failure the backend reported (bad request, missing table)."""
        event = AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            user_id=user_id,
            details=details,
            correlation_id=correlation_id,
        )
        await self.log(event)

    async def log_external_service_error(
        self,
        service: str,
        operation: str,
        error_message: str,
        user_id: Optional[str] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that `service` could not be reached while running `operation`."""
        event = AuditEventBuilder.external_service_error(
            service=service,
            operation=operation,
            error_message=error_message,
            user_id=user_id,
            correlation_id=correlation_id,
        )
        await self.log(event)


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a user action (e.g. marking a bill paid)
    and pass it through all subsequent operations.
    """
    return uuid4()

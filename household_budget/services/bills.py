"""
Bill Service

The only write path in the core: marking a bill paid.

DESIGN DECISION: All column changes for one payment go to storage in a
single update call. A bill is never observable half-paid, e.g. with
last_paid_date set but next_due still on the old cycle.
"""

from typing import Optional
from uuid import UUID

import structlog

from household_budget.audit.logger import AuditLogger, create_correlation_id
from household_budget.calculations.schedule import apply_payment
from household_budget.clock import Clock, SystemClock
from household_budget.models.reports import BillState
from household_budget.services.storage.interface import (
    BACKEND_SERVICE,
    BackendUnavailableError,
    BillStorageInterface,
    StorageError,
)

logger = structlog.get_logger(__name__)


class BillService:
    """
    Applies payments to bills.

    The clock is injected so the payment date is deterministic in tests.
    """

    def __init__(
        self,
        bill_storage: BillStorageInterface,
        clock: Optional[Clock] = None,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._bill_storage = bill_storage
        self._clock = clock or SystemClock()
        self._audit_logger = audit_logger

    async def mark_bill_paid(
        self,
        bill_id: str,
        user_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Mark one of the user's bills paid today.

        One-off bills are deactivated. Recurring bills move to their next
        due date and stay active.

        Returns:
            False if the bill does not exist or is not the user's
            (nothing is written). Otherwise the storage update result.

        Raises:
            StorageError: If the lookup or the update fails. The failure is
                audited first; an unreachable backend is audited as an
                external service error.
        """
        correlation_id = correlation_id or create_correlation_id()

        try:
            bill = await self._bill_storage.get_bill(bill_id, user_id)
        except StorageError as e:
            await self._audit_storage_failure("get_bill", e, user_id, correlation_id)
            raise
        if bill is None:
            logger.info("bill_not_found", bill_id=bill_id, user_id=user_id)
            if self._audit_logger:
                await self._audit_logger.log_bill_not_found(
                    bill_id=bill_id,
                    user_id=user_id,
                    correlation_id=correlation_id,
                )
            return False

        today = self._clock.today()
        update = apply_payment(bill, today)

        try:
            updated = await self._bill_storage.update_bill(bill_id, user_id, update.changes())
        except StorageError as e:
            await self._audit_storage_failure("update_bill", e, user_id, correlation_id)
            if self._audit_logger:
                await self._audit_logger.log_bill_update_failed(
                    bill_id=bill_id,
                    user_id=user_id,
                    error_message=str(e),
                    correlation_id=correlation_id,
                )
            raise

        if updated and self._audit_logger:
            await self._audit_logger.log_bill_paid(
                bill_id=bill_id,
                user_id=user_id,
                paid_on=today,
                next_due=update.next_due,
                deactivated=update.resulting_state == BillState.PAID_AND_INACTIVE,
                correlation_id=correlation_id,
            )

        return updated

    async def _audit_storage_failure(
        self,
        operation: str,
        error: StorageError,
        user_id: str,
        correlation_id: UUID,
    ) -> None:
        logger.error("bill_storage_failed", operation=operation, user_id=user_id, error=str(error))
        if not self._audit_logger:
            return
        if isinstance(error, BackendUnavailableError):
            await self._audit_logger.log_external_service_error(
                service=BACKEND_SERVICE,
                operation=operation,
                error_message=str(error),
                user_id=user_id,
                correlation_id=correlation_id,
            )
        elif operation != "update_bill":
            # Rejected updates already get a bill_update_failed event
            await self._audit_logger.log_error(
                error_type=f"{operation}_failed",
                error_message=str(error),
                user_id=user_id,
                correlation_id=correlation_id,
            )

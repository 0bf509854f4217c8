"""
Services package.

BillService and DashboardService live in services.bills and
services.dashboard; import them from there.
"""

from household_budget.services.storage import (
    AuditStorageInterface,
    BackendUnavailableError,
    BillStorageInterface,
    InMemoryStore,
    LedgerStorageInterface,
    NotFoundError,
    RestAuditStorage,
    RestBackendClient,
    RestBillStorage,
    RestLedgerStorage,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "BackendUnavailableError",
    "BillStorageInterface",
    "InMemoryStore",
    "LedgerStorageInterface",
    "NotFoundError",
    "RestAuditStorage",
    "RestBackendClient",
    "RestBillStorage",
    "RestLedgerStorage",
    "StorageError",
]

"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
The hosted REST backend is used in production; InMemoryStore in tests.
"""

from household_budget.services.storage.interface import (
    AuditStorageInterface,
    BACKEND_SERVICE,
    BackendUnavailableError,
    BillStorageInterface,
    LedgerStorageInterface,
    NotFoundError,
    StorageError,
)
from household_budget.services.storage.memory import InMemoryStore
from household_budget.services.storage.rest import (
    RestAuditStorage,
    RestBackendClient,
    RestBillStorage,
    RestLedgerStorage,
)

__all__ = [
    "BACKEND_SERVICE",
    # Interfaces
    "AuditStorageInterface",
    "BillStorageInterface",
    "LedgerStorageInterface",
    # Exceptions
    "BackendUnavailableError",
    "NotFoundError",
    "StorageError",
    # Implementations
    "InMemoryStore",
    "RestAuditStorage",
    "RestBackendClient",
    "RestBillStorage",
    "RestLedgerStorage",
]

"""
Storage Services Package

Provides the abstract document-store interface, a Cloud Firestore
backend, an in-memory backend and the typed finance repository.
"""

from finsight.services.storage.interface import (
    ConnectionError,
    DocumentStore,
    DuplicateError,
    Filter,
    NotFoundError,
    PartialClearError,
    StorageError,
    WriteBatch,
)
from finsight.services.storage.memory import InMemoryDocumentStore
from finsight.services.storage.repository import FinanceRepository

__all__ = [
    # Interfaces
    "DocumentStore",
    "Filter",
    "WriteBatch",
    # Exceptions
    "ConnectionError",
    "DuplicateError",
    "NotFoundError",
    "PartialClearError",
    "StorageError",
    # Implementations
    "FinanceRepository",
    "InMemoryDocumentStore",
]

"""Services package."""

from finsight.services.auth import (
    AuthError,
    AuthSession,
    FirebaseAuthService,
)
from finsight.services.storage import (
    ConnectionError,
    DocumentStore,
    DuplicateError,
    Filter,
    FinanceRepository,
    InMemoryDocumentStore,
    NotFoundError,
    PartialClearError,
    StorageError,
    WriteBatch,
)

__all__ = [
    # Auth services
    "AuthError",
    "AuthSession",
    "FirebaseAuthService",
    # Storage services
    "ConnectionError",
    "DocumentStore",
    "DuplicateError",
    "Filter",
    "FinanceRepository",
    "InMemoryDocumentStore",
    "NotFoundError",
    "PartialClearError",
    "StorageError",
    "WriteBatch",
]

"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract document-store interface.
This allows us to:
1. Run against Cloud Firestore in production
2. Use in-memory storage for testing and offline demo mode
3. Keep business logic decoupled from the storage client

The interface is intentionally small - we're not building an ORM.
Documents are plain dicts addressed by a slash-separated collection
path ("users/{uid}/accounts") and a document id. Model mapping lives
in FinanceRepository.
"""

from abc import ABC, abstractmethod
from typing import Any, NamedTuple, Optional, Sequence

FILTER_OPERATORS = frozenset({"==", "<", "<=", ">", ">=", "in"})


class Filter(NamedTuple):
    """A single field condition, e.g. Filter("date", ">=", "2024-07-01")."""
    field: str
    op: str
    value: Any

    def validate(self) -> "Filter":
        if self.op not in FILTER_OPERATORS:
            raise ValueError(f"Unsupported filter operator: {self.op}")
        return self


class WriteBatch(ABC):
    """
    A group of writes committed together.

    Writes are buffered until commit(). A failed commit leaves every
    document it touched unchanged.
    """

    @abstractmethod
    def set(self, path: str, doc_id: str, data: dict, merge: bool = False) -> None:
        """Create or overwrite a document (merge keeps unspecified fields)."""
        pass

    @abstractmethod
    def update(self, path: str, doc_id: str, data: dict) -> None:
        """
        Update fields of an existing document.

        Raises:
            NotFoundError: At commit time, if the document is missing
        """
        pass

    @abstractmethod
    def delete(self, path: str, doc_id: str) -> None:
        pass

    @abstractmethod
    async def commit(self) -> None:
        """
        Apply all buffered writes.

        Raises:
            StorageError: If the commit fails
        """
        pass

    @abstractmethod
    def __len__(self) -> int:
        pass


class DocumentStore(ABC):
    """
    Abstract interface for document storage.

    Any storage implementation (Firestore, in-memory, etc.) must
    implement these methods. Documents returned by reads always carry
    their id under the "id" key.
    """

    @abstractmethod
    async def get_documents(
        self,
        path: str,
        filters: Optional[Sequence[Filter]] = None,
    ) -> list[dict]:
        """
        List documents in a collection.

        Args:
            path: Collection path
            filters: Conditions that must all hold

        Returns:
            Matching documents, in no particular order
        """
        pass

    @abstractmethod
    async def get_document(self, path: str, doc_id: str) -> Optional[dict]:
        """Fetch one document, or None if it does not exist."""
        pass

    @abstractmethod
    async def add_document(self, path: str, data: dict) -> str:
        """
        Create a document with a generated id.

        Returns:
            The new document id
        """
        pass

    @abstractmethod
    async def set_document(
        self,
        path: str,
        doc_id: str,
        data: dict,
        merge: bool = False,
    ) -> None:
        pass

    @abstractmethod
    async def delete_document(self, path: str, doc_id: str) -> None:
        """Delete one document. Deleting a missing document is a no-op."""
        pass

    @abstractmethod
    def batch(self) -> WriteBatch:
        pass

    @abstractmethod
    def new_id(self, path: str) -> str:
        """Generate an id for a document not yet written."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class NotFoundError(StorageError):
    """Entity not found in storage."""
    pass


class DuplicateError(StorageError):
    """Attempted to insert a duplicate entity."""
    pass


class ConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass


class PartialClearError(StorageError):
    """
    A multi-commit clear stopped part way.

    Commits that already succeeded are not rolled back.
    """

    def __init__(self, message: str, cleared_account_ids: list[str]):
        super().__init__(message)
        self.cleared_account_ids = cleared_account_ids

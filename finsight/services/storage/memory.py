"""
In-Memory Storage Implementation

Used by the test suite and by the app's offline demo mode when no
Firestore credentials are configured. Semantics follow Firestore:
batches are atomic, update() on a missing document fails the whole
commit, and deletes of missing documents are no-ops.
"""

import copy
import operator
from typing import Any, Callable, Optional, Sequence
from uuid import uuid4

from finsight.services.storage.interface import (
    DocumentStore,
    Filter,
    NotFoundError,
    StorageError,
    WriteBatch,
)

_OPERATORS: dict[str, Callable[[Any, Any], bool]] = {
    "==": operator.eq,
    "<": operator.lt,
    "<=": operator.le,
    ">": operator.gt,
    ">=": operator.ge,
    "in": lambda value, options: value in options,
}


def _matches(doc: dict, filters: Sequence[Filter]) -> bool:
    for f in filters:
        f.validate()
        if f.field not in doc:
            return False
        value = doc[f.field]
        try:
            if not _OPERATORS[f.op](value, f.value):
                return False
        except TypeError:
            return False
    return True


class InMemoryWriteBatch(WriteBatch):
    """Buffers writes and applies them in one step on commit."""

    def __init__(self, store: "InMemoryDocumentStore"):
        self._store = store
        self._ops: list[tuple] = []

    def set(self, path: str, doc_id: str, data: dict, merge: bool = False) -> None:
        self._ops.append(("set", path, doc_id, copy.deepcopy(data), merge))

    def update(self, path: str, doc_id: str, data: dict) -> None:
        self._ops.append(("update", path, doc_id, copy.deepcopy(data), True))

    def delete(self, path: str, doc_id: str) -> None:
        self._ops.append(("delete", path, doc_id, None, False))

    async def commit(self) -> None:
        self._store._before_commit()
        # Apply against a copy so a failure leaves the store untouched
        staged = copy.deepcopy(self._store._collections)
        for kind, path, doc_id, data, merge in self._ops:
            docs = staged.setdefault(path, {})
            if kind == "delete":
                docs.pop(doc_id, None)
            elif kind == "update":
                if doc_id not in docs:
                    raise NotFoundError(f"No document {path}/{doc_id} to update")
                docs[doc_id].update(data)
            elif merge and doc_id in docs:
                docs[doc_id].update(data)
            else:
                docs[doc_id] = data
        self._store._collections = staged
        self._ops = []

    def __len__(self) -> int:
        return len(self._ops)


class InMemoryDocumentStore(DocumentStore):
    """
    Dict-backed document store.

    Args:
        fail_after_commits: If set, every batch commit after this many
            successful ones raises StorageError. Lets tests exercise
            partially applied multi-commit operations.
    """

    def __init__(self, fail_after_commits: Optional[int] = None):
        self._collections: dict[str, dict[str, dict]] = {}
        self.fail_after_commits = fail_after_commits
        self.commit_count = 0

    def _before_commit(self) -> None:
        if self.fail_after_commits is not None and self.commit_count >= self.fail_after_commits:
            raise StorageError("Simulated commit failure")
        self.commit_count += 1

    async def get_documents(
        self,
        path: str,
        filters: Optional[Sequence[Filter]] = None,
    ) -> list[dict]:
        docs = self._collections.get(path, {})
        return [
            {**copy.deepcopy(data), "id": doc_id}
            for doc_id, data in docs.items()
            if _matches(data, filters or ())
        ]

    async def get_document(self, path: str, doc_id: str) -> Optional[dict]:
        data = self._collections.get(path, {}).get(doc_id)
        if data is None:
            return None
        return {**copy.deepcopy(data), "id": doc_id}

    async def add_document(self, path: str, data: dict) -> str:
        doc_id = self.new_id(path)
        await self.set_document(path, doc_id, data)
        return doc_id

    async def set_document(
        self,
        path: str,
        doc_id: str,
        data: dict,
        merge: bool = False,
    ) -> None:
        docs = self._collections.setdefault(path, {})
        if merge and doc_id in docs:
            docs[doc_id].update(copy.deepcopy(data))
        else:
            docs[doc_id] = copy.deepcopy(data)

    async def delete_document(self, path: str, doc_id: str) -> None:
        self._collections.get(path, {}).pop(doc_id, None)

    def batch(self) -> InMemoryWriteBatch:
        return InMemoryWriteBatch(self)

    def new_id(self, path: str) -> str:
        return uuid4().hex

    def collection_size(self, path: str) -> int:
        """Number of documents stored under a collection path."""
        return len(self._collections.get(path, {}))

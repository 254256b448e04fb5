"""
Cloud Firestore Storage Implementation

DESIGN DECISION: Firestore is the production backend because:
1. Per-user subcollections map directly onto our ownership model
2. Batched writes give us atomic multi-document changes
3. No database server to run

TRADEOFFS:
- No server-side constraints (uniqueness is enforced in the flows)
- A batch holds at most 500 writes; bigger cascades are split into
  sequential commits and lose atomicity across chunks
- Limited query capabilities (complex reporting is done in Python)
"""

from typing import Optional, Sequence

import structlog
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2.service_account import Credentials
from tenacity import retry, retry_if_exception_type, stop_after_attempt, wait_exponential

from finsight.config import get_settings
from finsight.services.storage.interface import (
    ConnectionError,
    DocumentStore,
    Filter,
    NotFoundError,
    StorageError,
    WriteBatch,
)

MAX_BATCH_WRITES = 500

logger = structlog.get_logger(__name__)


class FirestoreClient:
    """
    Low-level Firestore client wrapper.

    Handles authentication. Connecting is not retried here; the store's
    read retry covers it.
    """

    def __init__(self):
        self._client: Optional[firestore.AsyncClient] = None
        self._settings = get_settings().firebase

    def connect(self) -> firestore.AsyncClient:
        """
        Establish connection to Firestore.

        Uses service account credentials for authentication.
        """
        if self._client is None:
            try:
                credentials = Credentials.from_service_account_file(
                    self._settings.credentials_path,
                    scopes=["https://www.googleapis.com/auth/datastore"],
                )
                self._client = firestore.AsyncClient(
                    project=self._settings.project_id,
                    credentials=credentials,
                    database=self._settings.database,
                )
            except FileNotFoundError:
                raise ConnectionError(
                    f"Firebase credentials file not found: {self._settings.credentials_path}"
                )
            except Exception as e:
                raise ConnectionError(f"Failed to connect to Firestore: {e}")

        return self._client


class FirestoreWriteBatch(WriteBatch):
    """
    Buffers writes and commits them in chunks of at most 500.

    Each chunk is atomic on its own.
    """

    def __init__(self, client: firestore.AsyncClient):
        self._client = client
        self._ops: list[tuple] = []

    def _ref(self, path: str, doc_id: str):
        return self._client.collection(path).document(doc_id)

    def set(self, path: str, doc_id: str, data: dict, merge: bool = False) -> None:
        self._ops.append(("set", self._ref(path, doc_id), data, merge))

    def update(self, path: str, doc_id: str, data: dict) -> None:
        self._ops.append(("update", self._ref(path, doc_id), data, False))

    def delete(self, path: str, doc_id: str) -> None:
        self._ops.append(("delete", self._ref(path, doc_id), None, False))

    async def commit(self) -> None:
        chunks = [
            self._ops[i:i + MAX_BATCH_WRITES]
            for i in range(0, len(self._ops), MAX_BATCH_WRITES)
        ]
        if len(chunks) > 1:
            logger.warning(
                "batch_split",
                write_count=len(self._ops),
                chunk_count=len(chunks),
            )

        for number, chunk in enumerate(chunks, start=1):
            batch = self._client.batch()
            for kind, ref, data, merge in chunk:
                if kind == "set":
                    batch.set(ref, data, merge=merge)
                elif kind == "update":
                    batch.update(ref, data)
                else:
                    batch.delete(ref)
            try:
                await batch.commit()
            except Exception as e:
                if "NOT_FOUND" in str(e) or "No document to update" in str(e):
                    raise NotFoundError(f"Batch update target missing: {e}")
                raise StorageError(
                    f"Failed to commit batch chunk {number}/{len(chunks)}: {e}"
                )
        self._ops = []

    def __len__(self) -> int:
        return len(self._ops)


class FirestoreDocumentStore(DocumentStore):
    """
    Firestore implementation of the document store.

    Reads are retried; writes are not, so a failed write surfaces to
    the caller exactly once.
    """

    def __init__(self, client: Optional[FirestoreClient] = None):
        self._client = client or FirestoreClient()

    @property
    def db(self) -> firestore.AsyncClient:
        return self._client.connect()

    @retry(
        retry=retry_if_exception_type(StorageError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def get_documents(
        self,
        path: str,
        filters: Optional[Sequence[Filter]] = None,
    ) -> list[dict]:
        query = self.db.collection(path)
        for f in filters or ():
            f.validate()
            query = query.where(filter=FieldFilter(f.field, f.op, f.value))
        try:
            return [
                {**snapshot.to_dict(), "id": snapshot.id}
                async for snapshot in query.stream()
            ]
        except Exception as e:
            raise StorageError(f"Failed to read {path}: {e}")

    @retry(
        retry=retry_if_exception_type(StorageError),
        stop=stop_after_attempt(3),
        wait=wait_exponential(multiplier=1, min=2, max=10),
        reraise=True,
    )
    async def get_document(self, path: str, doc_id: str) -> Optional[dict]:
        try:
            snapshot = await self.db.collection(path).document(doc_id).get()
        except Exception as e:
            raise StorageError(f"Failed to read {path}/{doc_id}: {e}")
        if not snapshot.exists:
            return None
        return {**snapshot.to_dict(), "id": snapshot.id}

    async def add_document(self, path: str, data: dict) -> str:
        ref = self.db.collection(path).document()
        try:
            await ref.set(data)
        except Exception as e:
            raise StorageError(f"Failed to add document to {path}: {e}")
        return ref.id

    async def set_document(
        self,
        path: str,
        doc_id: str,
        data: dict,
        merge: bool = False,
    ) -> None:
        try:
            await self.db.collection(path).document(doc_id).set(data, merge=merge)
        except Exception as e:
            raise StorageError(f"Failed to write {path}/{doc_id}: {e}")

    async def delete_document(self, path: str, doc_id: str) -> None:
        try:
            await self.db.collection(path).document(doc_id).delete()
        except Exception as e:
            raise StorageError(f"Failed to delete {path}/{doc_id}: {e}")

    def batch(self) -> FirestoreWriteBatch:
        return FirestoreWriteBatch(self.db)

    def new_id(self, path: str) -> str:
        return self.db.collection(path).document().id

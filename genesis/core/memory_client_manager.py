"""Thread-safe in-memory document store used for local runs and tests."""

from copy import deepcopy
from datetime import datetime, timezone
import logging
from threading import RLock
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar

from .document_store import DocumentStore, FilterTuple, TransactionScope, matches_filters, sort_documents


logger = logging.getLogger(__name__)

T = TypeVar("T")
_PendingWrite = Tuple[str, str, Dict[str, Any], bool]


def _utc_now() -> datetime:
    """Return current UTC datetime."""
    return datetime.now(timezone.utc)


class MemoryTransactionScope(TransactionScope):
    """Collects writes for one in-memory transaction until commit."""

    def __init__(self, store: "MemoryClientManager") -> None:
        self._store = store
        self._writes: List[_PendingWrite] = []

    @property
    def pending_writes(self) -> List[_PendingWrite]:
        return list(self._writes)

    def get_document(self, collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
        if self._writes:
            raise RuntimeError("Transaction reads must happen before writes.")
        return self._store.get_document(collection_name, document_id)

    def set_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
        merge: bool = False,
    ) -> None:
        self._writes.append((collection_name, document_id, deepcopy(payload), merge))


class MemoryClientManager(DocumentStore):
    """Keeps collections as nested dictionaries guarded by a re-entrant lock."""

    def __init__(self) -> None:
        self._lock = RLock()
        self._collections: Dict[str, Dict[str, Dict[str, Any]]] = {}
        self._closed = False
        logger.info("MemoryClientManager initialized.")

    def _bucket(self, collection_name: str) -> Dict[str, Dict[str, Any]]:
        if self._closed:
            raise RuntimeError("Document store is closed.")
        return self._collections.setdefault(collection_name, {})

    @staticmethod
    def _apply_write(
        bucket: Dict[str, Dict[str, Any]],
        document_id: str,
        payload: Dict[str, Any],
        merge: bool,
    ) -> None:
        if merge and document_id in bucket:
            merged = dict(bucket[document_id])
            merged.update(deepcopy(payload))
            bucket[document_id] = merged
        else:
            bucket[document_id] = deepcopy(payload)

    def _write(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
        merge: bool,
    ) -> Dict[str, Any]:
        bucket = self._bucket(collection_name)
        self._apply_write(bucket, document_id, payload, merge)
        stored = deepcopy(bucket[document_id])
        stored["id"] = document_id
        return stored

    def set_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
        merge: bool = False,
    ) -> Dict[str, Any]:
        safe_payload = dict(payload)
        safe_payload["updated_at"] = safe_payload.get("updated_at", _utc_now())
        safe_payload["created_at"] = safe_payload.get("created_at", _utc_now())
        with self._lock:
            return self._write(collection_name, document_id, safe_payload, merge)

    def get_document(self, collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
        with self._lock:
            payload = self._bucket(collection_name).get(document_id)
            if payload is None:
                return None
            result = deepcopy(payload)
            result["id"] = document_id
            return result

    def update_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        safe_payload = dict(payload)
        safe_payload["updated_at"] = _utc_now()
        with self._lock:
            return self._write(collection_name, document_id, safe_payload, merge=True)

    def delete_document(self, collection_name: str, document_id: str) -> None:
        with self._lock:
            self._bucket(collection_name).pop(document_id, None)

    def query_documents(
        self,
        collection_name: str,
        filters: Optional[Sequence[FilterTuple]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        with self._lock:
            records: List[Dict[str, Any]] = []
            for document_id, payload in self._bucket(collection_name).items():
                row = deepcopy(payload)
                row["id"] = document_id
                if matches_filters(row, filters or []):
                    records.append(row)
        if order_by:
            sort_documents(records, order_by, descending=descending)
        if limit is not None:
            records = records[: int(limit)]
        return records

    def run_transaction(self, callback: Callable[[TransactionScope], T]) -> T:
        """Serialize transactions on the store lock and apply writes on success.

        Staged writes land in copies of the touched collections, which replace
        the live ones only after every write applied.
        """
        with self._lock:
            scope = MemoryTransactionScope(self)
            try:
                result = callback(scope)
            except Exception:
                logger.warning(
                    "In-memory transaction aborted; discarded %d staged writes.",
                    len(scope.pending_writes),
                )
                raise
            committed_at = _utc_now()
            staged: Dict[str, Dict[str, Dict[str, Any]]] = {}
            for collection_name, document_id, payload, merge in scope.pending_writes:
                if collection_name not in staged:
                    staged[collection_name] = dict(self._bucket(collection_name))
                payload["updated_at"] = committed_at
                self._apply_write(staged[collection_name], document_id, payload, merge)
            self._collections.update(staged)
            return result

    def close(self) -> None:
        with self._lock:
            self._collections.clear()
            self._closed = True
        logger.info("MemoryClientManager closed.")

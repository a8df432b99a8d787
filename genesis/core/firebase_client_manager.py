"""Cloud Firestore implementation of the document store handle."""

from datetime import datetime, timezone
import logging
from typing import Any, Callable, Dict, List, Optional, Sequence, TypeVar

from google.cloud import firestore
from google.oauth2 import service_account

from .document_store import DocumentStore, FilterTuple, TransactionScope, sort_documents


logger = logging.getLogger(__name__)

T = TypeVar("T")


def _snapshot_payload(snapshot: Any) -> Dict[str, Any]:
    """Flatten a document snapshot into its fields plus `id`."""
    payload = snapshot.to_dict() or {}
    payload["id"] = snapshot.id
    return payload


def _stamped(payload: Dict[str, Any], keep_existing: bool) -> Dict[str, Any]:
    """Copy `payload` with `updated_at` (and on creation `created_at`) filled in."""
    now = datetime.now(timezone.utc)
    stamped = dict(payload)
    if keep_existing:
        stamped.setdefault("created_at", now)
        stamped.setdefault("updated_at", now)
    else:
        stamped["updated_at"] = now
    return stamped


class FirestoreTransactionScope(TransactionScope):
    """Binds document reads and writes to a `firestore.Transaction`."""

    def __init__(self, client: firestore.Client, transaction: firestore.Transaction) -> None:
        self._client = client
        self._transaction = transaction

    def get_document(self, collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
        snapshot = self._client.collection(collection_name).document(document_id).get(
            transaction=self._transaction
        )
        return _snapshot_payload(snapshot) if snapshot.exists else None

    def set_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
        merge: bool = False,
    ) -> None:
        ref = self._client.collection(collection_name).document(document_id)
        self._transaction.set(ref, _stamped(payload, keep_existing=False), merge=merge)


class FirebaseClientManager(DocumentStore):
    """Owns the Firestore client behind the users and loans collections."""

    def __init__(self, project_id: Optional[str] = None, credentials_path: Optional[str] = None) -> None:
        """Open a Firestore client.

        Args:
            project_id: Optional Google Cloud project id override.
            credentials_path: Optional path to a service account json file.
        """
        try:
            if credentials_path:
                credentials = service_account.Credentials.from_service_account_file(credentials_path)
                self._client = firestore.Client(project=project_id, credentials=credentials)
            else:
                self._client = firestore.Client(project=project_id) if project_id else firestore.Client()
            logger.info("FirebaseClientManager initialized for project_id=%s", project_id)
        except Exception:
            logger.exception("Failed to initialize Firestore client.")
            raise

    def _ref(self, collection_name: str, document_id: str) -> Any:
        return self._client.collection(collection_name).document(document_id)

    def _write(self, collection_name: str, document_id: str, payload: Dict[str, Any], merge: bool) -> Dict[str, Any]:
        ref = self._ref(collection_name, document_id)
        try:
            ref.set(payload, merge=merge)
            return _snapshot_payload(ref.get())
        except Exception:
            logger.exception("Failed to write document collection=%s document_id=%s", collection_name, document_id)
            raise

    def set_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
        merge: bool = False,
    ) -> Dict[str, Any]:
        """Create or replace a document and return what was stored."""
        return self._write(collection_name, document_id, _stamped(payload, keep_existing=True), merge)

    def get_document(self, collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
        try:
            snapshot = self._ref(collection_name, document_id).get()
        except Exception:
            logger.exception("Failed to get document collection=%s document_id=%s", collection_name, document_id)
            raise
        return _snapshot_payload(snapshot) if snapshot.exists else None

    def update_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Merge `payload` into an existing document."""
        return self._write(collection_name, document_id, _stamped(payload, keep_existing=False), merge=True)

    def delete_document(self, collection_name: str, document_id: str) -> None:
        try:
            self._ref(collection_name, document_id).delete()
        except Exception:
            logger.exception("Failed to delete document collection=%s document_id=%s", collection_name, document_id)
            raise

    def query_documents(
        self,
        collection_name: str,
        filters: Optional[Sequence[FilterTuple]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Run a filtered query and return document payloads.

        Equality filters combined with `order_by` need a composite index; when
        it is missing the query is re-run unordered and sorted in memory.
        """
        try:
            return self._stream_query(collection_name, filters, order_by, descending, limit)
        except Exception as exc:
            if order_by and "requires an index" in str(exc).lower():
                logger.warning(
                    "Firestore composite index missing. Falling back to in-memory sort "
                    "collection=%s order_by=%s",
                    collection_name,
                    order_by,
                )
                rows = self._stream_query(collection_name, filters, None, False, None)
                sort_documents(rows, order_by, descending=descending)
                if limit is not None:
                    return rows[: int(limit)]
                return rows
            logger.exception("Failed query for collection=%s", collection_name)
            raise

    def _stream_query(
        self,
        collection_name: str,
        filters: Optional[Sequence[FilterTuple]],
        order_by: Optional[str],
        descending: bool,
        limit: Optional[int],
    ) -> List[Dict[str, Any]]:
        query = self._client.collection(collection_name)
        for field_name, operator, value in filters or []:
            query = query.where(field_name, operator, value)
        if order_by:
            direction = firestore.Query.DESCENDING if descending else firestore.Query.ASCENDING
            query = query.order_by(order_by, direction=direction)
        if limit is not None:
            query = query.limit(limit)

        return [_snapshot_payload(snapshot) for snapshot in query.stream()]

    def run_transaction(self, callback: Callable[[TransactionScope], T]) -> T:
        """Run `callback` inside a Firestore transaction.

        Firestore rolls back every staged write when the callback raises and
        may re-run the callback on write contention.
        """
        transaction = self._client.transaction()

        @firestore.transactional
        def _run(active_transaction: firestore.Transaction) -> T:
            return callback(FirestoreTransactionScope(self._client, active_transaction))

        try:
            return _run(transaction)
        except Exception:
            logger.warning("Firestore transaction aborted.", exc_info=True)
            raise

    def close(self) -> None:
        """Close the underlying gRPC channel."""
        try:
            self._client.close()
            logger.info("FirebaseClientManager closed.")
        except Exception:
            logger.exception("Failed to close Firestore client.")
            raise

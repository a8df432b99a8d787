"""Store handle contract shared by the Firestore and in-memory backends."""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional, Sequence, Tuple, TypeVar


FilterTuple = Tuple[str, str, Any]
T = TypeVar("T")


def orderable_sort_key(value: Any) -> tuple:
    """Return a safe sortable tuple for heterogeneous document values."""
    if value is None:
        return (3, 0.0, "")
    if isinstance(value, bool):
        return (0, float(int(value)), "")
    if isinstance(value, (int, float)):
        return (0, float(value), "")
    if isinstance(value, datetime):
        return (0, value.timestamp(), "")
    return (1, 0.0, str(value))


def sort_documents(
    documents: List[Dict[str, Any]],
    order_by: str,
    descending: bool = False,
) -> List[Dict[str, Any]]:
    """Sort document payloads in place by one field and return them."""
    documents.sort(key=lambda item: orderable_sort_key(item.get(order_by)), reverse=descending)
    return documents


def matches_filters(payload: Dict[str, Any], filters: Sequence[FilterTuple]) -> bool:
    """Evaluate Firestore-style `(field, op, value)` filters against a payload."""
    for field_name, operator, expected_value in filters:
        actual_value = payload.get(field_name)
        if operator == "==":
            if actual_value != expected_value:
                return False
        elif operator == "!=":
            if actual_value == expected_value:
                return False
        elif operator == ">":
            if actual_value is None or actual_value <= expected_value:
                return False
        elif operator == ">=":
            if actual_value is None or actual_value < expected_value:
                return False
        elif operator == "<":
            if actual_value is None or actual_value >= expected_value:
                return False
        elif operator == "<=":
            if actual_value is None or actual_value > expected_value:
                return False
        elif operator == "in":
            if actual_value not in expected_value:
                return False
        else:
            raise ValueError("Unsupported filter operator: {0}".format(operator))
    return True


class TransactionScope(ABC):
    """Reads and buffered writes bound to one store transaction.

    Backends apply writes only when the transaction callback returns, so every
    read must happen before the first write.
    """

    @abstractmethod
    def get_document(self, collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Read one document inside the transaction."""

    @abstractmethod
    def set_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
        merge: bool = False,
    ) -> None:
        """Stage a document write to be applied on commit."""


class DocumentStore(ABC):
    """Explicitly constructed handle to the record store."""

    @abstractmethod
    def set_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
        merge: bool = False,
    ) -> Dict[str, Any]:
        """Create or replace a document and return the stored payload."""

    @abstractmethod
    def get_document(self, collection_name: str, document_id: str) -> Optional[Dict[str, Any]]:
        """Return one document payload (with `id`) or None."""

    @abstractmethod
    def update_document(
        self,
        collection_name: str,
        document_id: str,
        payload: Dict[str, Any],
    ) -> Dict[str, Any]:
        """Merge fields into an existing document."""

    @abstractmethod
    def delete_document(self, collection_name: str, document_id: str) -> None:
        """Hard delete a document."""

    @abstractmethod
    def query_documents(
        self,
        collection_name: str,
        filters: Optional[Sequence[FilterTuple]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
    ) -> List[Dict[str, Any]]:
        """Run a filtered query and return document payloads."""

    @abstractmethod
    def run_transaction(self, callback: Callable[[TransactionScope], T]) -> T:
        """Run `callback` atomically; its staged writes commit only if it returns."""

    @abstractmethod
    def close(self) -> None:
        """Release the underlying client."""

"""Document-store implementation of the loan repository."""

import logging
from typing import List, Optional, Sequence

from genesis.core.document_store import DocumentStore, FilterTuple, TransactionScope, sort_documents
from genesis.models.base import new_document_id
from genesis.models.exceptions import ModelNotFoundError, VersionConflictError
from genesis.models.loans import LoanModel
from genesis.models.repositories import LoanRepository


logger = logging.getLogger(__name__)


class DocumentLoanRepository(LoanRepository):
    """Persist and query loan documents."""

    def __init__(self, store: DocumentStore, collection_name: str = "loans") -> None:
        self._store = store
        self._collection_name = collection_name
        logger.info("Initialized DocumentLoanRepository collection=%s", collection_name)

    def create(self, model: LoanModel) -> LoanModel:
        """Insert a new loan document and return the stored model."""
        try:
            loan_id = model.id or new_document_id("loan")
            model.id = loan_id
            stored = self._store.set_document(
                collection_name=self._collection_name,
                document_id=loan_id,
                payload=model.to_firestore(),
                merge=False,
            )
            return LoanModel.from_firestore(stored, doc_id=loan_id)
        except Exception:
            logger.exception("Failed to create loan borrower_id=%s", model.borrower_id)
            raise

    def get_by_id(self, model_id: str, transaction: Optional[TransactionScope] = None) -> LoanModel:
        """Fetch one loan, optionally as a transactional read.

        Raises:
            ModelNotFoundError: If the loan does not exist.
        """
        reader = transaction if transaction is not None else self._store
        payload = reader.get_document(self._collection_name, model_id)
        if payload is None or payload.get("is_deleted"):
            raise ModelNotFoundError("Loan not found")
        return LoanModel.from_firestore(payload, doc_id=model_id)

    def update(self, model: LoanModel) -> LoanModel:
        """Update a loan outside a transaction with an optimistic version check."""
        try:
            current = self.get_by_id(model.id)
            if model.version != current.version:
                raise VersionConflictError("Version conflict for loan_id={0}".format(model.id))

            model.version = current.version + 1
            updated_payload = self._store.update_document(
                collection_name=self._collection_name,
                document_id=model.id,
                payload=model.to_firestore(),
            )
            return LoanModel.from_firestore(updated_payload, doc_id=model.id)
        except (ModelNotFoundError, VersionConflictError):
            raise
        except Exception:
            logger.exception("Failed to update loan_id=%s", model.id)
            raise

    def stage_update(self, model: LoanModel, transaction: TransactionScope) -> None:
        model.version += 1
        transaction.set_document(self._collection_name, model.id, model.to_firestore(), merge=False)

    def find(self, filters: Sequence[FilterTuple], newest_first: bool = True) -> List[LoanModel]:
        """Run a store-level query over non-deleted loans, sorted by `created_at`.

        Firestore cannot order by a field other than the one under a range
        filter, so range queries are sorted after the fetch.
        """
        has_range_filter = any(operator not in ("==", "in") for _, operator, _ in filters)
        try:
            payloads = self._store.query_documents(
                collection_name=self._collection_name,
                filters=[*filters, ("is_deleted", "==", False)],
                order_by=None if has_range_filter else "created_at",
                descending=newest_first,
            )
            if has_range_filter:
                sort_documents(payloads, "created_at", descending=newest_first)
            return [LoanModel.from_firestore(payload, doc_id=payload.get("id")) for payload in payloads]
        except Exception:
            logger.exception("Failed to query loans filters=%s", filters)
            raise

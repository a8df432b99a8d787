"""Document-store implementation of the user repository."""

import logging
from typing import Dict, Iterable, Optional, Sequence

from genesis.core.document_store import DocumentStore, TransactionScope
from genesis.models.base import new_document_id
from genesis.models.exceptions import ModelNotFoundError, VersionConflictError
from genesis.models.repositories import UserRepository
from genesis.models.users import UserModel


logger = logging.getLogger(__name__)


class DocumentUserRepository(UserRepository):
    """Persist and fetch user documents from the configured store."""

    def __init__(self, store: DocumentStore, collection_name: str = "users") -> None:
        """Bind the repository to a store handle and collection.

        Args:
            store: Shared document store handle.
            collection_name: Collection name for users.
        """
        self._store = store
        self._collection_name = collection_name
        logger.info("Initialized DocumentUserRepository collection=%s", collection_name)

    def create(self, model: UserModel) -> UserModel:
        """Create and persist a user document.

        Returns:
            UserModel: Persisted user with assigned document id.
        """
        try:
            user_id = model.id or new_document_id("usr")
            model.id = user_id
            stored = self._store.set_document(
                collection_name=self._collection_name,
                document_id=user_id,
                payload=model.to_firestore(),
                merge=False,
            )
            return UserModel.from_firestore(stored, doc_id=user_id)
        except Exception:
            logger.exception("Failed to create user email=%s", model.email)
            raise

    def get_by_id(self, model_id: str, transaction: Optional[TransactionScope] = None) -> UserModel:
        """Fetch user by identifier, optionally as a transactional read.

        Raises:
            ModelNotFoundError: If document does not exist.
        """
        reader = transaction if transaction is not None else self._store
        payload = reader.get_document(self._collection_name, model_id)
        if payload is None or payload.get("is_deleted"):
            raise ModelNotFoundError("User not found")
        return UserModel.from_firestore(payload, doc_id=model_id)

    def update(self, model: UserModel, fields: Optional[Sequence[str]] = None) -> UserModel:
        """Update an existing user using optimistic version checks.

        The caller passes the version it read; the stored version is bumped.
        With `fields`, only those fields and the version are merged into the
        stored document, so balance writes committed meanwhile survive.

        Raises:
            ModelNotFoundError: If user does not exist.
            VersionConflictError: If the user changed since it was read.
        """
        try:
            current = self.get_by_id(model.id)
            if model.version != current.version:
                raise VersionConflictError("Version conflict for user_id={0}".format(model.id))

            model.version = current.version + 1
            payload = model.to_firestore()
            if fields is not None:
                payload = {name: payload[name] for name in fields}
                payload["version"] = model.version
            updated_payload = self._store.update_document(
                collection_name=self._collection_name,
                document_id=model.id,
                payload=payload,
            )
            return UserModel.from_firestore(updated_payload, doc_id=model.id)
        except (ModelNotFoundError, VersionConflictError):
            raise
        except Exception:
            logger.exception("Failed to update user_id=%s", model.id)
            raise

    def stage_update(self, model: UserModel, transaction: TransactionScope) -> None:
        """Stage the user write; the transaction itself guards against conflicts."""
        model.version += 1
        transaction.set_document(self._collection_name, model.id, model.to_firestore(), merge=False)

    def get_many(self, model_ids: Iterable[str]) -> Dict[str, UserModel]:
        """Fetch each distinct id once; missing users are left out."""
        users: Dict[str, UserModel] = {}
        for user_id in {model_id for model_id in model_ids if model_id}:
            try:
                users[user_id] = self.get_by_id(user_id)
            except ModelNotFoundError:
                logger.warning("Referenced user missing user_id=%s", user_id)
        return users

    def find_by_email(self, email: str) -> Optional[UserModel]:
        payloads = self._store.query_documents(
            collection_name=self._collection_name,
            filters=[("email", "==", email.strip().lower()), ("is_deleted", "==", False)],
            limit=1,
        )
        if not payloads:
            return None
        return UserModel.from_firestore(payloads[0], doc_id=payloads[0].get("id"))

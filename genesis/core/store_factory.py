"""Build the configured document store handle."""

import logging

from .config import AppSettings
from .document_store import DocumentStore
from .memory_client_manager import MemoryClientManager


logger = logging.getLogger(__name__)


def create_document_store(settings: AppSettings) -> DocumentStore:
    """Return a store for `settings.storage_backend`; the caller owns `close()`."""
    if settings.storage_backend == "firestore":
        # Imported lazily so the memory backend runs without Google credentials.
        from .firebase_client_manager import FirebaseClientManager

        return FirebaseClientManager(
            project_id=settings.firestore_project_id,
            credentials_path=settings.firestore_credentials_path,
        )
    logger.info("Using in-memory document store; data is lost on shutdown.")
    return MemoryClientManager()

"""Core utilities for configuration, logging, storage and tokens."""

from .config import AppSettings, load_settings
from .document_store import DocumentStore, TransactionScope
from .logging_config import get_logger, setup_logging
from .memory_client_manager import MemoryClientManager
from .security import decode_token, issue_token
from .store_factory import create_document_store

__all__ = [
    "AppSettings",
    "load_settings",
    "DocumentStore",
    "TransactionScope",
    "MemoryClientManager",
    "create_document_store",
    "decode_token",
    "issue_token",
    "get_logger",
    "setup_logging",
]

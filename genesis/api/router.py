"""Top-level API router wiring repositories, services and sub-routers."""

import logging
from typing import Dict

from fastapi import APIRouter

from genesis.core.config import AppSettings
from genesis.core.document_store import DocumentStore
from genesis.repositories import DocumentLoanRepository, DocumentUserRepository
from genesis.services import LoanService, ProfileService

from .dependencies import build_current_user_dependency
from .loan_router import build_loan_router
from .profile_router import build_profile_router


logger = logging.getLogger(__name__)


def build_router(settings: AppSettings, store: DocumentStore) -> APIRouter:
    """Build and return the top-level API router.

    Args:
        settings: Application settings payload.
        store: Open document store handle shared by every repository.

    Returns:
        APIRouter: Fully configured router with all endpoints.
    """
    router = APIRouter()
    user_repository = DocumentUserRepository(store=store, collection_name=settings.users_collection)
    loan_repository = DocumentLoanRepository(store=store, collection_name=settings.loans_collection)
    profile_service = ProfileService(store=store, user_repository=user_repository)
    loan_service = LoanService(
        store=store,
        user_repository=user_repository,
        loan_repository=loan_repository,
    )
    current_user = build_current_user_dependency(settings, profile_service)

    router.include_router(build_loan_router(loan_service, current_user))
    router.include_router(build_profile_router(profile_service, loan_service, current_user))

    @router.get("/", summary="Root endpoint")
    def read_root() -> Dict[str, str]:
        """Return a basic message confirming service availability."""
        return {"message": "{0} is running".format(settings.app_name)}

    @router.get("/health", summary="Health check")
    def health_check() -> Dict[str, str]:
        """Return service health status for probes and monitors."""
        return {"status": "ok", "storage": settings.storage_backend}

    logger.info("API router built storage=%s", settings.storage_backend)
    return router

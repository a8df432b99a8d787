"""Store-backed repository implementations."""

from .loan_repository import DocumentLoanRepository
from .user_repository import DocumentUserRepository

__all__ = ["DocumentLoanRepository", "DocumentUserRepository"]

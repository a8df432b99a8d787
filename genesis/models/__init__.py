"""Public model package exports for the lending API."""

from .base import BaseDocumentModel, Money, new_document_id, quantize_money
from .enums import LoanStatus, PaymentMode, UserRole
from .exceptions import (
    AuthenticationError,
    ForbiddenError,
    InsufficientFundsError,
    InvalidStateError,
    LendingError,
    ModelError,
    ModelNotFoundError,
    ModelValidationError,
    NotAuthorizedError,
    VersionConflictError,
)
from .loans import LoanModel, compute_repayment_amount
from .repositories import LoanRepository, UserRepository
from .users import LocationModel, UserModel

__all__ = [
    "BaseDocumentModel",
    "Money",
    "new_document_id",
    "quantize_money",
    "UserModel",
    "LocationModel",
    "LoanModel",
    "compute_repayment_amount",
    "UserRole",
    "LoanStatus",
    "PaymentMode",
    "ModelError",
    "ModelValidationError",
    "ModelNotFoundError",
    "VersionConflictError",
    "LendingError",
    "AuthenticationError",
    "ForbiddenError",
    "NotAuthorizedError",
    "InvalidStateError",
    "InsufficientFundsError",
    "UserRepository",
    "LoanRepository",
]

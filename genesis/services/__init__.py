"""Service layer exports."""

from .access_guard import (
    LoanCapabilities,
    can_access_loan,
    capabilities_for,
    check_role,
    ensure_can_access_loan,
)
from .loan_service import LoanService
from .profile_service import ProfileService

__all__ = [
    "LoanCapabilities",
    "can_access_loan",
    "capabilities_for",
    "check_role",
    "ensure_can_access_loan",
    "LoanService",
    "ProfileService",
]

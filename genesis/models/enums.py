"""Reusable enums for lending domain models."""

from enum import Enum


class StringEnum(str, Enum):
    """Base enum class with string behavior for JSON serialization."""


class UserRole(StringEnum):
    """Role names used for API authorization checks."""

    BORROWER = "borrower"
    LENDER = "lender"


class LoanStatus(StringEnum):
    """Loan lifecycle states."""

    PENDING = "pending"
    FUNDED = "funded"
    REJECTED = "rejected"
    COMPLETED = "completed"


class PaymentMode(StringEnum):
    """How the borrower intends to move repayment money."""

    ONLINE = "online"
    CASH = "cash"
    CHEQUE = "cheque"

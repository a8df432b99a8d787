"""Custom exceptions for model, repository and service layers.

Each class carries the HTTP status the API layer answers with.
"""

from typing import Any, Optional


class ModelError(Exception):
    """Base class for model-related failures."""

    status_code = 500

    def __init__(self, message: str = "") -> None:
        super().__init__(message)
        self.message = message

    def to_detail(self) -> Any:
        """Return the client-facing error detail."""
        return self.message


class ModelValidationError(ModelError):
    """Raised when model data fails custom business validation."""

    status_code = 400


class ModelNotFoundError(ModelError):
    """Raised when a requested document does not exist."""

    status_code = 404


class VersionConflictError(ModelError):
    """Raised when optimistic concurrency version checks fail."""

    status_code = 409


class LendingError(ModelError):
    """Base class for authorization and loan lifecycle failures."""


class AuthenticationError(LendingError):
    """Missing, malformed or expired credentials."""

    status_code = 401


class ForbiddenError(LendingError):
    """Authenticated actor has the wrong role for the operation."""

    status_code = 403


class NotAuthorizedError(LendingError):
    """Actor has no relationship to the loan it tried to reach."""

    status_code = 401


class InvalidStateError(LendingError):
    """Loan status does not allow the requested transition."""

    status_code = 400


class InsufficientFundsError(LendingError):
    """Balance is too low to move the requested amount."""

    status_code = 400

    def __init__(
        self,
        message: str,
        required: Optional[float] = None,
        available: Optional[float] = None,
    ) -> None:
        super().__init__(message)
        self.required = required
        self.available = available

    def to_detail(self) -> Any:
        if self.required is None:
            return self.message
        return {"msg": self.message, "required": self.required, "available": self.available}

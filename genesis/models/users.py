"""User domain model for borrower and lender accounts."""

import logging
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field, field_validator

from .base import BaseDocumentModel, Money, quantize_money
from .enums import UserRole


logger = logging.getLogger(__name__)


class LocationModel(BaseModel):
    """City and country a user reports for location-based loan search."""

    city: str = Field(default="")
    country: str = Field(default="")

    def matches(self, needle: str) -> bool:
        """Case-insensitive substring match against city or country."""
        lowered = needle.lower()
        return lowered in self.city.lower() or lowered in self.country.lower()


class UserModel(BaseDocumentModel):
    """Represents a borrower or lender account."""

    name: str = Field(..., min_length=1)
    email: str = Field(..., min_length=3)
    role: UserRole
    balance: Money = Field(default=0.0, ge=0.0)
    location: LocationModel = Field(default_factory=LocationModel)

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        """Store email addresses lower-cased."""
        return value.lower()

    @field_validator("balance")
    @classmethod
    def _round_balance(cls, value: float) -> float:
        """Keep balances at cent precision."""
        return quantize_money(value)

    @field_validator("location", mode="before")
    @classmethod
    def _default_location(cls, value: Optional[Any]) -> Any:
        """Treat a stored null location as empty city and country."""
        return value or {}

    def summary(self, include_location: bool = False) -> Dict[str, Any]:
        """Identity fields joined onto loan responses."""
        payload: Dict[str, Any] = {"id": self.id, "name": self.name, "email": self.email}
        if include_location:
            payload["location"] = self.location.model_dump()
        return payload

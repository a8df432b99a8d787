"""Shared base models, money helpers and identifiers."""

from datetime import datetime, timezone
from decimal import ROUND_HALF_UP, Decimal
import logging
from typing import Any, Dict, Optional, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field

from .exceptions import ModelValidationError


logger = logging.getLogger(__name__)

Money = float
_CENT = Decimal("0.01")


def utc_now() -> datetime:
    """Return current UTC timestamp."""
    return datetime.now(timezone.utc)


def new_document_id(prefix: str) -> str:
    """Generate a prefixed unique document identifier."""
    return "{0}_{1}".format(prefix, uuid4().hex[:16])


def to_decimal(value: Union[int, float, str, Decimal]) -> Decimal:
    """Convert a stored amount to Decimal without binary float artifacts."""
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def quantize_money(value: Union[int, float, str, Decimal]) -> Money:
    """Round an amount half-up to cents and return the stored float form."""
    return float(to_decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP))


class BaseDocumentModel(BaseModel):
    """Base document schema for store-backed domain models."""

    id: Optional[str] = Field(default=None, description="Document ID.")
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)
    version: int = Field(default=1, ge=1)
    is_deleted: bool = Field(default=False)

    model_config = ConfigDict(
        str_strip_whitespace=True,
        validate_assignment=True,
        use_enum_values=True,
    )

    def to_firestore(self) -> Dict[str, Any]:
        """Serialize model into a store-ready document dictionary.

        Returns:
            Dict[str, Any]: Serialized model payload.

        Raises:
            ModelValidationError: If serialization fails.
        """
        try:
            return self.model_dump()
        except Exception as exc:
            logger.exception("Failed to serialize %s with id=%s", self.__class__.__name__, self.id)
            raise ModelValidationError(str(exc))

    @classmethod
    def from_firestore(cls, data: Dict[str, Any], doc_id: Optional[str] = None) -> "BaseDocumentModel":
        """Create model instance from stored document data.

        Args:
            data: Document payload.
            doc_id: Optional document id.

        Returns:
            BaseDocumentModel: Typed domain instance.

        Raises:
            ModelValidationError: If payload parsing fails.
        """
        try:
            payload = dict(data)
            if doc_id is not None and not payload.get("id"):
                payload["id"] = doc_id
            return cls(**payload)
        except Exception as exc:
            logger.exception("Failed to parse stored payload for %s doc_id=%s", cls.__name__, doc_id)
            raise ModelValidationError(str(exc))

    def to_response(self) -> Dict[str, Any]:
        """Return a JSON-safe representation for API responses."""
        return self.model_dump(mode="json", exclude={"is_deleted"})

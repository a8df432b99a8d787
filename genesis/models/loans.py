"""Loan domain model and its lifecycle transitions."""

from datetime import datetime
from decimal import Decimal
import logging
from typing import Any, Dict, Optional

from pydantic import Field, field_validator, model_validator

from .base import BaseDocumentModel, Money, quantize_money, to_decimal, utc_now
from .enums import LoanStatus, PaymentMode
from .exceptions import InvalidStateError


logger = logging.getLogger(__name__)

MONTHS_PER_YEAR = 12


def compute_repayment_amount(amount: Any, interest_rate: Any, term: int) -> Money:
    """Principal plus simple interest over the whole term.

    `interest_rate` is an annual percentage and `term` is in months, so the
    total is `amount * (1 + interest_rate / 100 / 12 * term)`, rounded to cents.
    """
    monthly_rate = to_decimal(interest_rate) / Decimal(100) / Decimal(MONTHS_PER_YEAR)
    total = to_decimal(amount) * (Decimal(1) + monthly_rate * Decimal(int(term)))
    return quantize_money(total)


class LoanModel(BaseDocumentModel):
    """A borrower's request for money and, once funded, the lender's claim on it."""

    borrower_id: str = Field(..., min_length=1)
    lender_id: Optional[str] = Field(default=None)
    amount: Money = Field(..., gt=0)
    purpose: str = Field(..., min_length=1)
    interest_rate: float = Field(..., ge=0)
    term: int = Field(..., gt=0, description="Loan term in months.")
    status: LoanStatus = Field(default=LoanStatus.PENDING)
    has_collateral: bool = Field(default=False)
    payment_mode: PaymentMode = Field(default=PaymentMode.ONLINE)
    funded_at: Optional[datetime] = Field(default=None)
    completed_at: Optional[datetime] = Field(default=None)

    @field_validator("amount")
    @classmethod
    def _round_amount(cls, value: float) -> float:
        """Keep principals at cent precision; balances move by exactly this amount."""
        rounded = quantize_money(value)
        if rounded <= 0:
            raise ValueError("amount must be at least 0.01")
        return rounded

    @model_validator(mode="after")
    def _validate_lifecycle_fields(self) -> "LoanModel":
        """Funded and completed loans must name their lender."""
        if self.status in (LoanStatus.FUNDED, LoanStatus.COMPLETED) and not self.lender_id:
            raise ValueError("lender_id is required once a loan is {0}".format(self.status))
        return self

    @property
    def repayment_amount(self) -> Money:
        return compute_repayment_amount(self.amount, self.interest_rate, self.term)

    def fund(self, lender_id: str, funded_at: Optional[datetime] = None) -> None:
        """Move `pending -> funded` and record the lender.

        Raises:
            InvalidStateError: If the loan is not pending.
        """
        if self.status != LoanStatus.PENDING:
            raise InvalidStateError("Loan is not available for funding")
        if self.lender_id and self.lender_id != lender_id:
            raise InvalidStateError("Loan already has a lender")
        self.lender_id = lender_id
        self.funded_at = funded_at or utc_now()
        self.status = LoanStatus.FUNDED
        logger.info("Loan funded loan_id=%s lender_id=%s", self.id, lender_id)

    def complete(self, completed_at: Optional[datetime] = None) -> None:
        """Move `funded -> completed`.

        Raises:
            InvalidStateError: If the loan is not funded.
        """
        if self.status != LoanStatus.FUNDED:
            raise InvalidStateError("Only funded loans can be repaid")
        self.completed_at = completed_at or utc_now()
        self.status = LoanStatus.COMPLETED
        logger.info("Loan completed loan_id=%s", self.id)

    def reject(self) -> None:
        """Move `pending -> rejected`."""
        if self.status != LoanStatus.PENDING:
            raise InvalidStateError("Only pending loans can be rejected")
        self.status = LoanStatus.REJECTED
        logger.info("Loan rejected loan_id=%s", self.id)

    def to_response(
        self,
        borrower: Optional[Dict[str, Any]] = None,
        lender: Optional[Dict[str, Any]] = None,
    ) -> Dict[str, Any]:
        """Serialize with optional counterpart identities joined in."""
        payload = super().to_response()
        payload["borrower"] = borrower
        payload["lender"] = lender
        return payload

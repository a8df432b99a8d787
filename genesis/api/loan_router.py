"""Loan router exposing borrower and lender loan workflows."""

import logging
from typing import Any, Callable, Dict, List

from fastapi import APIRouter, Depends, HTTPException, Path, status
from pydantic import BaseModel, ConfigDict, Field

from genesis.models.enums import PaymentMode
from genesis.models.exceptions import ModelError
from genesis.models.users import UserModel
from genesis.services.loan_service import LoanService

from .errors import server_error, to_http_exception


logger = logging.getLogger(__name__)


class LoanCreateRequest(BaseModel):
    """Request payload for a new loan; accepts camelCase aliases."""

    model_config = ConfigDict(populate_by_name=True, str_strip_whitespace=True)

    amount: float = Field(..., gt=0)
    purpose: str = Field(..., min_length=1)
    interest_rate: float = Field(..., ge=0, alias="interestRate")
    term: int = Field(..., gt=0, description="Loan term in months.")
    has_collateral: bool = Field(default=False, alias="hasCollateral")
    payment_mode: PaymentMode = Field(default=PaymentMode.ONLINE, alias="paymentMode")


def build_loan_router(service: LoanService, current_user: Callable[..., UserModel]) -> APIRouter:
    """Build the `/api/loans` router around an injected service and auth dependency."""
    router = APIRouter(prefix="/api/loans", tags=["loans"])

    @router.post("", status_code=status.HTTP_201_CREATED, summary="Create a loan request")
    def create_loan(payload: LoanCreateRequest, user: UserModel = Depends(current_user)) -> Dict[str, Any]:
        """Borrowers only."""
        try:
            return service.create_loan(actor=user, **payload.model_dump())
        except ModelError as exc:
            raise to_http_exception(exc)
        except ValueError as exc:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
        except Exception:
            logger.exception("Create loan endpoint failed user_id=%s", user.id)
            raise server_error()

    @router.get("", summary="List pending loan requests")
    def list_pending(user: UserModel = Depends(current_user)) -> List[Dict[str, Any]]:
        """Lenders only."""
        try:
            return service.list_pending_loans(actor=user)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("List pending loans endpoint failed user_id=%s", user.id)
            raise server_error()

    @router.get("/borrower", summary="List the current borrower's loans")
    def list_for_borrower(user: UserModel = Depends(current_user)) -> List[Dict[str, Any]]:
        try:
            return service.list_loans_for_borrower(actor=user)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("List borrower loans endpoint failed user_id=%s", user.id)
            raise server_error()

    @router.get("/lender", summary="List loans funded by the current lender")
    def list_for_lender(user: UserModel = Depends(current_user)) -> List[Dict[str, Any]]:
        try:
            return service.list_loans_for_lender(actor=user)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("List lender loans endpoint failed user_id=%s", user.id)
            raise server_error()

    @router.get("/{loan_id}", summary="Get loan by id")
    def get_loan(
        loan_id: str = Path(..., min_length=1),
        user: UserModel = Depends(current_user),
    ) -> Dict[str, Any]:
        """Visible to the borrower, the funding lender, and any lender while pending."""
        try:
            return service.get_loan(actor=user, loan_id=loan_id)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("Get loan endpoint failed loan_id=%s", loan_id)
            raise server_error()

    @router.put("/{loan_id}/fund", summary="Fund a pending loan")
    def fund_loan(
        loan_id: str = Path(..., min_length=1),
        user: UserModel = Depends(current_user),
    ) -> Dict[str, Any]:
        """Lenders only; debits the lender and credits the borrower atomically."""
        try:
            return service.fund_loan(actor=user, loan_id=loan_id)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("Fund loan endpoint failed loan_id=%s user_id=%s", loan_id, user.id)
            raise server_error()

    @router.put("/{loan_id}/repay", summary="Repay a funded loan")
    def repay_loan(
        loan_id: str = Path(..., min_length=1),
        user: UserModel = Depends(current_user),
    ) -> Dict[str, Any]:
        """Owning borrower only; pays principal plus simple interest in one sum."""
        try:
            return service.repay_loan(actor=user, loan_id=loan_id)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("Repay loan endpoint failed loan_id=%s user_id=%s", loan_id, user.id)
            raise server_error()

    return router

"""Profile router: own account, deposits, location and loan search."""

import logging
from typing import Any, Callable, Dict, List, Optional

from fastapi import APIRouter, Depends, Query
from pydantic import BaseModel, Field

from genesis.models.enums import PaymentMode
from genesis.models.exceptions import ModelError
from genesis.models.users import UserModel
from genesis.services.loan_service import LoanService
from genesis.services.profile_service import ProfileService

from .errors import server_error, to_http_exception


logger = logging.getLogger(__name__)


class BalanceDepositRequest(BaseModel):
    """Request payload for adding funds; the amount is validated by the service."""

    amount: Optional[float] = Field(default=None)


class LocationUpdateRequest(BaseModel):
    """Request payload for the user's city and country."""

    city: Optional[str] = Field(default=None)
    country: Optional[str] = Field(default=None)


def build_profile_router(
    profile_service: ProfileService,
    loan_service: LoanService,
    current_user: Callable[..., UserModel],
) -> APIRouter:
    """Build the `/api/profile` router."""
    router = APIRouter(prefix="/api/profile", tags=["profile"])

    @router.get("", summary="Get the current user's profile")
    def get_profile(user: UserModel = Depends(current_user)) -> Dict[str, Any]:
        try:
            return profile_service.get_profile(user.id)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("Get profile endpoint failed user_id=%s", user.id)
            raise server_error()

    @router.put("/balance", summary="Add funds to the current user's balance")
    def deposit(payload: BalanceDepositRequest, user: UserModel = Depends(current_user)) -> Dict[str, Any]:
        try:
            return profile_service.deposit(user.id, payload.amount)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("Deposit endpoint failed user_id=%s", user.id)
            raise server_error()

    @router.put("/location", summary="Update the current user's location")
    def update_location(payload: LocationUpdateRequest, user: UserModel = Depends(current_user)) -> Dict[str, Any]:
        try:
            return profile_service.update_location(user.id, city=payload.city, country=payload.country)
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("Update location endpoint failed user_id=%s", user.id)
            raise server_error()

    @router.get("/filter-loans", summary="Search loans by rate, collateral, payment mode and location")
    def filter_loans(
        interest_rate: Optional[float] = Query(default=None, ge=0, alias="interestRate"),
        has_collateral: Optional[bool] = Query(default=None, alias="hasCollateral"),
        payment_mode: Optional[PaymentMode] = Query(default=None, alias="paymentMode"),
        location: Optional[str] = Query(default=None),
        user: UserModel = Depends(current_user),
    ) -> List[Dict[str, Any]]:
        """Lenders search pending loans; borrowers search their own."""
        try:
            return loan_service.filter_loans(
                actor=user,
                interest_rate=interest_rate,
                has_collateral=has_collateral,
                payment_mode=payment_mode,
                location=location.strip() if location else None,
            )
        except ModelError as exc:
            raise to_http_exception(exc)
        except Exception:
            logger.exception("Filter loans endpoint failed user_id=%s", user.id)
            raise server_error()

    return router

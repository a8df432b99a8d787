"""Profile operations: account registration, deposits and location."""

import logging
from typing import Any, Dict, Optional, Union

from genesis.core.document_store import DocumentStore, TransactionScope
from genesis.models.base import quantize_money, to_decimal
from genesis.models.enums import UserRole
from genesis.models.exceptions import ModelValidationError
from genesis.models.repositories import UserRepository
from genesis.models.users import LocationModel, UserModel


logger = logging.getLogger(__name__)


def _parse_positive_amount(amount: Any) -> float:
    """Return `amount` rounded to cents, rejecting anything that does not round above zero."""
    try:
        value = to_decimal(amount) if amount is not None else None
    except (ArithmeticError, TypeError, ValueError):
        value = None
    rounded = quantize_money(value) if value is not None and value.is_finite() else 0.0
    if rounded <= 0:
        raise ModelValidationError("Please provide a valid amount")
    return rounded


class ProfileService:
    """Reads and updates the authenticated user's own account."""

    def __init__(self, store: DocumentStore, user_repository: UserRepository) -> None:
        self._store = store
        self._users = user_repository

    def register_user(
        self,
        name: str,
        email: str,
        role: Union[UserRole, str],
        city: str = "",
        country: str = "",
    ) -> UserModel:
        """Create an account with a zero balance.

        Raises:
            ModelValidationError: If the email is already registered.
        """
        if self._users.find_by_email(email) is not None:
            raise ModelValidationError("User already exists")
        user = self._users.create(
            UserModel(
                name=name,
                email=email,
                role=role,
                location=LocationModel(city=city, country=country),
            )
        )
        logger.info("User registered user_id=%s role=%s", user.id, user.role)
        return user

    def get_user(self, user_id: str) -> UserModel:
        return self._users.get_by_id(user_id)

    def get_profile(self, user_id: str) -> Dict[str, Any]:
        return self._users.get_by_id(user_id).to_response()

    def deposit(self, user_id: str, amount: Any) -> Dict[str, Any]:
        """Add funds to the user's balance.

        Raises:
            ModelValidationError: If `amount` is missing or not positive.
            ModelNotFoundError: If the user does not exist.
        """
        value = _parse_positive_amount(amount)

        def _apply(transaction: TransactionScope) -> UserModel:
            user = self._users.get_by_id(user_id, transaction=transaction)
            user.balance = quantize_money(to_decimal(user.balance) + to_decimal(value))
            self._users.stage_update(user, transaction)
            return user

        user = self._store.run_transaction(_apply)
        logger.info("Balance deposit user_id=%s amount=%s balance=%s", user_id, value, user.balance)
        return user.to_response()

    def update_location(self, user_id: str, city: Optional[str], country: Optional[str]) -> Dict[str, Any]:
        """Replace the user's city and country.

        Raises:
            ModelValidationError: If either value is missing or blank.
        """
        city = (city or "").strip()
        country = (country or "").strip()
        if not city or not country:
            raise ModelValidationError("Please provide both city and country")

        user = self._users.get_by_id(user_id)
        user.location = LocationModel(city=city, country=country)
        return self._users.update(user, fields=("location",)).to_response()

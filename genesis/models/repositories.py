"""Repository interfaces for datastore-agnostic model access."""

from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Optional, Sequence

from genesis.core.document_store import FilterTuple, TransactionScope

from .exceptions import ModelNotFoundError, VersionConflictError
from .loans import LoanModel
from .users import UserModel


class BaseRepository(ABC):
    """Common contract for CRUD operations, inside or outside a transaction."""

    @abstractmethod
    def create(self, model):
        """Persist a new model."""

    @abstractmethod
    def get_by_id(self, model_id: str, transaction: Optional[TransactionScope] = None):
        """Return model by identifier."""

    @abstractmethod
    def update(self, model):
        """Update existing model with optimistic version check."""

    @abstractmethod
    def stage_update(self, model, transaction: TransactionScope) -> None:
        """Stage a write of `model` into an open transaction."""


class UserRepository(BaseRepository):
    """User data access abstraction."""

    @abstractmethod
    def create(self, model: UserModel) -> UserModel:
        """Persist a new user model."""

    @abstractmethod
    def get_by_id(self, model_id: str, transaction: Optional[TransactionScope] = None) -> UserModel:
        """Fetch a user by identifier.

        Raises:
            ModelNotFoundError: If user does not exist.
        """

    @abstractmethod
    def update(self, model: UserModel, fields: Optional[Sequence[str]] = None) -> UserModel:
        """Update user document, or only `fields` of it when given.

        Raises:
            ModelNotFoundError: If user does not exist.
            VersionConflictError: If version does not match persisted document.
        """

    @abstractmethod
    def stage_update(self, model: UserModel, transaction: TransactionScope) -> None:
        """Stage a user write into `transaction`."""

    @abstractmethod
    def get_many(self, model_ids: Iterable[str]) -> Dict[str, UserModel]:
        """Fetch several users keyed by id; unknown ids are skipped."""

    @abstractmethod
    def find_by_email(self, email: str) -> Optional[UserModel]:
        """Return the user registered with `email`, if any."""


class LoanRepository(BaseRepository):
    """Loan data access abstraction."""

    @abstractmethod
    def create(self, model: LoanModel) -> LoanModel:
        """Persist a new loan model."""

    @abstractmethod
    def get_by_id(self, model_id: str, transaction: Optional[TransactionScope] = None) -> LoanModel:
        """Fetch a loan by identifier.

        Raises:
            ModelNotFoundError: If loan does not exist.
        """

    @abstractmethod
    def update(self, model: LoanModel) -> LoanModel:
        """Update loan document.

        Raises:
            ModelNotFoundError: If loan does not exist.
            VersionConflictError: If version does not match persisted document.
        """

    @abstractmethod
    def stage_update(self, model: LoanModel, transaction: TransactionScope) -> None:
        """Stage a loan write into `transaction`."""

    @abstractmethod
    def find(self, filters: Sequence[FilterTuple], newest_first: bool = True) -> List[LoanModel]:
        """Return loans matching store-level filters."""


__all__ = [
    "ModelNotFoundError",
    "VersionConflictError",
    "UserRepository",
    "LoanRepository",
]

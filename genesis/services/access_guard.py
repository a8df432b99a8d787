"""Role and loan-relationship checks, independent of the HTTP layer."""

from dataclasses import dataclass
import logging
from typing import Union

from genesis.models.enums import LoanStatus, UserRole
from genesis.models.exceptions import ForbiddenError, NotAuthorizedError
from genesis.models.loans import LoanModel
from genesis.models.users import UserModel


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class LoanCapabilities:
    """What one actor may do with one loan."""

    can_read: bool
    can_fund: bool
    can_repay: bool


def has_role(actor: UserModel, role: Union[UserRole, str]) -> bool:
    return actor.role == UserRole(role)


def check_role(required_role: Union[UserRole, str], actual_role: Union[UserRole, str]) -> None:
    """Pass iff the roles are equal.

    Raises:
        ForbiddenError: On any mismatch.
    """
    required = UserRole(required_role)
    if actual_role != required:
        logger.info("Role check failed required=%s actual=%s", required.value, actual_role)
        raise ForbiddenError("Access denied. {0} role required".format(required.value))


def can_access_loan(loan: LoanModel, actor: UserModel) -> bool:
    """Borrowers see their own loans; lenders see open loans and the ones they funded."""
    if loan.borrower_id == actor.id:
        return True
    if has_role(actor, UserRole.LENDER):
        return loan.status == LoanStatus.PENDING or (loan.lender_id is not None and loan.lender_id == actor.id)
    return False


def ensure_can_access_loan(loan: LoanModel, actor: UserModel) -> None:
    """Raise `NotAuthorizedError` unless `can_access_loan` passes."""
    if not can_access_loan(loan, actor):
        logger.info("Loan access denied loan_id=%s user_id=%s", loan.id, actor.id)
        raise NotAuthorizedError("Not authorized to access this loan")


def capabilities_for(loan: LoanModel, actor: UserModel) -> LoanCapabilities:
    can_read = can_access_loan(loan, actor)
    return LoanCapabilities(
        can_read=can_read,
        can_fund=has_role(actor, UserRole.LENDER) and loan.status == LoanStatus.PENDING,
        can_repay=(
            can_read
            and has_role(actor, UserRole.BORROWER)
            and loan.borrower_id == actor.id
            and loan.status == LoanStatus.FUNDED
        ),
    )

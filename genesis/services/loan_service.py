"""Loan lifecycle and query service: create, fund, repay and search loans."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from genesis.core.document_store import DocumentStore, FilterTuple, TransactionScope
from genesis.models.base import quantize_money, to_decimal
from genesis.models.enums import LoanStatus, PaymentMode, UserRole
from genesis.models.exceptions import InsufficientFundsError, InvalidStateError
from genesis.models.loans import LoanModel
from genesis.models.repositories import LoanRepository, UserRepository
from genesis.models.users import UserModel

from .access_guard import capabilities_for, check_role, ensure_can_access_loan


logger = logging.getLogger(__name__)

REPAID_MESSAGE = "Loan repaid successfully"


def _ensure_fundable(loan: LoanModel, lender: UserModel) -> None:
    """Raise unless `lender` can fund `loan` right now."""
    if loan.status != LoanStatus.PENDING:
        raise InvalidStateError("Loan is not available for funding")
    if to_decimal(lender.balance) < to_decimal(loan.amount):
        raise InsufficientFundsError("Insufficient balance to fund this loan")


def _ensure_repayable(loan: LoanModel, borrower: UserModel) -> float:
    """Raise unless `borrower` can repay `loan` in full; return the amount due."""
    if loan.status != LoanStatus.FUNDED:
        raise InvalidStateError("Only funded loans can be repaid")
    total = loan.repayment_amount
    if to_decimal(borrower.balance) < to_decimal(total):
        raise InsufficientFundsError(
            "Insufficient balance to repay this loan",
            required=total,
            available=borrower.balance,
        )
    return total


def _transfer(source: UserModel, target: UserModel, amount: Union[float, str]) -> None:
    source.balance = quantize_money(to_decimal(source.balance) - to_decimal(amount))
    target.balance = quantize_money(to_decimal(target.balance) + to_decimal(amount))


class LoanService:
    """Runs every loan operation against an explicitly passed store handle.

    Fund and repay check their preconditions, then re-read and re-check the
    lender, borrower and loan inside one store transaction before writing, so a
    balance spent between the check and the commit aborts the operation.
    """

    def __init__(
        self,
        store: DocumentStore,
        user_repository: UserRepository,
        loan_repository: LoanRepository,
    ) -> None:
        self._store = store
        self._users = user_repository
        self._loans = loan_repository

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_loan(
        self,
        actor: UserModel,
        amount: float,
        purpose: str,
        interest_rate: float,
        term: int,
        has_collateral: bool = False,
        payment_mode: Union[PaymentMode, str] = PaymentMode.ONLINE,
    ) -> Dict[str, Any]:
        """Insert a pending loan requested by a borrower."""
        check_role(UserRole.BORROWER, actor.role)
        loan = self._loans.create(
            LoanModel(
                borrower_id=actor.id,
                amount=amount,
                purpose=purpose,
                interest_rate=interest_rate,
                term=term,
                has_collateral=has_collateral,
                payment_mode=payment_mode,
            )
        )
        logger.info("Loan created loan_id=%s borrower_id=%s amount=%s", loan.id, actor.id, loan.amount)
        return loan.to_response()

    def fund_loan(self, actor: UserModel, loan_id: str) -> Dict[str, Any]:
        """Move the principal from lender to borrower and mark the loan funded.

        Raises:
            ForbiddenError: If the actor is not a lender.
            ModelNotFoundError: If the loan does not exist.
            InvalidStateError: If the loan is not pending.
            InsufficientFundsError: If the lender cannot cover the amount.
        """
        check_role(UserRole.LENDER, actor.role)
        _ensure_fundable(self._loans.get_by_id(loan_id), self._users.get_by_id(actor.id))

        def _apply(transaction: TransactionScope) -> LoanModel:
            loan = self._loans.get_by_id(loan_id, transaction=transaction)
            lender = self._users.get_by_id(actor.id, transaction=transaction)
            borrower = self._users.get_by_id(loan.borrower_id, transaction=transaction)
            _ensure_fundable(loan, lender)

            _transfer(lender, borrower, loan.amount)
            loan.fund(lender.id)

            self._users.stage_update(lender, transaction)
            self._users.stage_update(borrower, transaction)
            self._loans.stage_update(loan, transaction)
            return loan

        funded = self._store.run_transaction(_apply)
        logger.info("Loan funding committed loan_id=%s lender_id=%s amount=%s", loan_id, actor.id, funded.amount)
        return funded.to_response()

    def repay_loan(self, actor: UserModel, loan_id: str) -> Dict[str, Any]:
        """Move principal plus interest from borrower to lender and complete the loan.

        Raises:
            ForbiddenError: If the actor is not a borrower.
            ModelNotFoundError: If the loan does not exist.
            NotAuthorizedError: If the loan belongs to another borrower.
            InvalidStateError: If the loan is not funded.
            InsufficientFundsError: With `required` and `available` amounts.
        """
        check_role(UserRole.BORROWER, actor.role)
        loan = self._load_accessible_loan(actor, loan_id)
        _ensure_repayable(loan, self._users.get_by_id(actor.id))

        def _apply(transaction: TransactionScope) -> Dict[str, Any]:
            current = self._loans.get_by_id(loan_id, transaction=transaction)
            borrower = self._users.get_by_id(actor.id, transaction=transaction)
            lender = self._users.get_by_id(current.lender_id, transaction=transaction)
            total = _ensure_repayable(current, borrower)

            _transfer(borrower, lender, total)
            current.complete()

            self._users.stage_update(borrower, transaction)
            self._users.stage_update(lender, transaction)
            self._loans.stage_update(current, transaction)
            return {"loan": current, "repayment_amount": total}

        result = self._store.run_transaction(_apply)
        logger.info(
            "Loan repayment committed loan_id=%s borrower_id=%s amount=%s",
            loan_id,
            actor.id,
            result["repayment_amount"],
        )
        return {
            "loan": result["loan"].to_response(),
            "repayment_amount": result["repayment_amount"],
            "message": REPAID_MESSAGE,
        }

    def reject_loan(self, loan_id: str) -> Dict[str, Any]:
        """Close a pending loan without moving money."""

        def _apply(transaction: TransactionScope) -> LoanModel:
            loan = self._loans.get_by_id(loan_id, transaction=transaction)
            loan.reject()
            self._loans.stage_update(loan, transaction)
            return loan

        return self._store.run_transaction(_apply).to_response()

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def list_pending_loans(self, actor: UserModel) -> List[Dict[str, Any]]:
        """Open loan requests, newest first, with borrower identity."""
        check_role(UserRole.LENDER, actor.role)
        loans = self._loans.find([("status", "==", LoanStatus.PENDING.value)])
        return self._join(loans, with_borrower=True)

    def list_loans_for_borrower(self, actor: UserModel) -> List[Dict[str, Any]]:
        """The actor's own loans, newest first, with lender identity."""
        check_role(UserRole.BORROWER, actor.role)
        loans = self._loans.find([("borrower_id", "==", actor.id)])
        return self._join(loans, with_lender=True)

    def list_loans_for_lender(self, actor: UserModel) -> List[Dict[str, Any]]:
        """Loans the actor funded, newest first, with borrower identity."""
        check_role(UserRole.LENDER, actor.role)
        loans = self._loans.find([("lender_id", "==", actor.id)])
        return self._join(loans, with_borrower=True)

    def get_loan(self, actor: UserModel, loan_id: str) -> Dict[str, Any]:
        """One loan with both parties joined, if the actor may see it."""
        loan = self._load_accessible_loan(actor, loan_id)
        payload = self._join([loan], with_borrower=True, with_lender=True)[0]
        capabilities = capabilities_for(loan, actor)
        payload["capabilities"] = {
            "can_read": capabilities.can_read,
            "can_fund": capabilities.can_fund,
            "can_repay": capabilities.can_repay,
        }
        return payload

    def filter_loans(
        self,
        actor: UserModel,
        interest_rate: Optional[float] = None,
        has_collateral: Optional[bool] = None,
        payment_mode: Optional[Union[PaymentMode, str]] = None,
        location: Optional[str] = None,
    ) -> List[Dict[str, Any]]:
        """Search open loans (lenders) or own loans (borrowers).

        `interest_rate` is an upper bound. `location` matches the borrower's
        city or country, case-insensitively, after the store query.
        """
        filters: List[FilterTuple] = []
        if actor.role == UserRole.LENDER:
            filters.append(("status", "==", LoanStatus.PENDING.value))
        else:
            filters.append(("borrower_id", "==", actor.id))
        if interest_rate is not None:
            filters.append(("interest_rate", "<=", float(interest_rate)))
        if has_collateral is not None:
            filters.append(("has_collateral", "==", bool(has_collateral)))
        if payment_mode:
            filters.append(("payment_mode", "==", PaymentMode(payment_mode).value))

        loans = self._loans.find(filters)
        borrowers = self._users.get_many(loan.borrower_id for loan in loans)
        if location:
            loans = [
                loan
                for loan in loans
                if loan.borrower_id in borrowers and borrowers[loan.borrower_id].location.matches(location)
            ]
        return [
            loan.to_response(
                borrower=(
                    borrowers[loan.borrower_id].summary(include_location=True)
                    if loan.borrower_id in borrowers
                    else None
                )
            )
            for loan in loans
        ]

    # ------------------------------------------------------------------
    # Helpers
    # ------------------------------------------------------------------

    def _load_accessible_loan(self, actor: UserModel, loan_id: str) -> LoanModel:
        loan = self._loans.get_by_id(loan_id)
        ensure_can_access_loan(loan, actor)
        return loan

    def _join(
        self,
        loans: List[LoanModel],
        with_borrower: bool = False,
        with_lender: bool = False,
    ) -> List[Dict[str, Any]]:
        """Attach `{id, name, email}` for the requested counterparts."""
        wanted: List[str] = []
        for loan in loans:
            if with_borrower:
                wanted.append(loan.borrower_id)
            if with_lender and loan.lender_id:
                wanted.append(loan.lender_id)
        users = self._users.get_many(wanted)

        def _summary(user_id: Optional[str]) -> Optional[Dict[str, Any]]:
            user = users.get(user_id) if user_id else None
            return user.summary() if user else None

        return [
            loan.to_response(
                borrower=_summary(loan.borrower_id) if with_borrower else None,
                lender=_summary(loan.lender_id) if with_lender else None,
            )
            for loan in loans
        ]

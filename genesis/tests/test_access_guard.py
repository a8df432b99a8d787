"""Unit tests for role checks and the loan access policy."""

import unittest

from genesis.models.enums import LoanStatus, UserRole
from genesis.models.exceptions import ForbiddenError, NotAuthorizedError
from genesis.models.loans import LoanModel
from genesis.models.users import UserModel
from genesis.services.access_guard import (
    can_access_loan,
    capabilities_for,
    check_role,
    ensure_can_access_loan,
)


class AccessGuardTests(unittest.TestCase):
    """Borrowers see their own loans; lenders see open loans and their own."""

    def setUp(self) -> None:
        """Build one borrower, two lenders and a pending loan."""
        self.borrower = UserModel(id="usr_b", name="Bea", email="bea@example.com", role=UserRole.BORROWER)
        self.other_borrower = UserModel(id="usr_b2", name="Bo", email="bo@example.com", role=UserRole.BORROWER)
        self.lender = UserModel(id="usr_l", name="Lee", email="lee@example.com", role=UserRole.LENDER)
        self.other_lender = UserModel(id="usr_l2", name="Lou", email="lou@example.com", role=UserRole.LENDER)
        self.loan = LoanModel(
            id="loan_1",
            borrower_id="usr_b",
            amount=1000,
            purpose="Tools",
            interest_rate=12,
            term=12,
        )

    def _fund(self) -> None:
        self.loan.fund(self.lender.id)

    def test_check_role_passes_on_match(self) -> None:
        check_role(UserRole.LENDER, self.lender.role)
        check_role("borrower", self.borrower.role)

    def test_check_role_forbidden_on_mismatch(self) -> None:
        with self.assertRaises(ForbiddenError) as ctx:
            check_role(UserRole.LENDER, self.borrower.role)
        self.assertEqual(ctx.exception.status_code, 403)
        self.assertIn("lender role required", str(ctx.exception))

    def test_borrower_always_sees_own_loan(self) -> None:
        self.assertTrue(can_access_loan(self.loan, self.borrower))
        self._fund()
        self.assertTrue(can_access_loan(self.loan, self.borrower))
        self.loan.complete()
        self.assertTrue(can_access_loan(self.loan, self.borrower))

    def test_other_borrower_denied(self) -> None:
        self.assertFalse(can_access_loan(self.loan, self.other_borrower))
        with self.assertRaises(NotAuthorizedError) as ctx:
            ensure_can_access_loan(self.loan, self.other_borrower)
        self.assertEqual(ctx.exception.status_code, 401)

    def test_any_lender_sees_pending_loan(self) -> None:
        self.assertTrue(can_access_loan(self.loan, self.lender))
        self.assertTrue(can_access_loan(self.loan, self.other_lender))

    def test_only_assigned_lender_sees_funded_loan(self) -> None:
        self._fund()
        self.assertTrue(can_access_loan(self.loan, self.lender))
        self.assertFalse(can_access_loan(self.loan, self.other_lender))
        with self.assertRaises(NotAuthorizedError):
            ensure_can_access_loan(self.loan, self.other_lender)

    def test_rejected_loan_hidden_from_lenders(self) -> None:
        self.loan.reject()
        self.assertEqual(self.loan.status, LoanStatus.REJECTED)
        self.assertFalse(can_access_loan(self.loan, self.lender))
        self.assertTrue(can_access_loan(self.loan, self.borrower))

    def test_capabilities_for_pending_loan(self) -> None:
        lender_caps = capabilities_for(self.loan, self.lender)
        self.assertTrue(lender_caps.can_read)
        self.assertTrue(lender_caps.can_fund)
        self.assertFalse(lender_caps.can_repay)

        borrower_caps = capabilities_for(self.loan, self.borrower)
        self.assertTrue(borrower_caps.can_read)
        self.assertFalse(borrower_caps.can_fund)
        self.assertFalse(borrower_caps.can_repay)

    def test_capabilities_for_funded_loan(self) -> None:
        self._fund()
        self.assertTrue(capabilities_for(self.loan, self.borrower).can_repay)
        self.assertFalse(capabilities_for(self.loan, self.other_borrower).can_repay)
        other = capabilities_for(self.loan, self.other_lender)
        self.assertFalse(other.can_read)
        self.assertFalse(other.can_fund)


if __name__ == "__main__":
    unittest.main()

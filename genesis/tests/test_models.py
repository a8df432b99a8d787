"""Unit tests for store-ready lending domain models."""

import unittest

from pydantic import ValidationError

from genesis.models.enums import LoanStatus, PaymentMode, UserRole
from genesis.models.exceptions import InsufficientFundsError, InvalidStateError, ModelValidationError
from genesis.models.loans import LoanModel, compute_repayment_amount
from genesis.models.users import LocationModel, UserModel


def _pending_loan(**overrides) -> LoanModel:
    payload = {
        "id": "loan_1",
        "borrower_id": "usr_b",
        "amount": 1000,
        "purpose": "Inventory",
        "interest_rate": 12,
        "term": 12,
    }
    payload.update(overrides)
    return LoanModel(**payload)


class RepaymentFormulaTests(unittest.TestCase):
    """Simple interest over the whole term, rounded to cents."""

    def test_twelve_percent_for_twelve_months(self) -> None:
        """1000 at 12% for 12 months repays 1120."""
        self.assertEqual(compute_repayment_amount(1000, 12, 12), 1120.0)

    def test_partial_year(self) -> None:
        """Six months at 10% adds 5%."""
        self.assertEqual(compute_repayment_amount(2000, 10, 6), 2100.0)

    def test_zero_interest(self) -> None:
        self.assertEqual(compute_repayment_amount(500, 0, 24), 500.0)

    def test_rounds_half_up_to_cents(self) -> None:
        """333.33 at 5% for 7 months is 343.0513..., stored as 343.05."""
        self.assertEqual(compute_repayment_amount(333.33, 5, 7), 343.05)

    def test_model_property_uses_formula(self) -> None:
        self.assertEqual(_pending_loan().repayment_amount, 1120.0)


class LoanLifecycleTests(unittest.TestCase):
    """Status moves only pending -> funded -> completed or pending -> rejected."""

    def test_defaults(self) -> None:
        """New loans are pending, unfunded, online and without collateral."""
        loan = _pending_loan()
        self.assertEqual(loan.status, LoanStatus.PENDING)
        self.assertIsNone(loan.lender_id)
        self.assertIsNone(loan.funded_at)
        self.assertEqual(loan.payment_mode, PaymentMode.ONLINE)
        self.assertFalse(loan.has_collateral)

    def test_fund_then_complete(self) -> None:
        loan = _pending_loan()
        loan.fund("usr_l")
        self.assertEqual(loan.status, LoanStatus.FUNDED)
        self.assertEqual(loan.lender_id, "usr_l")
        self.assertIsNotNone(loan.funded_at)

        loan.complete()
        self.assertEqual(loan.status, LoanStatus.COMPLETED)
        self.assertIsNotNone(loan.completed_at)

    def test_cannot_fund_twice(self) -> None:
        """A funded loan keeps its first lender."""
        loan = _pending_loan()
        loan.fund("usr_l")
        with self.assertRaises(InvalidStateError):
            loan.fund("usr_other")
        self.assertEqual(loan.lender_id, "usr_l")

    def test_cannot_complete_pending(self) -> None:
        with self.assertRaises(InvalidStateError):
            _pending_loan().complete()

    def test_completed_is_terminal(self) -> None:
        """No transition leaves `completed`."""
        loan = _pending_loan()
        loan.fund("usr_l")
        loan.complete()
        for transition in (lambda: loan.fund("usr_x"), loan.complete, loan.reject):
            with self.assertRaises(InvalidStateError):
                transition()
        self.assertEqual(loan.status, LoanStatus.COMPLETED)

    def test_reject_only_from_pending(self) -> None:
        loan = _pending_loan()
        loan.reject()
        self.assertEqual(loan.status, LoanStatus.REJECTED)
        with self.assertRaises(InvalidStateError):
            loan.fund("usr_l")

    def test_funded_loan_requires_lender(self) -> None:
        """Stored payloads claiming funded without a lender are rejected."""
        with self.assertRaises(ValidationError):
            _pending_loan(status=LoanStatus.FUNDED)

    def test_amount_must_be_positive(self) -> None:
        with self.assertRaises(ValidationError):
            _pending_loan(amount=0)

    def test_amount_rounded_to_cents(self) -> None:
        """Sub-cent principals are stored at cent precision."""
        self.assertEqual(_pending_loan(amount=0.005).amount, 0.01)
        self.assertEqual(_pending_loan(amount=250.125).amount, 250.13)

    def test_amount_rounding_to_zero_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            _pending_loan(amount=0.004)

    def test_invalid_payment_mode(self) -> None:
        with self.assertRaises(ValidationError):
            _pending_loan(payment_mode="barter")

    def test_firestore_round_trip_keeps_status_string(self) -> None:
        """Enums are stored as their plain values."""
        loan = _pending_loan()
        loan.fund("usr_l")
        payload = loan.to_firestore()
        self.assertEqual(payload["status"], "funded")
        restored = LoanModel.from_firestore(payload, doc_id="loan_1")
        self.assertEqual(restored.lender_id, "usr_l")

    def test_from_firestore_wraps_bad_payload(self) -> None:
        with self.assertRaises(ModelValidationError):
            LoanModel.from_firestore({"borrower_id": "usr_b"}, doc_id="loan_x")

    def test_response_joins_parties(self) -> None:
        payload = _pending_loan().to_response(borrower={"id": "usr_b", "name": "B", "email": "b@x.io"})
        self.assertEqual(payload["borrower"]["name"], "B")
        self.assertIsNone(payload["lender"])
        self.assertNotIn("is_deleted", payload)


class UserModelTests(unittest.TestCase):
    """Validate user normalization and balance rules."""

    def test_user_model_happy_path(self) -> None:
        user = UserModel(name="Ada", email="Ada@Example.COM", role=UserRole.LENDER, balance=10.005)
        self.assertEqual(user.email, "ada@example.com")
        self.assertEqual(user.balance, 10.01)
        self.assertEqual(user.location.city, "")

    def test_negative_balance_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            UserModel(name="Ada", email="ada@example.com", role="lender", balance=-1)

    def test_unknown_role_rejected(self) -> None:
        with self.assertRaises(ValidationError):
            UserModel(name="Ada", email="ada@example.com", role="admin")

    def test_null_location_defaults(self) -> None:
        user = UserModel(name="Ada", email="ada@example.com", role="borrower", location=None)
        self.assertEqual(user.location, LocationModel())

    def test_location_match_is_case_insensitive(self) -> None:
        location = LocationModel(city="Pune", country="India")
        self.assertTrue(location.matches("pun"))
        self.assertTrue(location.matches("INDIA"))
        self.assertFalse(location.matches("Delhi"))

    def test_summary_fields(self) -> None:
        user = UserModel(id="usr_1", name="Ada", email="ada@example.com", role="borrower")
        self.assertEqual(user.summary(), {"id": "usr_1", "name": "Ada", "email": "ada@example.com"})
        self.assertIn("location", user.summary(include_location=True))


class ErrorDetailTests(unittest.TestCase):
    """Client-facing error payloads."""

    def test_insufficient_funds_detail_carries_amounts(self) -> None:
        exc = InsufficientFundsError("Insufficient balance to repay this loan", required=1120.0, available=50.0)
        self.assertEqual(exc.status_code, 400)
        self.assertEqual(
            exc.to_detail(),
            {"msg": "Insufficient balance to repay this loan", "required": 1120.0, "available": 50.0},
        )

    def test_insufficient_funds_without_amounts_is_plain(self) -> None:
        exc = InsufficientFundsError("Insufficient balance to fund this loan")
        self.assertEqual(exc.to_detail(), "Insufficient balance to fund this loan")


if __name__ == "__main__":
    unittest.main()

"""Unit tests for profile registration, deposits and location updates."""

import unittest
from unittest import mock

from genesis.core.memory_client_manager import MemoryClientManager
from genesis.models.enums import UserRole
from genesis.models.exceptions import ModelNotFoundError, ModelValidationError
from genesis.repositories import DocumentUserRepository
from genesis.services.profile_service import ProfileService


class ProfileServiceTests(unittest.TestCase):
    """Validate balance and location rules on the user's own account."""

    def setUp(self) -> None:
        self.store = MemoryClientManager()
        self.users = DocumentUserRepository(self.store)
        self.service = ProfileService(self.store, self.users)
        self.user = self.service.register_user("Ada", "ada@example.com", UserRole.LENDER)

    def test_register_starts_at_zero(self) -> None:
        profile = self.service.get_profile(self.user.id)
        self.assertEqual(profile["balance"], 0.0)
        self.assertEqual(profile["role"], "lender")
        self.assertNotIn("is_deleted", profile)

    def test_duplicate_email_rejected(self) -> None:
        with self.assertRaises(ModelValidationError) as ctx:
            self.service.register_user("Ada Two", "ADA@example.com", UserRole.BORROWER)
        self.assertEqual(str(ctx.exception), "User already exists")

    def test_deposit_adds_to_balance(self) -> None:
        self.service.deposit(self.user.id, 100.10)
        profile = self.service.deposit(self.user.id, "0.20")
        self.assertEqual(profile["balance"], 100.3)
        self.assertEqual(self.users.get_by_id(self.user.id).balance, 100.3)

    def test_deposit_rejects_invalid_amounts(self) -> None:
        """Missing, non-positive, sub-cent and non-numeric amounts leave the balance alone."""
        self.service.deposit(self.user.id, 50)
        for amount in (None, 0, -5, 0.004, "abc", float("nan")):
            with self.subTest(amount=amount):
                with self.assertRaises(ModelValidationError) as ctx:
                    self.service.deposit(self.user.id, amount)
                self.assertEqual(str(ctx.exception), "Please provide a valid amount")
        self.assertEqual(self.users.get_by_id(self.user.id).balance, 50.0)

    def test_deposit_unknown_user(self) -> None:
        with self.assertRaises(ModelNotFoundError):
            self.service.deposit("usr_missing", 10)

    def test_update_location(self) -> None:
        profile = self.service.update_location(self.user.id, " Pune ", "India")
        self.assertEqual(profile["location"], {"city": "Pune", "country": "India"})

    def test_update_location_keeps_balance_committed_meanwhile(self) -> None:
        """A deposit landing between the read and the location write is not reverted."""
        original_update = self.store.update_document

        def _deposit_then_update(collection_name, document_id, payload):
            self.store.set_document(collection_name, document_id, {"balance": 500.0}, merge=True)
            return original_update(collection_name, document_id, payload)

        with mock.patch.object(self.store, "update_document", side_effect=_deposit_then_update):
            profile = self.service.update_location(self.user.id, "Pune", "India")
        self.assertEqual(profile["balance"], 500.0)
        stored = self.users.get_by_id(self.user.id)
        self.assertEqual(stored.balance, 500.0)
        self.assertEqual(stored.location.country, "India")

    def test_update_location_requires_both(self) -> None:
        for city, country in (("Pune", None), (None, "India"), ("  ", "India")):
            with self.subTest(city=city, country=country):
                with self.assertRaises(ModelValidationError):
                    self.service.update_location(self.user.id, city, country)
        self.assertEqual(self.users.get_by_id(self.user.id).location.city, "")


if __name__ == "__main__":
    unittest.main()

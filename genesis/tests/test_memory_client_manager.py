"""Unit tests for the in-memory document store and its transactions."""

from datetime import datetime, timedelta, timezone
import unittest
from unittest import mock

from genesis.core.document_store import matches_filters
from genesis.core.memory_client_manager import MemoryClientManager


class MemoryClientManagerTests(unittest.TestCase):
    """CRUD, query and transaction semantics of the local backend."""

    def setUp(self) -> None:
        self.store = MemoryClientManager()
        self.store.set_document("accounts", "a", {"owner": "ann", "balance": 100})
        self.store.set_document("accounts", "b", {"owner": "bob", "balance": 5})

    def test_get_returns_copy_with_id(self) -> None:
        """Mutating a fetched payload does not touch the stored document."""
        payload = self.store.get_document("accounts", "a")
        self.assertEqual(payload["id"], "a")
        payload["balance"] = 0
        self.assertEqual(self.store.get_document("accounts", "a")["balance"], 100)

    def test_get_missing_returns_none(self) -> None:
        self.assertIsNone(self.store.get_document("accounts", "zzz"))

    def test_update_merges_fields(self) -> None:
        self.store.update_document("accounts", "a", {"balance": 50})
        payload = self.store.get_document("accounts", "a")
        self.assertEqual(payload["owner"], "ann")
        self.assertEqual(payload["balance"], 50)

    def test_query_filters_and_descending_order(self) -> None:
        base = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for index in range(3):
            self.store.set_document(
                "events",
                "e{0}".format(index),
                {"kind": "x", "created_at": base + timedelta(days=index)},
            )
        self.store.set_document("events", "other", {"kind": "y", "created_at": base})
        rows = self.store.query_documents(
            "events",
            filters=[("kind", "==", "x")],
            order_by="created_at",
            descending=True,
        )
        self.assertEqual([row["id"] for row in rows], ["e2", "e1", "e0"])

    def test_matches_filters_operators(self) -> None:
        payload = {"rate": 8, "mode": "cash"}
        self.assertTrue(matches_filters(payload, [("rate", "<=", 10), ("mode", "in", ["cash", "cheque"])]))
        self.assertFalse(matches_filters(payload, [("rate", ">", 8)]))
        with self.assertRaises(ValueError):
            matches_filters(payload, [("rate", "~", 1)])

    def test_transaction_commits_all_writes(self) -> None:
        def _move(transaction):
            source = transaction.get_document("accounts", "a")
            target = transaction.get_document("accounts", "b")
            transaction.set_document("accounts", "a", dict(source, balance=source["balance"] - 40))
            transaction.set_document("accounts", "b", dict(target, balance=target["balance"] + 40))
            return "done"

        self.assertEqual(self.store.run_transaction(_move), "done")
        self.assertEqual(self.store.get_document("accounts", "a")["balance"], 60)
        self.assertEqual(self.store.get_document("accounts", "b")["balance"], 45)

    def test_transaction_failure_discards_writes(self) -> None:
        def _fail_midway(transaction):
            source = transaction.get_document("accounts", "a")
            transaction.set_document("accounts", "a", dict(source, balance=0))
            raise RuntimeError("boom")

        with self.assertRaises(RuntimeError):
            self.store.run_transaction(_fail_midway)
        self.assertEqual(self.store.get_document("accounts", "a")["balance"], 100)

    def test_commit_failure_applies_nothing(self) -> None:
        """A write that fails while committing leaves every document untouched."""

        def _move(transaction):
            transaction.set_document("accounts", "a", {"owner": "ann", "balance": 0})
            transaction.set_document("accounts", "b", {"owner": "bob", "balance": 105})

        real_apply = MemoryClientManager._apply_write
        calls = {"count": 0}

        def _flaky_apply(bucket, document_id, payload, merge):
            calls["count"] += 1
            if calls["count"] == 2:
                raise OSError("simulated failure")
            real_apply(bucket, document_id, payload, merge)

        with mock.patch.object(MemoryClientManager, "_apply_write", side_effect=_flaky_apply):
            with self.assertRaises(OSError):
                self.store.run_transaction(_move)
        self.assertEqual(self.store.get_document("accounts", "a")["balance"], 100)
        self.assertEqual(self.store.get_document("accounts", "b")["balance"], 5)

    def test_reads_after_writes_rejected(self) -> None:
        def _bad_order(transaction):
            transaction.set_document("accounts", "a", {"balance": 1})
            transaction.get_document("accounts", "b")

        with self.assertRaises(RuntimeError):
            self.store.run_transaction(_bad_order)
        self.assertEqual(self.store.get_document("accounts", "a")["balance"], 100)

    def test_closed_store_rejects_access(self) -> None:
        self.store.close()
        with self.assertRaises(RuntimeError):
            self.store.get_document("accounts", "a")


if __name__ == "__main__":
    unittest.main()

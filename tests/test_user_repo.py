"""Unit tests for UserRepository — validation and SQL delegation.

The database is a stub exposing only ``safe_execute_query``.
"""

from __future__ import annotations

import unittest
from unittest.mock import AsyncMock

from src.db.base import ResultEnvelope
from src.db.user_repo import (
    INVALID_EMAIL,
    INVALID_ID,
    INVALID_NAME,
    UserRepository,
    is_valid_email,
)
from src.errors import DependencyError


class _EchoDatabase:
    """Pretends every INSERT ... RETURNING * stores and returns its params."""

    def __init__(self):
        self.calls: list[tuple] = []
        self._next_id = 1

    async def safe_execute_query(self, sql, params=None):
        self.calls.append((sql, params))
        if sql.startswith("INSERT INTO users"):
            row = {"id": self._next_id, "name": params[0], "email": params[1]}
            self._next_id += 1
            return ResultEnvelope.ok([row])
        return ResultEnvelope.ok([])


def _stub_db(result: ResultEnvelope | None = None) -> AsyncMock:
    db = AsyncMock()
    db.safe_execute_query.return_value = result or ResultEnvelope.ok([])
    return db


# ===========================================================================
# 1. Construction
# ===========================================================================

class TestRepositoryDependency(unittest.TestCase):
    def test_rejects_none(self):
        with self.assertRaises(DependencyError):
            UserRepository(None)  # type: ignore[arg-type]

    def test_rejects_object_without_capability(self):
        class NotADatabase:
            safe_execute_query = "not callable"

        with self.assertRaises(DependencyError):
            UserRepository(object())  # type: ignore[arg-type]
        with self.assertRaises(DependencyError):
            UserRepository(NotADatabase())  # type: ignore[arg-type]

    def test_accepts_duck_typed_database(self):
        UserRepository(_EchoDatabase())


# ===========================================================================
# 2. Reads
# ===========================================================================

class TestUserReads(unittest.IsolatedAsyncioTestCase):
    async def test_get_all_passes_envelope_through(self):
        envelope = ResultEnvelope.ok([{"id": 1}])
        db = _stub_db(envelope)
        result = await UserRepository(db).get_all()

        self.assertIs(result, envelope)
        db.safe_execute_query.assert_awaited_once_with("SELECT * FROM users ORDER BY id")

    async def test_get_by_id_parameterised(self):
        db = _stub_db()
        await UserRepository(db).get_by_id(42)
        db.safe_execute_query.assert_awaited_once_with(
            "SELECT * FROM users WHERE id = %s", [42]
        )

    async def test_get_by_id_rejects_non_positive_integers(self):
        for bad in (0, -1, -5, 1.5, 2.0, "abc", "3", None, True, [1]):
            with self.subTest(user_id=bad):
                db = _stub_db()
                result = await UserRepository(db).get_by_id(bad)
                self.assertFalse(result.success)
                self.assertEqual(result.error, INVALID_ID)
                self.assertTrue(result.timestamp)
                db.safe_execute_query.assert_not_awaited()

    async def test_get_by_id_error_message(self):
        result = await UserRepository(_stub_db()).get_by_id(-5)
        self.assertEqual(result.error, "Invalid user id (must be positive integer)")

    async def test_order_stats_query(self):
        db = _stub_db()
        await UserRepository(db).get_with_order_stats()

        sql = db.safe_execute_query.await_args.args[0]
        self.assertIn("LEFT JOIN orders o ON u.id = o.user_id", sql)
        self.assertIn("COUNT(o.id) AS order_count", sql)
        self.assertIn("COALESCE(SUM(o.amount), 0) AS total_spent", sql)
        self.assertIn("GROUP BY u.id, u.name, u.email", sql)
        self.assertTrue(sql.strip().endswith("ORDER BY u.id"))

    async def test_query_failure_surfaces_as_envelope(self):
        db = _stub_db(ResultEnvelope.fail('relation "orders" does not exist'))
        result = await UserRepository(db).get_with_order_stats()
        self.assertFalse(result.success)
        self.assertEqual(result.error, 'relation "orders" does not exist')


# ===========================================================================
# 3. Create
# ===========================================================================

class TestUserCreate(unittest.IsolatedAsyncioTestCase):
    async def test_create_returns_inserted_row(self):
        db = _EchoDatabase()
        result = await UserRepository(db).create({"name": "Al", "email": "a@b.com"})

        self.assertTrue(result.success)
        self.assertEqual(result.data[0]["name"], "Al")
        self.assertEqual(result.data[0]["email"], "a@b.com")

    async def test_create_normalises_input(self):
        db = _EchoDatabase()
        await UserRepository(db).create({"name": "  Alice  ", "email": "Alice@Example.COM"})

        sql, params = db.calls[0]
        self.assertEqual(sql, "INSERT INTO users (name, email) VALUES (%s, %s) RETURNING *")
        self.assertEqual(params, ["Alice", "alice@example.com"])

    async def test_short_name_rejected(self):
        for bad in ("A", " A ", "", "   ", None, 12):
            with self.subTest(name=bad):
                db = _EchoDatabase()
                result = await UserRepository(db).create({"name": bad, "email": "a@b.com"})
                self.assertFalse(result.success)
                self.assertEqual(result.error, INVALID_NAME)
                self.assertEqual(db.calls, [])

    async def test_invalid_email_rejected(self):
        for bad in ("a@b", "ab.com", "a b@c.com", "a@b c.com", "@b.com", "a@.com", "a@b.com\n", None):
            with self.subTest(email=bad):
                db = _EchoDatabase()
                result = await UserRepository(db).create({"name": "Al", "email": bad})
                self.assertFalse(result.success)
                self.assertEqual(result.error, INVALID_EMAIL)
                self.assertEqual(db.calls, [])

    async def test_name_checked_before_email(self):
        result = await UserRepository(_EchoDatabase()).create({"name": "A", "email": "bad"})
        self.assertEqual(result.error, "Invalid name (min 2 chars)")

    async def test_missing_keys(self):
        result = await UserRepository(_EchoDatabase()).create({})
        self.assertEqual(result.error, INVALID_NAME)


class TestEmailPattern(unittest.TestCase):
    def test_accepts_simple_addresses(self):
        for ok in ("a@b.com", "first.last@sub.example.org", "x+tag@d.io"):
            with self.subTest(email=ok):
                self.assertTrue(is_valid_email(ok))


if __name__ == "__main__":
    unittest.main()

"""Repository for the ``users`` table — SQL and input validation only.

Works with any object exposing ``safe_execute_query`` (``PostgresConnection``,
another adapter, or a test double). Every method returns a ``ResultEnvelope``.
"""

from __future__ import annotations

import logging
import re
from typing import Any, Mapping

from src.db.base import ResultEnvelope, SupportsSafeQuery
from src.errors import DependencyError
from src.utils.redact import redact

logger = logging.getLogger(__name__)

_EMAIL_RE = re.compile(r"[^\s@]+@[^\s@]+\.[^\s@]+")

INVALID_ID = "Invalid user id (must be positive integer)"
INVALID_NAME = "Invalid name (min 2 chars)"
INVALID_EMAIL = "Invalid email format"

_ORDER_STATS_SQL = """
    SELECT
        u.id,
        u.name,
        u.email,
        COUNT(o.id) AS order_count,
        COALESCE(SUM(o.amount), 0) AS total_spent
    FROM users u
    LEFT JOIN orders o ON u.id = o.user_id
    GROUP BY u.id, u.name, u.email
    ORDER BY u.id
"""


def is_valid_user_id(value: Any) -> bool:
    # bool is an int subclass; True must not pass as id 1
    return isinstance(value, int) and not isinstance(value, bool) and value > 0


def is_valid_name(value: Any) -> bool:
    return isinstance(value, str) and len(value.strip()) >= 2


def is_valid_email(value: Any) -> bool:
    return isinstance(value, str) and _EMAIL_RE.fullmatch(value) is not None


class UserRepository:
    """Single-Responsibility repository for user queries."""

    def __init__(self, db: SupportsSafeQuery):
        if db is None or not callable(getattr(db, "safe_execute_query", None)):
            raise DependencyError(
                "invalid db dependency: BaseDatabase-compatible instance is required"
            )
        self._db = db
        logger.debug("UserRepository ready")

    # -- Read ------------------------------------------------------------------

    async def get_all(self) -> ResultEnvelope:
        logger.info("UserRepository.get_all")
        return await self._db.safe_execute_query("SELECT * FROM users ORDER BY id")

    async def get_by_id(self, user_id: Any) -> ResultEnvelope:
        logger.info(f"UserRepository.get_by_id: id={user_id!r}")
        if not is_valid_user_id(user_id):
            return ResultEnvelope.fail(INVALID_ID)
        return await self._db.safe_execute_query(
            "SELECT * FROM users WHERE id = %s", [user_id]
        )

    async def get_with_order_stats(self) -> ResultEnvelope:
        """Per-user order count and total amount; users without orders get 0."""
        logger.info("UserRepository.get_with_order_stats")
        return await self._db.safe_execute_query(_ORDER_STATS_SQL)

    # -- Create ----------------------------------------------------------------

    async def create(self, user: Mapping[str, Any]) -> ResultEnvelope:
        """Insert a user and return the stored row.

        The name is stored stripped and the email lower-cased. Invalid input
        yields a failure envelope and no query is issued.
        """
        name = user.get("name")
        email = user.get("email")
        logger.info(redact(f"UserRepository.create: name={name!r} email={email!r}"))

        if not is_valid_name(name):
            return ResultEnvelope.fail(INVALID_NAME)
        if not is_valid_email(email):
            return ResultEnvelope.fail(INVALID_EMAIL)

        return await self._db.safe_execute_query(
            "INSERT INTO users (name, email) VALUES (%s, %s) RETURNING *",
            [name.strip(), email.lower()],
        )

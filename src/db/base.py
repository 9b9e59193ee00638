"""Abstract database contract shared by every concrete adapter.

``BaseDatabase`` fixes the capability set (connect / disconnect /
execute_query), keeps connection statistics, and provides
``safe_execute_query``, which turns every query outcome into a
``ResultEnvelope`` so callers never need ``try``/``except`` for query errors.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Optional, Protocol, Sequence, runtime_checkable

from src.utils.redact import redact

logger = logging.getLogger(__name__)


def utc_now_iso() -> str:
    """ISO-8601 UTC timestamp with millisecond precision, e.g. ``2024-05-01T12:00:00.000Z``."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


# ---------------------------------------------------------------------------
# Value objects
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ConnectionStats:
    """Read-only snapshot of an adapter's connection statistics."""
    attempts: int = 0
    successful: int = 0
    failed: int = 0
    is_connected: bool = False
    last_connection_time: Optional[datetime] = None


@dataclass(frozen=True)
class ResultEnvelope:
    """Uniform outcome of a repository / safe query call."""

    success: bool
    data: Any = None
    error: Optional[str] = None
    timestamp: str = ""

    @classmethod
    def ok(cls, data: Any) -> "ResultEnvelope":
        return cls(success=True, data=data, timestamp=utc_now_iso())

    @classmethod
    def fail(cls, error: str) -> "ResultEnvelope":
        return cls(success=False, error=error, timestamp=utc_now_iso())

    def to_dict(self) -> dict[str, Any]:
        if self.success:
            return {"success": True, "data": self.data, "timestamp": self.timestamp}
        return {"success": False, "error": self.error, "timestamp": self.timestamp}


@runtime_checkable
class SupportsSafeQuery(Protocol):
    """Capability set a repository needs from its database."""

    async def safe_execute_query(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> ResultEnvelope: ...


# ---------------------------------------------------------------------------
# Abstract base
# ---------------------------------------------------------------------------

class BaseDatabase(ABC):
    """
    Abstract database adapter.

    Subclasses must override ``connect``, ``disconnect`` and
    ``execute_query``; ``abc`` refuses to instantiate the base class or any
    subclass that leaves one of them abstract.
    """

    def __init__(self) -> None:
        self._attempts = 0
        self._successful = 0
        self._failed = 0
        self._is_connected = False
        self._last_connection_time: Optional[datetime] = None

    # -- capability set --------------------------------------------------------

    @abstractmethod
    async def connect(self) -> Any:
        raise NotImplementedError("Method 'connect()' must be implemented.")

    @abstractmethod
    async def disconnect(self) -> None:
        raise NotImplementedError("Method 'disconnect()' must be implemented.")

    @abstractmethod
    async def execute_query(self, sql: str, params: Optional[Sequence[Any]] = None) -> Any:
        raise NotImplementedError("Method 'execute_query()' must be implemented.")

    # -- statistics ------------------------------------------------------------

    @property
    def connection_stats(self) -> ConnectionStats:
        return ConnectionStats(
            attempts=self._attempts,
            successful=self._successful,
            failed=self._failed,
            is_connected=self._is_connected,
            last_connection_time=self._last_connection_time,
        )

    def _update_connection_stats(self, success: bool) -> None:
        """Record one connection event. Only adapters call this."""
        self._attempts += 1
        if success:
            self._successful += 1
            self._is_connected = True
            self._last_connection_time = datetime.now(timezone.utc)
        else:
            self._failed += 1
            self._is_connected = False

    # -- template method -------------------------------------------------------

    async def safe_execute_query(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> ResultEnvelope:
        """Run ``execute_query`` and wrap the outcome; query errors are returned, not raised."""
        try:
            result = await self.execute_query(sql, params)
        except Exception as e:
            logger.error(redact(f"Query failed: {e}"))
            return ResultEnvelope.fail(str(e))
        return ResultEnvelope.ok(result)

"""PostgreSQL adapter backed by a psycopg async connection pool.

Infrastructure only: pool lifecycle, client hand-out and statement
execution. No domain logic lives here.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Any, Optional, Sequence

from psycopg import AsyncConnection
from psycopg.conninfo import make_conninfo
from psycopg.rows import dict_row
from psycopg_pool import AsyncConnectionPool

from src.config import PostgresConfig, load_postgres_config
from src.db.base import BaseDatabase
from src.errors import PoolInitializationError, UninitializedError
from src.utils.redact import redact

logger = logging.getLogger(__name__)

_PREVIEW_CHARS = 80


@dataclass(frozen=True)
class QueryResult:
    """Materialised output of one statement, as returned by the driver."""
    rows: list[dict[str, Any]] = field(default_factory=list)
    row_count: int = 0
    status: Optional[str] = None


class PostgresConnection(BaseDatabase):
    """
    ``BaseDatabase`` implementation for PostgreSQL.

    The pool is created (closed) in the constructor and opened on first use.
    Clients returned by ``connect()`` belong to the caller until handed back
    with ``release()``.
    """

    def __init__(
        self,
        config: Optional[PostgresConfig] = None,
        *,
        min_size: int = 1,
        max_size: int = 10,
        timeout: float = 30.0,
    ):
        super().__init__()
        logger.info("PostgresConnection: start")

        self._config = config or load_postgres_config()
        self._min_size = min_size
        self._max_size = max_size
        self._timeout = timeout
        self._pool: Optional[AsyncConnectionPool] = None
        self._is_initialized = False

        self._initialize_pool()
        logger.info("PostgresConnection: ready")

    # -- pool lifecycle --------------------------------------------------------

    def _initialize_pool(self) -> None:
        logger.info("PostgresConnection: initializing pool...")
        try:
            conninfo = make_conninfo(
                user=self._config.user,
                password=self._config.password,
                host=self._config.host,
                port=self._config.port,
                dbname=self._config.database,
            )
            self._pool = AsyncConnectionPool(
                conninfo,
                min_size=self._min_size,
                max_size=self._max_size,
                timeout=self._timeout,
                kwargs={"row_factory": dict_row},
                reconnect_failed=self._on_pool_error,
                name=f"pg_{self._config.database}",
                open=False,
            )
        except Exception as e:
            self._pool = None
            self._is_initialized = False
            raise PoolInitializationError(redact(f"failed to initialize pool: {e}")) from e

        self._is_initialized = True
        logger.info(
            f"PostgresConnection: pool created with config: {self._config.safe_dict()}"
        )

    def _on_pool_error(self, pool: AsyncConnectionPool) -> None:
        """Pool-level failure hook: the pool gave up reconnecting in the background."""
        logger.error(f"PostgresConnection: pool error (reconnect failed) on {pool.name}")
        self._update_connection_stats(False)

    async def _ensure_open(self) -> AsyncConnectionPool:
        if not self._is_initialized or self._pool is None:
            raise UninitializedError("pool is not initialized")
        if self._pool.closed:
            await self._pool.open()
        return self._pool

    # -- BaseDatabase ----------------------------------------------------------

    async def connect(self) -> AsyncConnection:
        """Check a client out of the pool. Return it with ``release()``."""
        if not self._is_initialized:
            raise UninitializedError("connect: pool is not initialized")

        try:
            pool = await self._ensure_open()
            client = await pool.getconn()
        except Exception as e:
            self._update_connection_stats(False)
            logger.error(redact(f"PostgresConnection: connect failed: {e}"))
            raise
        self._update_connection_stats(True)
        logger.info("PostgresConnection: connect: client acquired")
        return client

    async def release(self, client: AsyncConnection) -> None:
        """Hand a client obtained from ``connect()`` back to the pool."""
        if self._pool is None:
            raise UninitializedError("release: pool is not initialized")
        await self._pool.putconn(client)

    async def disconnect(self) -> None:
        """Close the pool. A second call is a no-op."""
        if self._pool is None:
            logger.info("PostgresConnection: disconnect: already disconnected")
            return

        try:
            await self._pool.close()
        except Exception as e:
            logger.error(redact(f"PostgresConnection: disconnect failed: {e}"))
            raise
        self._pool = None
        self._is_initialized = False
        self._update_connection_stats(False)
        logger.info("PostgresConnection: disconnect: pool closed")

    async def execute_query(
        self, sql: str, params: Optional[Sequence[Any]] = None
    ) -> QueryResult:
        """Run one parameterised statement on a pooled connection.

        Prefer ``safe_execute_query`` unless the caller wants to handle errors itself.
        """
        if not self._is_initialized:
            raise UninitializedError("execute_query: pool is not initialized")

        logger.debug(
            f"PostgresConnection: execute_query: preview={str(sql)[:_PREVIEW_CHARS]!r} "
            f"params_count={len(params) if params else 0}"
        )
        pool = await self._ensure_open()
        async with pool.connection() as conn:
            cur = await conn.execute(sql, params or None)
            rows = await cur.fetchall() if cur.description is not None else []
            return QueryResult(rows=list(rows), row_count=cur.rowcount, status=cur.statusmessage)

    # -- accessors -------------------------------------------------------------

    @property
    def config(self) -> PostgresConfig:
        return replace(self._config)

    @property
    def is_initialized(self) -> bool:
        return self._is_initialized

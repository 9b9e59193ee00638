"""
Central configuration loader.
Reads from environment variables (via .env); validates required keys.
NEVER logs secret values.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Optional

from dotenv import load_dotenv

from src.errors import ConfigurationError

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Load .env from repo root (if present); real env vars take precedence
# ---------------------------------------------------------------------------
_REPO_ROOT = Path(__file__).resolve().parents[1]
load_dotenv(_REPO_ROOT / ".env")

DEFAULT_POSTGRES_HOST = "localhost"
DEFAULT_POSTGRES_PORT = 5432
REQUIRED_POSTGRES_VARS = ("POSTGRES_USER", "POSTGRES_PASSWORD", "POSTGRES_DB")


def _get(key: str, default: Optional[str] = None) -> Optional[str]:
    val = os.getenv(key)
    return val if val else default


def _int(key: str, default: int) -> int:
    raw = os.getenv(key)
    if raw is None or raw == "":
        return default
    try:
        value = int(raw)
    except ValueError:
        logger.warning(f"Invalid integer for {key}={raw!r}, using {default}")
        return default
    if value <= 0:
        logger.warning(f"Non-positive {key}={value}, using {default}")
        return default
    return value


# ---------------------------------------------------------------------------
# PostgreSQL config
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class PostgresConfig:
    user: str
    database: str
    password: str = field(repr=False)
    host: str = DEFAULT_POSTGRES_HOST
    port: int = DEFAULT_POSTGRES_PORT

    def safe_dict(self) -> dict[str, Any]:
        """Connection settings without the password, for logs."""
        return {
            "user": self.user,
            "host": self.host,
            "database": self.database,
            "port": self.port,
        }


def load_postgres_config() -> PostgresConfig:
    """Build a PostgresConfig from ``POSTGRES_*`` variables.

    Raises ConfigurationError listing every missing required variable.
    """
    missing = [key for key in REQUIRED_POSTGRES_VARS if not os.getenv(key)]
    if missing:
        raise ConfigurationError(missing)

    config = PostgresConfig(
        user=str(os.environ["POSTGRES_USER"]),
        host=_get("POSTGRES_HOST", default=DEFAULT_POSTGRES_HOST),  # type: ignore[arg-type]
        database=str(os.environ["POSTGRES_DB"]),
        password=str(os.environ["POSTGRES_PASSWORD"]),
        port=_int("POSTGRES_PORT", DEFAULT_POSTGRES_PORT),
    )
    logger.info("PostgreSQL env config loaded")
    return config


# ---------------------------------------------------------------------------
# HTTP server config
# ---------------------------------------------------------------------------
@dataclass(frozen=True)
class ServerConfig:
    host: str
    port: int
    reload: bool


def get_server_config() -> ServerConfig:
    return ServerConfig(
        host=_get("SERVER_HOST", default="0.0.0.0"),  # type: ignore[arg-type]
        port=_int("SERVER_PORT", 8000),
        reload=_get("SERVER_RELOAD", default="false").lower() in ("1", "true", "yes"),  # type: ignore[union-attr]
    )


def get_log_level() -> str:
    return (_get("LOG_LEVEL", default="INFO") or "INFO").upper()

"""Exceptions raised by the data-access layer.

Query failures never show up here: they are contained by
``BaseDatabase.safe_execute_query`` and returned as failure envelopes.
"""

from __future__ import annotations

from typing import Iterable


class DatabaseLayerError(Exception):
    """Base class for infrastructure errors raised by this package."""


class ConfigurationError(DatabaseLayerError, EnvironmentError):
    """Required connection settings are missing from the environment."""

    def __init__(self, missing: Iterable[str]):
        self.missing = list(missing)
        super().__init__(f"Missing env variables: {', '.join(self.missing)}")


class PoolInitializationError(DatabaseLayerError):
    """The connection pool could not be constructed."""


class UninitializedError(DatabaseLayerError):
    """An operation needed the pool before it was created or after it was closed."""


class DependencyError(DatabaseLayerError, TypeError):
    """A repository was handed an object without the database capability set."""

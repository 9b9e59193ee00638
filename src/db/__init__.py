"""Database layer — abstract adapter contract, PostgreSQL adapter, repositories."""

from src.db.base import BaseDatabase, ConnectionStats, ResultEnvelope, SupportsSafeQuery
from src.db.postgres import PostgresConnection, QueryResult
from src.db.schema import SCHEMA_DDL
from src.db.user_repo import UserRepository

__all__ = [
    "BaseDatabase", "ConnectionStats", "ResultEnvelope", "SupportsSafeQuery",
    "PostgresConnection", "QueryResult",
    "SCHEMA_DDL",
    "UserRepository",
]

"""FastAPI web server exposing the users repository."""
from __future__ import annotations

import sys
from pathlib import Path
from contextlib import asynccontextmanager
from typing import Any, Optional

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

from fastapi import FastAPI
from fastapi.encoders import jsonable_encoder
from fastapi.responses import JSONResponse
from pydantic import BaseModel
from dotenv import load_dotenv

load_dotenv()

from src.db.base import ResultEnvelope
from src.db.postgres import PostgresConnection, QueryResult
from src.db.user_repo import UserRepository, INVALID_EMAIL, INVALID_ID, INVALID_NAME

_VALIDATION_ERRORS = {INVALID_ID, INVALID_NAME, INVALID_EMAIL}

# Global service instances
_db: Optional[PostgresConnection] = None
_users: Optional[UserRepository] = None


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create the pool on startup and close it on shutdown."""
    global _db, _users

    _db = PostgresConnection()
    _users = UserRepository(_db)
    print(f"Server started - DB: {_db.config.safe_dict()}")
    yield

    print("Server shutting down")
    await _db.disconnect()
    _db = None
    _users = None


app = FastAPI(
    title="Users API",
    description="Users data-access layer over PostgreSQL",
    version="1.0.0",
    lifespan=lifespan,
)


# Request/Response Models
class UserCreate(BaseModel):
    name: str
    email: str


def _render(
    envelope: ResultEnvelope, ok_status: int = 200, not_found_if_empty: bool = False
) -> JSONResponse:
    """Turn an envelope into a JSON response; query results are rendered as their rows."""
    body: dict[str, Any] = envelope.to_dict()
    if envelope.success:
        data = envelope.data
        rows = data.rows if isinstance(data, QueryResult) else data
        body["data"] = rows
        status = ok_status
        if not_found_if_empty and not rows:
            status = 404
    elif envelope.error in _VALIDATION_ERRORS:
        status = 400
    else:
        status = 500
    return JSONResponse(status_code=status, content=jsonable_encoder(body))


def _unavailable() -> JSONResponse:
    return JSONResponse(
        status_code=503,
        content=ResultEnvelope.fail("Database not initialized").to_dict(),
    )


# API Routes
@app.get("/api/health")
async def health():
    """Connection statistics of the shared adapter."""
    if not _db:
        return _unavailable()
    stats = _db.connection_stats
    return jsonable_encoder({
        "status": "ok" if _db.is_initialized else "uninitialized",
        "is_initialized": _db.is_initialized,
        "connection_stats": stats,
    })


@app.get("/api/users")
async def list_users():
    if not _users:
        return _unavailable()
    return _render(await _users.get_all())


@app.get("/api/users/stats")
async def users_with_order_stats():
    """Users with their order count and total spent."""
    if not _users:
        return _unavailable()
    return _render(await _users.get_with_order_stats())


@app.get("/api/users/{user_id}")
async def get_user(user_id: int):
    if not _users:
        return _unavailable()
    return _render(await _users.get_by_id(user_id), not_found_if_empty=True)


@app.post("/api/users")
async def create_user(request: UserCreate):
    if not _users:
        return _unavailable()
    envelope = await _users.create({"name": request.name, "email": request.email})
    return _render(envelope, ok_status=201)

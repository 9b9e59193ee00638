#!/usr/bin/env python3
"""Create the users/orders tables and optionally seed users from a YAML file."""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from pathlib import Path

sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from src.config import get_log_level
from src.db.postgres import PostgresConnection
from src.db.schema import SCHEMA_DDL
from src.db.user_repo import UserRepository


async def run(seed_users: str | None) -> int:
    db = PostgresConnection()
    try:
        result = await db.safe_execute_query(SCHEMA_DDL)
        if not result.success:
            print(f"Schema failed: {result.error}")
            return 1
        print(f"Schema applied to: {db.config.database}@{db.config.host}:{db.config.port}")

        if seed_users:
            await _seed_users(UserRepository(db), Path(seed_users))
    finally:
        await db.disconnect()
    print("Done.")
    return 0


async def _seed_users(repo: UserRepository, path: Path) -> None:
    import yaml
    with open(path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    for u in data.get("users", []):
        result = await repo.create({"name": u.get("name"), "email": u.get("email")})
        if result.success:
            print(f"  Created user: {u.get('name')}")
        else:
            print(f"  Skipping {u.get('name', '?')}: {result.error}")


def main():
    parser = argparse.ArgumentParser(description="Initialize the database")
    parser.add_argument("--seed-users", type=str, help="YAML file with a top-level 'users' list")
    args = parser.parse_args()

    logging.basicConfig(level=get_log_level())
    sys.exit(asyncio.run(run(args.seed_users)))


if __name__ == "__main__":
    main()

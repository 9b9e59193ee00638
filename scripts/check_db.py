"""Quick connectivity check: server time, version and connection stats."""
import asyncio
import sys
from pathlib import Path
sys.path.insert(0, str(Path(__file__).resolve().parents[1]))

from src.db.postgres import PostgresConnection


async def main() -> int:
    db = PostgresConnection()
    try:
        client = await db.connect()
        await db.release(client)

        result = await db.safe_execute_query("SELECT NOW() AS now, version() AS version")
        if not result.success:
            print(f"Query failed: {result.error}")
            return 1
        row = result.data.rows[0]
        print("=== Server ===")
        print(f"  now:     {row['now']}")
        print(f"  version: {row['version']}")
    finally:
        await db.disconnect()

    stats = db.connection_stats
    print("\n=== Connection stats ===")
    print(f"  attempts={stats.attempts} successful={stats.successful} failed={stats.failed}")
    print(f"  last connection: {stats.last_connection_time}")
    return 0


if __name__ == "__main__":
    sys.exit(asyncio.run(main()))

"""
Example 02: Async Support

This example runs the same flow with AsyncEngine and concurrent callers
sharing a small pool. Each call leases its own connection.
"""

import asyncio
import os

from dyn_query import AsyncEngine, ConnectionConfig, Int, Vector, to_python, vector


async def main():
    config = ConnectionConfig(
        conninfo=os.environ.get("DATABASE_URL", "dbname=postgres"),
        pool_size=2,
    )

    async with AsyncEngine.from_config(config) as engine:
        print("=== Async Query Execution ===\n")

        results = await asyncio.gather(
            *(engine.query("SELECT $1::int4 * 2", vector(Int(n))) for n in range(5))
        )
        print(f"gathered: {[to_python(r) for r in results]}")

        empty = await engine.query("SELECT 1::int4 WHERE false")
        print(f"zero rows: {empty} (empty: {empty == Vector(())})")


if __name__ == "__main__":
    asyncio.run(main())

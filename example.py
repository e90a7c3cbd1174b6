#!/usr/bin/env python3
"""
Example usage of WireQL Python SDK
"""

import asyncio
from typing import Any, Dict, List

from wireql_client import ClientEvent, WireQLError, create_client


async def main() -> None:
    config: Dict[str, Any] = {
        "host": "localhost",
        "port": 8080,
        "api_key": "your-api-key",
        "default_database": "your-database",
        "serialization_format": "json",
        "timeout": 30000,
    }

    wireql = create_client(config)
    wireql.on(ClientEvent.RECONNECTING, lambda attempt, delay: print(f"Reconnecting ({attempt}) in {delay}ms"))

    try:
        await wireql.connect()
        print("Connected to WireQL")

        print("\nExecuting simple query...")
        result = await wireql("SELECT 1 as test_value")
        print(f"Result: {result.data}")

        print("\nQuery with parameters...")
        result = await wireql.query(
            "SELECT * FROM users WHERE id = ? AND status = ?", [1, "active"]
        )
        print(f"Found {len(result.data or [])} users in {result.metrics.total_time:.1f}ms")

        print("\nTransaction...")
        await wireql.transaction(
            [
                {"op": "insert", "query": "INSERT INTO logs (action, user_id) VALUES (?, ?)", "values": ["login", 1]},
                {"op": "update", "query": "UPDATE users SET last_login = NOW() WHERE id = ?", "values": [1]},
            ]
        )

        print("\nBatch queries...")
        queries: List[Dict[str, Any]] = [
            {"sql": "SELECT COUNT(*) as total FROM logs"},
            {"sql": "SELECT * FROM users LIMIT 10"},
        ]
        results = await wireql.batch(queries, {"parallel": True})
        print(f"Batch returned {len(results)} results")

        print("\nStreaming rows...")
        stream = await wireql.stream("SELECT * FROM users")
        async for row in stream:
            print(row)

        print(f"\nStats: {wireql.get_stats()}")
    except WireQLError as e:
        print(f"WireQL error: {e.code} - {e}")
    finally:
        await wireql.client.close()


if __name__ == "__main__":
    asyncio.run(main())

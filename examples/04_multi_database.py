"""
Example 04: Multiple Databases

This example demonstrates routing tables to named databases.
"""

import asyncio

from query_kit import DatabaseConfig, MultiDatabaseManager, QueryBuilder, QueryKitConfig


async def main():
    registry = MultiDatabaseManager(
        {
            "main": DatabaseConfig(driver="sqlite", database=":memory:"),
            "analytics": DatabaseConfig(driver="sqlite", database=":memory:", mode="async"),
        },
        default_database="main",
    )
    config = QueryKitConfig(
        multi_db=registry, database_name="main", table_to_database={"events": "analytics"}
    )
    registry.get_adapter("main").run_sync(
        "CREATE TABLE users (id INTEGER PRIMARY KEY, name TEXT)", []
    )
    await registry.get_adapter("analytics").execute_query(
        "CREATE TABLE events (id INTEGER PRIMARY KEY, kind TEXT)", []
    )

    print("=== Multi-Database Routing ===\n")
    await QueryBuilder("users", config).insert({"name": "Alice"}).make()
    await QueryBuilder("events", config).insert({"kind": "signup"}).make()
    print(f"users (main): {await QueryBuilder('users', config).all()}")
    print(f"events (analytics): {await QueryBuilder('events', config).all()}")

    results = await registry.execute_on_multiple(["main", "analytics"], "SELECT 1 AS ok")
    for name, result in results.items():
        print(f"  {name}: {result}")

    await registry.close_all()


if __name__ == "__main__":
    asyncio.run(main())

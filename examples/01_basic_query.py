"""
Example 01: Basic Queries

This example demonstrates fluent reads and writes against SQLite using QueryBuilder.
"""

import asyncio

from query_kit import QueryBuilder, SqliteExecutor, set_default_executor


async def main():
    executor = SqliteExecutor(":memory:")
    executor.run_sync(
        """
        CREATE TABLE users (
            id INTEGER PRIMARY KEY,
            name TEXT NOT NULL,
            email TEXT NOT NULL,
            active INTEGER DEFAULT 1
        )
        """,
        [],
    )
    set_default_executor(executor)

    print("=== Basic Queries ===\n")

    # insert: one statement for many rows
    result = await QueryBuilder("users").insert(
        [
            {"name": "Alice", "email": "alice@example.com"},
            {"name": "Bob", "email": "bob@example.com"},
            {"name": "Charlie", "email": "charlie@example.com", "active": 0},
        ]
    ).make()
    print(f"insert result: {result}\n")

    # all: filtered and ordered
    active = await QueryBuilder("users").where("active", 1).order_by("name").all()
    print(f"active users ({len(active)} rows):")
    for user in active:
        print(f"  - {user['name']} ({user['email']})")
    print()

    # first / find / pluck / exists
    print(f"first: {await QueryBuilder('users').first()}")
    print(f"find(2): {await QueryBuilder('users').find(2)}")
    print(f"pluck names: {await QueryBuilder('users').pluck('name')}")
    print(f"exists 'zed': {await QueryBuilder('users').where('name', 'zed').exists()}\n")

    # update / increment / delete require a where clause
    await QueryBuilder("users").where("name", "Charlie").update({"active": 1}).make()
    await QueryBuilder("users").where("id", 1).delete().make()

    # sync entry points work with executors that expose execute_query_sync
    count = QueryBuilder("users").count().scalar_sync("count")
    print(f"remaining users: {count}")

    executor.close()


if __name__ == "__main__":
    asyncio.run(main())

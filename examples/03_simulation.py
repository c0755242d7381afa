"""
Example 03: Simulation and Tracking

This example demonstrates dry-running writes against an in-memory snapshot.
"""

import asyncio

from query_kit import QueryBuilder, QueryKitConfig, SqliteExecutor


async def main():
    executor = SqliteExecutor(":memory:")
    executor.run_sync("CREATE TABLE stock (id INTEGER PRIMARY KEY, sku TEXT, qty INTEGER)", [])
    executor.run_sync("INSERT INTO stock (sku, qty) VALUES ('a', 5), ('b', 0)", [])
    config = QueryKitConfig(default_executor=executor)

    print("=== Tracking ===\n")
    query = QueryBuilder("stock", config)
    await query.initial()
    query.where("sku", "a").decrement("qty", 2)
    for entry in query.tracking():
        print(f"  {entry.step}: {entry.details}")
    print()

    print("=== Simulation ===\n")
    await config.simulator.start({"stock": QueryBuilder("stock", config)})
    QueryBuilder("stock", config).where("sku", "b").delete().tracking()
    print(f"simulated: {await QueryBuilder('stock', config).all()}")
    config.simulator.stop()
    print(f"database: {await QueryBuilder('stock', config).all()}")

    executor.close()


if __name__ == "__main__":
    asyncio.run(main())

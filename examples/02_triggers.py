"""
Example 02: Triggers and Views

This example demonstrates native and in-process triggers plus views.
"""

import asyncio

from query_kit import QueryBuilder, QueryKitConfig, SqliteExecutor, TriggerManager, ViewManager


async def main():
    executor = SqliteExecutor(":memory:")
    executor.run_sync("CREATE TABLE orders (id INTEGER PRIMARY KEY, total INTEGER)", [])
    executor.run_sync("CREATE TABLE audit (id INTEGER PRIMARY KEY, note TEXT)", [])
    config = QueryKitConfig(default_executor=executor)
    triggers = TriggerManager(config)

    print("=== Triggers ===\n")

    # SQL body in bank mode: installed as a native database trigger
    triggers.create(
        "order_audit",
        when="AFTER",
        action="INSERT",
        table="orders",
        body="INSERT INTO audit (note) VALUES ('order ' || NEW.id)",
    )

    # Callable body in state mode: runs in-process after each write
    async def announce(ctx):
        print(f"  {ctx.timing} {ctx.action} on {ctx.table}: {ctx.data}")

    triggers.create(
        "announce", when="AFTER", action="*", except_="READ", table="orders", body=announce
    )

    await QueryBuilder("orders", config).insert({"total": 40}).make()
    await QueryBuilder("orders", config).where("id", 1).increment("total", 2).make()
    print(f"\naudit: {await QueryBuilder('audit', config).pluck('note')}")
    print(f"registered: {triggers.list()}\n")

    print("=== Views ===\n")
    views = ViewManager(config)
    views.create_or_replace_view(
        "big_orders", QueryBuilder("orders", config).where_raw("total > 10")
    )
    print(f"views: {views.list_views()}")
    print(f"big_orders: {await views.view('big_orders').all()}")

    triggers.drop_all()
    executor.close()


if __name__ == "__main__":
    asyncio.run(main())

"""Concurrent execution of independent queries."""

from __future__ import annotations

import asyncio
from typing import Any

from query_kit.query.builder import QueryBuilder


async def _run(query: QueryBuilder) -> Any:
    if query.has_pending_write():
        return await query.make()
    return await query.all()


async def parallel(*queries: QueryBuilder) -> list[Any]:
    """Run every query concurrently; results come back in argument order.

    Queries holding a pending write are executed with ``make()``, the rest
    with ``all()``. The first failure propagates.
    """
    return list(await asyncio.gather(*(_run(query) for query in queries)))

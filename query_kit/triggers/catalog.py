"""System catalog queries for trigger and view discovery.

Each dialect lists candidate statements in preference order. Listing runs
them one by one and keeps the first that succeeds, so a missing privilege
or catalog on one server version falls through to the next candidate.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable, Mapping, Sequence
from typing import Any

import structlog

from query_kit.core.enums import Dialect
from query_kit.core.results import rows_of

logger = structlog.get_logger(__name__)

TRIGGER_QUERIES: dict[Dialect, tuple[str, ...]] = {
    Dialect.SQLITE: ("SELECT name FROM sqlite_master WHERE type='trigger'",),
    Dialect.MYSQL: (
        "SELECT TRIGGER_NAME AS name FROM INFORMATION_SCHEMA.TRIGGERS "
        "WHERE TRIGGER_SCHEMA = DATABASE()",
    ),
    Dialect.POSTGRES: (
        "SELECT tgname AS name FROM pg_trigger WHERE NOT tgisinternal",
        "SELECT trigger_name AS name FROM information_schema.triggers",
    ),
    Dialect.MSSQL: ("SELECT name FROM sys.triggers",),
    Dialect.ORACLE: ("SELECT TRIGGER_NAME AS name FROM USER_TRIGGERS",),
}

VIEW_QUERIES: dict[Dialect, tuple[str, ...]] = {
    Dialect.SQLITE: ("SELECT name FROM sqlite_master WHERE type='view'",),
    Dialect.MYSQL: (
        "SELECT TABLE_NAME AS name FROM INFORMATION_SCHEMA.VIEWS "
        "WHERE TABLE_SCHEMA = DATABASE()",
    ),
    Dialect.POSTGRES: (
        "SELECT viewname AS name FROM pg_views "
        "WHERE schemaname NOT IN ('pg_catalog', 'information_schema')",
        "SELECT table_name AS name FROM information_schema.views",
    ),
    Dialect.MSSQL: ("SELECT name FROM sys.views",),
    Dialect.ORACLE: ("SELECT VIEW_NAME AS name FROM USER_VIEWS",),
}

_NAME_KEYS = ("name", "NAME", "tgname", "TRIGGER_NAME", "trigger_name", "table_name")


def resolve_dialect(executor: Any, fallback: Dialect | None = None) -> Dialect:
    """Dialect tag of *executor*, else *fallback*, else SQLite."""
    tag = getattr(executor, "dialect", None)
    if isinstance(tag, Dialect):
        return tag
    if isinstance(tag, str):
        try:
            return Dialect(tag.lower())
        except ValueError:
            logger.debug("unknown_dialect_tag", dialect=tag)
    return fallback or Dialect.SQLITE


def row_name(row: Any) -> Any:
    if isinstance(row, Mapping):
        for key in _NAME_KEYS:
            if row.get(key) is not None:
                return row[key]
        return next(iter(row.values()), None)
    if isinstance(row, (list, tuple)):
        return row[0] if row else None
    return row


def _names(result: Any) -> list[str]:
    return [str(name) for name in map(row_name, rows_of(result)) if name is not None]


def first_listing(candidates: Sequence[str], query: Callable[[str, list[Any]], Any]) -> list[str]:
    """Names returned by the first candidate that runs without raising."""
    for sql in candidates:
        try:
            return _names(query(sql, []))
        except Exception as e:
            logger.debug("catalog_candidate_failed", sql=sql, error=str(e))
    return []


async def first_listing_async(
    candidates: Sequence[str], query: Callable[[str, list[Any]], Awaitable[Any]]
) -> list[str]:
    for sql in candidates:
        try:
            return _names(await query(sql, []))
        except Exception as e:
            logger.debug("catalog_candidate_failed", sql=sql, error=str(e))
    return []

"""Database views built from queries."""

from __future__ import annotations

from typing import Any

import structlog

from query_kit.core.config import QueryKitConfig, get_config
from query_kit.core.exceptions import ConfigurationError
from query_kit.core.resolver import resolve_executor
from query_kit.query.builder import QueryBuilder
from query_kit.triggers.catalog import (
    VIEW_QUERIES,
    first_listing,
    first_listing_async,
    resolve_dialect,
)

logger = structlog.get_logger(__name__)


class ViewManager:
    """Create, drop and discover views.

    Args:
        config: Configuration context; defaults to the process-wide one.
    """

    def __init__(self, config: QueryKitConfig | None = None) -> None:
        self._config = config if config is not None else get_config()

    def _run_sync(self, target: str, sql: str, bindings: list[Any] | None = None) -> Any:
        executor = resolve_executor(self._config, target)
        run_sync = getattr(executor, "run_sync", None)
        if not callable(run_sync):
            raise ConfigurationError("executor does not support run_sync")
        return run_sync(sql, bindings or [])

    def create_or_replace_view(self, name: str, query: QueryBuilder) -> None:
        """Drop *name* if present, then ``CREATE VIEW name AS <query>``."""
        sql, bindings = query.to_sql()
        self.drop_view(name)
        self._run_sync(query.table, f"CREATE VIEW {name} AS {sql}", bindings)
        logger.info("view_created", view=name, source=query.table)

    def drop_view(self, name: str) -> None:
        self._run_sync(name, f"DROP VIEW IF EXISTS {name}")

    def list_views(self) -> list[str]:
        executor = resolve_executor(self._config, "")
        query = getattr(executor, "execute_query_sync", None)
        if not callable(query):
            return []
        dialect = resolve_dialect(executor, self._config.dialect)
        return first_listing(VIEW_QUERIES[dialect], query)

    async def list_views_async(self) -> list[str]:
        executor = resolve_executor(self._config, "")
        query = getattr(executor, "execute_query", None)
        if not callable(query):
            return []
        dialect = resolve_dialect(executor, self._config.dialect)
        return await first_listing_async(VIEW_QUERIES[dialect], query)

    def view_exists(self, name: str) -> bool:
        return name in self.list_views()

    def view(self, name: str) -> QueryBuilder:
        """A query builder reading from the view *name*."""
        return QueryBuilder(name, self._config)

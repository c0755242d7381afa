"""Named database connections.

DatabaseConfig is a Pydantic model describing one connection.
MultiDatabaseManager builds an executor per entry and serves as the
registry consulted by executor resolution (``get_adapter``).
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
from collections.abc import Mapping, Sequence
from typing import Any, Literal

import structlog
from pydantic import BaseModel

from query_kit.core.exceptions import AdapterError, RegistryError, UnknownDatabaseError

logger = structlog.get_logger(__name__)


class DatabaseConfig(BaseModel):
    """Configuration for one named database."""

    driver: str
    host: str | None = None
    port: int | None = None
    user: str | None = None
    password: str | None = None
    database: str
    mode: Literal["sync", "async"] = "sync"
    extra: dict[str, Any] = {}


# Executor module mapping: driver name -> (module_path, sync_class, async_class)
_EXECUTOR_MAP: dict[str, tuple[str, str, str]] = {
    "sqlite": ("query_kit.adapters.sqlite", "SqliteExecutor", "AsyncSqliteExecutor"),
    "postgresql": (
        "query_kit.adapters.postgresql",
        "PostgresqlExecutor",
        "AsyncPostgresqlExecutor",
    ),
}
_EXECUTOR_MAP["postgres"] = _EXECUTOR_MAP["postgresql"]


def load_executor(config: DatabaseConfig) -> Any:
    """Build the executor *config* describes."""
    driver = config.driver.lower()
    if driver not in _EXECUTOR_MAP:
        raise AdapterError(f"Unsupported database driver: {config.driver}")

    module_path, sync_cls_name, async_cls_name = _EXECUTOR_MAP[driver]
    cls_name = sync_cls_name if config.mode == "sync" else async_cls_name

    try:
        module = importlib.import_module(module_path)
        return getattr(module, cls_name).from_config(config)
    except (ImportError, AttributeError) as e:
        raise AdapterError(
            f"Failed to load {config.mode} executor for '{config.driver}': {e}"
        ) from e


class MultiDatabaseManager:
    """Registry of named executors.

    Args:
        databases: Database name -> DatabaseConfig (or a ready executor).
        default_database: Name served by :meth:`get_default_adapter`.
    """

    def __init__(
        self,
        databases: Mapping[str, DatabaseConfig | Any] | None = None,
        default_database: str | None = None,
    ) -> None:
        self.default_database = default_database
        self._adapters: dict[str, Any] = {}
        for name, entry in (databases or {}).items():
            self.register(name, entry)

    def register(self, name: str, entry: DatabaseConfig | Any) -> Any:
        executor = load_executor(entry) if isinstance(entry, DatabaseConfig) else entry
        self._adapters[name] = executor
        logger.debug("database_registered", database=name, executor=type(executor).__name__)
        return executor

    @property
    def names(self) -> list[str]:
        return list(self._adapters)

    def get_adapter(self, database_name: str) -> Any:
        try:
            return self._adapters[database_name]
        except KeyError:
            raise UnknownDatabaseError(database_name) from None

    def get_default_adapter(self) -> Any:
        if self.default_database is None:
            raise RegistryError("No default database configured")
        return self.get_adapter(self.default_database)

    async def execute_on_multiple(
        self,
        database_names: Sequence[str],
        sql: str,
        bindings: Sequence[Any] = (),
    ) -> dict[str, Any]:
        """Run *sql* on every named database concurrently.

        A failing database yields ``{"data": [], "error": message}`` in
        place of its result instead of raising.
        """

        async def run(name: str) -> Any:
            try:
                return await self.get_adapter(name).execute_query(sql, list(bindings))
            except Exception as e:
                logger.warning("database_query_failed", database=name, error=str(e))
                return {"data": [], "error": str(e)}

        results = await asyncio.gather(*(run(name) for name in database_names))
        return dict(zip(database_names, results))

    async def close_all(self) -> None:
        """Close every executor that exposes ``close``."""
        for name, executor in self._adapters.items():
            close = getattr(executor, "close", None)
            if not callable(close):
                continue
            result = close()
            if inspect.isawaitable(result):
                await result
            logger.debug("database_closed", database=name)

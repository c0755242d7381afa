"""Executor resolution.

Precedence, first match wins:

1. ``config.executor_resolver(table)``
2. bank hints, tried in order against ``config.multi_db``
3. ``config.table_to_database[table]`` looked up in ``config.multi_db``
4. ``config.database_name`` looked up in ``config.multi_db``
5. ``config.default_executor``

Bank hints that are unknown to the registry (or make it raise) are
skipped, so a query can list fallbacks without checking availability.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import structlog

from query_kit.core.config import QueryKitConfig
from query_kit.core.exceptions import ConfigurationError

logger = structlog.get_logger(__name__)


def _from_registry(registry: Any, name: str) -> Any:
    try:
        return registry.get_adapter(name)
    except Exception as e:
        logger.debug("registry_lookup_failed", database=name, error=str(e))
        return None


def resolve_executor(
    config: QueryKitConfig,
    table: str,
    banks: Sequence[str] | None = None,
) -> Any:
    """Select the executor responsible for *table*.

    Raises:
        ConfigurationError: If no layer yields an executor.
    """
    if config.executor_resolver is not None:
        executor = config.executor_resolver(table)
        if executor is not None:
            return executor

    registry = config.multi_db
    if registry is not None:
        for bank in banks or ():
            executor = _from_registry(registry, bank)
            if executor is not None:
                return executor

        mapped = config.table_to_database.get(table)
        if mapped:
            executor = _from_registry(registry, mapped)
            if executor is not None:
                return executor

        if config.database_name:
            executor = _from_registry(registry, config.database_name)
            if executor is not None:
                return executor

    if config.default_executor is not None:
        return config.default_executor

    raise ConfigurationError(f"cannot resolve an executor for table '{table}'")

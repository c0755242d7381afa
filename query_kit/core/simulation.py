"""Simulation engine: an in-memory stand-in for table state.

While active, reads on a table with virtual state are answered from that
state and tracked writes are applied to it, so callers can dry-run a flow
without touching a database. An external controller configured on the
context takes over all five operations.
"""

from __future__ import annotations

import copy
import inspect
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

import structlog

from query_kit.core.exceptions import ConfigurationError
from query_kit.core.resolver import resolve_executor
from query_kit.core.results import rows_of

if TYPE_CHECKING:
    from query_kit.core.config import QueryKitConfig

logger = structlog.get_logger(__name__)

Rows = list[dict[str, Any]]


class SimulationEngine:
    """Virtual table state keyed by table name."""

    def __init__(self, config: QueryKitConfig) -> None:
        self._config = config
        self._active = False
        self._state: dict[str, Rows] = {}

    @property
    def _controller(self) -> Any:
        return self._config.simulation

    def is_active(self) -> bool:
        if self._controller is not None:
            return bool(self._controller.is_active())
        return self._active

    async def start(self, initial: Mapping[str, Any]) -> None:
        """Activate simulation and load the initial state.

        Each value is either a row sequence (deep-copied in) or a query
        object exposing ``to_sql()``, executed once against the real
        executor to seed the table from live data.
        """
        if self._controller is not None:
            result = self._controller.start(dict(initial))
            if inspect.isawaitable(result):
                await result
            return

        self._active = True
        self._state.clear()
        for table, source in initial.items():
            if isinstance(source, (list, tuple)):
                self._state[table] = copy.deepcopy(list(source))
            else:
                self._state[table] = await self._seed(table, source)
        logger.info("simulation_started", tables=sorted(self._state))

    async def _seed(self, table: str, query: Any) -> Rows:
        sql, bindings = query.to_sql()
        try:
            executor = resolve_executor(
                self._config,
                getattr(query, "table", table),
                getattr(query, "banks", None),
            )
        except ConfigurationError:
            logger.warning("simulation_seed_skipped", table=table, reason="no executor")
            return []
        result = await executor.execute_query(sql, bindings)
        return copy.deepcopy(rows_of(result))

    def stop(self) -> Any:
        """Deactivate and drop all virtual state.

        Returns whatever an external controller's ``stop`` returns, so an
        awaitable can be awaited by the caller.
        """
        if self._controller is not None:
            return self._controller.stop()
        self._active = False
        self._state.clear()
        logger.info("simulation_stopped")
        return None

    def get_state_for(self, table: str) -> Rows | None:
        """Snapshot of *table*'s virtual rows, or None when it has no state."""
        if self._controller is not None:
            return self._controller.get_state_for(table)
        rows = self._state.get(table)
        return copy.deepcopy(rows) if rows is not None else None

    def update_state_for(self, table: str, rows: Rows) -> None:
        """Replace *table*'s virtual rows; ignored while inactive."""
        if not self.is_active():
            return
        if self._controller is not None:
            self._controller.update_state_for(table, rows)
            return
        self._state[table] = copy.deepcopy(list(rows))

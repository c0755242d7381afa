"""Collaborator protocols.

The query layer never talks to a driver directly. It consumes these
capabilities, and executors may implement only part of them: the async
``execute_query`` is the one required method, the sync variants are
optional and detected at call time.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any, Protocol, runtime_checkable


@runtime_checkable
class Executor(Protocol):
    """Minimal executor capability."""

    async def execute_query(self, sql: str, bindings: Sequence[Any]) -> Any:
        """Execute SQL and return ``{data, affected_rows?, last_insert_id?}``."""
        ...


@runtime_checkable
class SyncExecutor(Protocol):
    """Optional synchronous read capability."""

    def execute_query_sync(self, sql: str, bindings: Sequence[Any]) -> Any:
        """Execute SQL synchronously and return ``{data}``."""
        ...


@runtime_checkable
class RunSyncExecutor(Protocol):
    """Optional synchronous write capability."""

    def run_sync(self, sql: str, bindings: Sequence[Any]) -> Any:
        """Execute a write and return ``{changes, last_insert_rowid}``."""
        ...


@runtime_checkable
class MultiDbRegistry(Protocol):
    """Registry of named executors."""

    def get_adapter(self, database_name: str) -> Any:
        """Return the executor for *database_name*; raise if unknown."""
        ...


@runtime_checkable
class EventBus(Protocol):
    """External event bus delegate."""

    def emit(self, event: str, payload: Any = None) -> Any:
        """Publish *payload* under *event*."""
        ...


@runtime_checkable
class SimulationController(Protocol):
    """External simulation controller; replaces the built-in engine entirely."""

    def is_active(self) -> bool: ...

    def get_state_for(self, table: str) -> list[dict[str, Any]] | None: ...

    def update_state_for(self, table: str, rows: list[dict[str, Any]]) -> None: ...

    def start(self, initial: dict[str, Any]) -> Any: ...

    def stop(self) -> Any: ...

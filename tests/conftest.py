"""Shared test fixtures."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

import pytest

from query_kit.core.config import QueryKitConfig


class RecordingExecutor:
    """In-memory executor double that records every statement it receives.

    ``rows`` is returned from every read; ``changes`` from every write.
    """

    dialect = "sqlite"

    def __init__(self, rows: list[dict[str, Any]] | None = None, changes: int = 1) -> None:
        self.rows = rows if rows is not None else []
        self.changes = changes
        self.calls: list[tuple[str, str, list[Any]]] = []

    @property
    def statements(self) -> list[str]:
        return [sql for _, sql, _ in self.calls]

    async def execute_query(self, sql: str, bindings: Sequence[Any]) -> dict[str, Any]:
        self.calls.append(("execute_query", sql, list(bindings)))
        return {"data": [dict(row) for row in self.rows]}

    def execute_query_sync(self, sql: str, bindings: Sequence[Any]) -> dict[str, Any]:
        self.calls.append(("execute_query_sync", sql, list(bindings)))
        return {"data": [dict(row) for row in self.rows]}

    def run_sync(self, sql: str, bindings: Sequence[Any]) -> dict[str, Any]:
        self.calls.append(("run_sync", sql, list(bindings)))
        return {"changes": self.changes, "last_insert_rowid": 1}


class AsyncOnlyExecutor:
    """Executor offering only the required ``execute_query`` coroutine."""

    def __init__(self, rows: list[dict[str, Any]] | None = None) -> None:
        self.rows = rows if rows is not None else []
        self.calls: list[tuple[str, list[Any]]] = []

    async def execute_query(self, sql: str, bindings: Sequence[Any]) -> Any:
        self.calls.append((sql, list(bindings)))
        return ([dict(row) for row in self.rows], {"affectedRows": 2, "insertId": 7})


@pytest.fixture
def executor() -> RecordingExecutor:
    return RecordingExecutor()


@pytest.fixture
def config(executor: RecordingExecutor) -> QueryKitConfig:
    """Isolated configuration context with a recording default executor."""
    return QueryKitConfig(default_executor=executor)


@pytest.fixture
def bare_config() -> QueryKitConfig:
    """Configuration context with nothing configured."""
    return QueryKitConfig()


@pytest.fixture
def async_only_executor() -> AsyncOnlyExecutor:
    return AsyncOnlyExecutor()

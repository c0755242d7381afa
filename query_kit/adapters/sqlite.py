"""SQLite executors - sync (sqlite3 stdlib) and async (aiosqlite)."""

from __future__ import annotations

import sqlite3
from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from query_kit.core.results import QueryResult, WriteResult

if TYPE_CHECKING:
    from query_kit.core.connection import DatabaseConfig


def _is_memory(database: str) -> bool:
    return database == ":memory:" or database.startswith("file::memory:")


def _result(cursor: Any, rows: list[Any]) -> QueryResult:
    return QueryResult(
        data=[dict(row) for row in rows],
        affected_rows=cursor.rowcount if cursor.rowcount >= 0 else None,
        last_insert_id=cursor.lastrowid,
    )


class SqliteExecutor:
    """Synchronous SQLite executor using stdlib sqlite3.

    Implements every executor capability: ``execute_query_sync``,
    ``run_sync`` and an ``execute_query`` coroutine over the same
    connection. Statements autocommit.
    """

    dialect = "sqlite"

    def __init__(self, database: str = ":memory:", **connect_kwargs: Any) -> None:
        self.database = database
        self._connect_kwargs = connect_kwargs
        self._connection: sqlite3.Connection | None = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> SqliteExecutor:
        return cls(config.database, **config.extra)

    @property
    def connection(self) -> sqlite3.Connection:
        if self._connection is None:
            conn = sqlite3.connect(
                self.database, isolation_level=None, **self._connect_kwargs
            )
            conn.row_factory = sqlite3.Row
            if not _is_memory(self.database):
                conn.execute("PRAGMA journal_mode=WAL")
            self._connection = conn
        return self._connection

    def execute_query_sync(self, sql: str, bindings: Sequence[Any] = ()) -> QueryResult:
        cursor = self.connection.execute(sql, list(bindings))
        try:
            rows = cursor.fetchall() if cursor.description else []
            return _result(cursor, rows)
        finally:
            cursor.close()

    def run_sync(self, sql: str, bindings: Sequence[Any] = ()) -> WriteResult:
        cursor = self.connection.execute(sql, list(bindings))
        try:
            return WriteResult(
                changes=max(cursor.rowcount, 0),
                last_insert_rowid=cursor.lastrowid or 0,
            )
        finally:
            cursor.close()

    async def execute_query(self, sql: str, bindings: Sequence[Any] = ()) -> QueryResult:
        return self.execute_query_sync(sql, bindings)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None


class AsyncSqliteExecutor:
    """Asynchronous SQLite executor using aiosqlite.

    Only ``execute_query`` is offered, so writes and native trigger DDL go
    through the async path.
    """

    dialect = "sqlite"

    def __init__(self, database: str = ":memory:", **connect_kwargs: Any) -> None:
        self.database = database
        self._connect_kwargs = connect_kwargs
        self._connection: Any = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> AsyncSqliteExecutor:
        return cls(config.database, **config.extra)

    async def connect(self) -> Any:
        import aiosqlite

        if self._connection is None:
            conn = await aiosqlite.connect(
                self.database, isolation_level=None, **self._connect_kwargs
            )
            conn.row_factory = aiosqlite.Row
            if not _is_memory(self.database):
                await conn.execute("PRAGMA journal_mode=WAL")
            self._connection = conn
        return self._connection

    async def execute_query(self, sql: str, bindings: Sequence[Any] = ()) -> QueryResult:
        conn = await self.connect()
        async with conn.execute(sql, list(bindings)) as cursor:
            rows = await cursor.fetchall() if cursor.description else []
            return _result(cursor, list(rows))

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

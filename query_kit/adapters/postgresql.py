"""PostgreSQL executors - sync and async using psycopg (v3+).

The query layer emits ``?`` placeholders; they are rewritten to psycopg's
``%s`` before execution.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import TYPE_CHECKING, Any

from query_kit.core.results import QueryResult, WriteResult

if TYPE_CHECKING:
    from query_kit.core.connection import DatabaseConfig


def build_conninfo(config: DatabaseConfig) -> str:
    """Build a libpq connection string from config fields."""
    parts: list[str] = []
    if config.host is not None:
        parts.append(f"host={config.host}")
    if config.port is not None:
        parts.append(f"port={config.port}")
    if config.user is not None:
        parts.append(f"user={config.user}")
    if config.password is not None:
        parts.append(f"password={config.password}")
    parts.append(f"dbname={config.database}")
    return " ".join(parts)


def to_pyformat(sql: str) -> str:
    """Rewrite ``?`` markers to ``%s``, leaving quoted literals alone."""
    out: list[str] = []
    quote: str | None = None
    for char in sql:
        if quote is not None:
            if char == quote:
                quote = None
            out.append("%%" if char == "%" else char)
        elif char in ("'", '"'):
            quote = char
            out.append(char)
        elif char == "?":
            out.append("%s")
        elif char == "%":
            out.append("%%")
        else:
            out.append(char)
    return "".join(out)


def _result(cursor: Any, rows: list[Any]) -> QueryResult:
    rowcount = cursor.rowcount
    return QueryResult(
        data=[dict(row) for row in rows],
        affected_rows=rowcount if rowcount is not None and rowcount >= 0 else None,
        last_insert_id=getattr(cursor, "lastrowid", None),
    )


class PostgresqlExecutor:
    """Synchronous PostgreSQL executor using psycopg (v3+)."""

    dialect = "postgres"

    def __init__(self, conninfo: str) -> None:
        self.conninfo = conninfo
        self._connection: Any = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> PostgresqlExecutor:
        return cls(build_conninfo(config))

    @property
    def connection(self) -> Any:
        if self._connection is None:
            import psycopg
            import psycopg.rows

            self._connection = psycopg.connect(
                self.conninfo, autocommit=True, row_factory=psycopg.rows.dict_row
            )
        return self._connection

    def execute_query_sync(self, sql: str, bindings: Sequence[Any] = ()) -> QueryResult:
        with self.connection.cursor() as cursor:
            cursor.execute(to_pyformat(sql), list(bindings))
            rows = cursor.fetchall() if cursor.description else []
            return _result(cursor, rows)

    def run_sync(self, sql: str, bindings: Sequence[Any] = ()) -> WriteResult:
        with self.connection.cursor() as cursor:
            cursor.execute(to_pyformat(sql), list(bindings))
            return WriteResult(changes=max(cursor.rowcount, 0))

    async def execute_query(self, sql: str, bindings: Sequence[Any] = ()) -> QueryResult:
        return self.execute_query_sync(sql, bindings)

    def close(self) -> None:
        if self._connection is not None:
            self._connection.close()
            self._connection = None


class AsyncPostgresqlExecutor:
    """Asynchronous PostgreSQL executor using psycopg (v3+) async support."""

    dialect = "postgres"

    def __init__(self, conninfo: str) -> None:
        self.conninfo = conninfo
        self._connection: Any = None

    @classmethod
    def from_config(cls, config: DatabaseConfig) -> AsyncPostgresqlExecutor:
        return cls(build_conninfo(config))

    async def connect(self) -> Any:
        if self._connection is None:
            import psycopg
            import psycopg.rows

            self._connection = await psycopg.AsyncConnection.connect(
                self.conninfo, autocommit=True, row_factory=psycopg.rows.dict_row
            )
        return self._connection

    async def execute_query(self, sql: str, bindings: Sequence[Any] = ()) -> QueryResult:
        conn = await self.connect()
        async with conn.cursor() as cursor:
            await cursor.execute(to_pyformat(sql), list(bindings))
            rows = await cursor.fetchall() if cursor.description else []
            return _result(cursor, rows)

    async def close(self) -> None:
        if self._connection is not None:
            await self._connection.close()
            self._connection = None

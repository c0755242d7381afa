"""Fluent query builder.

A QueryBuilder accumulates clauses for one table, compiles them to SQL with
positional bindings, and executes reads and writes through the executor
the configuration resolves for that table, or against the simulation
engine's virtual state when it holds rows for the table.

Every read and write publishes BEFORE/AFTER lifecycle events on the
configuration's event bus; trigger registrations hang off those events.
"""

from __future__ import annotations

import copy
from collections.abc import Callable, Iterable, Mapping, Sequence
from datetime import datetime, timedelta, timezone
from typing import Any

from query_kit.core.config import QueryKitConfig, get_config
from query_kit.core.enums import TriggerAction, TriggerTiming
from query_kit.core.events import TriggerContext, trigger_topic
from query_kit.core.exceptions import (
    ConfigurationError,
    EmptyInsertError,
    MissingWhereClauseError,
    NoPendingActionError,
    UnsupportedActionError,
)
from query_kit.core.resolver import resolve_executor
from query_kit.core.results import WriteResult, normalize_write_result, rows_of
from query_kit.query.compiler import (
    compile_clauses,
    compile_delete,
    compile_insert,
    compile_step,
    compile_update,
    compile_where,
)
from query_kit.query.plan import (
    Aggregate,
    BasicClause,
    BetweenClause,
    ColumnClause,
    DecrementAction,
    DeleteAction,
    ExistsClause,
    IncrementAction,
    InClause,
    InsertAction,
    Join,
    Logical,
    NullClause,
    Order,
    PendingAction,
    Projection,
    Raw,
    RawClause,
    TrackingEntry,
    UnionPart,
    UpdateAction,
    UpsertAction,
    WhereClause,
    WhereFragment,
)

Row = dict[str, Any]

_MISSING = object()

_PERIODS = {
    "24h": timedelta(hours=24),
    "7d": timedelta(days=7),
    "30d": timedelta(days=30),
}


def _flatten(values: tuple[Any, ...]) -> list[Any]:
    if len(values) == 1 and isinstance(values[0], (list, tuple)):
        return list(values[0])
    return list(values)


def _present(value: Any) -> bool:
    return value is not None and value != ""


def _now() -> datetime:
    return datetime.now(timezone.utc)


class QueryBuilder:
    """Chainable statement builder for a single table.

    Args:
        table: Target table (may carry an inline alias, e.g. ``"orders as o"``).
        config: Configuration context; defaults to the process-wide one.
    """

    def __init__(self, table: str, config: QueryKitConfig | None = None) -> None:
        self.table = table
        self._config = config if config is not None else get_config()
        self.banks: list[str] | None = None

        self._columns: list[Projection] = ["*"]
        self._default_projection = True
        self._distinct = False
        self._aggregates: list[Aggregate] = []
        self._alias: str | None = None
        self._joins: list[Join] = []
        self._wheres: list[WhereClause] = []
        self._group_by: list[str] = []
        self._havings: list[WhereClause] = []
        self._orders: list[Order] = []
        self._limit: int | None = None
        self._offset: int | None = None
        self._unions: list[UnionPart] = []
        self._pending: PendingAction | None = None

        self._tracking = False
        self._seeding = False
        self._logs: list[TrackingEntry] = []
        self._virtual: list[Row] = []

    @property
    def config(self) -> QueryKitConfig:
        return self._config

    @property
    def pending_action(self) -> PendingAction | None:
        return self._pending

    @property
    def wheres(self) -> tuple[WhereClause, ...]:
        return tuple(self._wheres)

    def bank(self, banks: str | Sequence[str]) -> QueryBuilder:
        """Route this query to the first available named database in *banks*."""
        self.banks = [banks] if isinstance(banks, str) else list(banks)
        self._track("bank", banks=self.banks)
        return self

    def has_pending_write(self) -> bool:
        return self._pending is not None

    # --- Tracking ---

    def _track(self, step: str, **details: Any) -> None:
        if self._tracking or self._config.simulator.is_active():
            self._logs.append(TrackingEntry(step=step, details=details, timestamp=_now()))

    async def initial(self, rows: Iterable[Row] | None = None) -> QueryBuilder:
        """Enable tracking and seed the virtual table.

        With *rows*, the virtual table is a deep copy of them; otherwise it is
        seeded by running this query against the database.
        """
        self._tracking = True
        self._logs = []
        if rows is not None:
            self._virtual = copy.deepcopy(list(rows))
            self._track("tracking.initialized", source="manual", count=len(self._virtual))
            return self

        self._track("tracking.seeding_from_db", query=self.to_sql())
        self._seeding = True
        try:
            self._virtual = await self.all()
        finally:
            self._seeding = False
        self._track(
            "tracking.initialized",
            source="database",
            table=self.table,
            count=len(self._virtual),
        )
        return self

    def tracking(self) -> list[TrackingEntry]:
        """Return the tracking log, first applying any pending action virtually.

        A pending write is materialized against the virtual table and then
        cleared; without one, a summary of the compiled read is recorded.
        """
        simulator = self._config.simulator
        if not self._tracking:
            if not simulator.is_active():
                return [
                    TrackingEntry(
                        step="error",
                        details="Tracking was not enabled. Call initial() before tracking().",
                        timestamp=_now(),
                    )
                ]
            self._virtual = simulator.get_state_for(self.table) or []

        if self._pending is not None:
            self._track("virtual_execution.start", action=self._pending)
            self._apply_virtual(self._pending)
            self._track("virtual_execution.end", final_state=copy.deepcopy(self._virtual))
            self._pending = None
        else:
            sql, bindings = self.to_sql()
            self._track("dry_run_select.summary", sql=sql, bindings=bindings)
        return list(self._logs)

    def _matches(self, row: Row) -> bool:
        # Only equality on basic clauses is evaluated; every other clause
        # kind is accepted by the builder but ignored here.
        for clause in self._wheres:
            if isinstance(clause, BasicClause) and clause.operator == "=":
                if clause.column not in row or row[clause.column] != clause.value:
                    return False
        return True

    def _filter_virtual(self, rows: list[Row]) -> list[Row]:
        return [row for row in rows if self._matches(row)]

    def _apply_virtual(self, action: PendingAction) -> None:
        if isinstance(action, InsertAction):
            self._virtual.extend(copy.deepcopy(list(action.rows)))
        elif isinstance(action, UpdateAction):
            for row in self._filter_virtual(self._virtual):
                row.update(action.patch)
        elif isinstance(action, DeleteAction):
            doomed = {id(row) for row in self._filter_virtual(self._virtual)}
            self._virtual = [row for row in self._virtual if id(row) not in doomed]
        elif isinstance(action, (IncrementAction, DecrementAction)):
            sign = 1 if isinstance(action, IncrementAction) else -1
            for row in self._filter_virtual(self._virtual):
                row[action.column] = (row.get(action.column) or 0) + sign * action.amount
        elif isinstance(action, UpsertAction):
            matched = [
                row
                for row in self._virtual
                if all(row.get(k) == v for k, v in action.attributes.items())
            ]
            for row in matched:
                row.update(action.values)
            if not matched:
                self._virtual.append({**action.attributes, **action.values})
        else:
            raise UnsupportedActionError(getattr(action, "kind", action))

        simulator = self._config.simulator
        if simulator.is_active():
            simulator.update_state_for(self.table, self._virtual)

    # --- Projection ---

    def _project(self, entry: Projection) -> None:
        if self._default_projection:
            self._columns = []
            self._default_projection = False
        self._columns.append(entry)

    def select(self, *columns: str | Raw) -> QueryBuilder:
        selected = _flatten(columns) or ["*"]
        self._track("select", columns=[str(c) for c in selected])
        self._columns = selected
        self._default_projection = False
        return self

    def select_raw(self, sql: str) -> QueryBuilder:
        self._track("select_raw", sql=sql)
        self._project(Raw(sql))
        return self

    def select_expression(self, expression: str, alias: str | None = None) -> QueryBuilder:
        self._track("select_expression", expression=expression, alias=alias)
        self._project(Raw(f"{expression} AS {alias}" if alias else expression))
        return self

    def select_count(self, column: str = "*", alias: str = "count") -> QueryBuilder:
        return self.select_expression(f"COUNT({column})", alias)

    def select_sum(self, column: str, alias: str = "sum") -> QueryBuilder:
        return self.select_expression(f"SUM({column})", alias)

    def select_avg(self, column: str, alias: str = "avg") -> QueryBuilder:
        return self.select_expression(f"AVG({column})", alias)

    def select_min(self, column: str, alias: str = "min") -> QueryBuilder:
        return self.select_expression(f"MIN({column})", alias)

    def select_max(self, column: str, alias: str = "max") -> QueryBuilder:
        return self.select_expression(f"MAX({column})", alias)

    def select_case_sum(self, condition_sql: str, alias: str) -> QueryBuilder:
        return self.select_expression(f"SUM(CASE WHEN {condition_sql} THEN 1 ELSE 0 END)", alias)

    def distinct(self) -> QueryBuilder:
        self._track("distinct")
        self._distinct = True
        return self

    def alias(self, name: str) -> QueryBuilder:
        self._track("alias", name=name)
        self._alias = name
        return self

    def _aggregate(self, func: Any, column: str, alias: str | None) -> QueryBuilder:
        default_alias = func if column == "*" else f"{func}_{column}"
        self._track(func, column=column, alias=alias)
        self._aggregates.append(Aggregate(func=func, column=column, alias=alias or default_alias))
        return self

    def count(self, column: str = "*", alias: str | None = None) -> QueryBuilder:
        return self._aggregate("count", column, alias)

    def sum(self, column: str, alias: str | None = None) -> QueryBuilder:
        return self._aggregate("sum", column, alias)

    def avg(self, column: str, alias: str | None = None) -> QueryBuilder:
        return self._aggregate("avg", column, alias)

    def min(self, column: str, alias: str | None = None) -> QueryBuilder:
        return self._aggregate("min", column, alias)

    def max(self, column: str, alias: str | None = None) -> QueryBuilder:
        return self._aggregate("max", column, alias)

    # --- Where ---

    def _where(self, step: str, clause: WhereClause) -> QueryBuilder:
        self._track(step, clause=clause)
        self._wheres.append(clause)
        return self

    def where(self, column: str, operator: Any, value: Any = _MISSING) -> QueryBuilder:
        """``where(col, op, value)``, or ``where(col, value)`` for equality."""
        if value is _MISSING:
            operator, value = "=", operator
        return self._where("where", BasicClause(column, operator, value, "AND"))

    def or_where(self, column: str, operator: Any, value: Any = _MISSING) -> QueryBuilder:
        if value is _MISSING:
            operator, value = "=", operator
        return self._where("or_where", BasicClause(column, operator, value, "OR"))

    def where_if(self, condition: Any, column: str, operator: str, value: Any) -> QueryBuilder:
        """Add the clause only when *condition* is not None or empty string."""
        if _present(condition):
            self.where(column, operator, value)
        return self

    def where_all(self, conditions: Mapping[str, Any]) -> QueryBuilder:
        for column, value in conditions.items():
            self.where_if(value, column, "=", value)
        return self

    def where_in(
        self, column: str, values: Iterable[Any], logical: Logical = "AND"
    ) -> QueryBuilder:
        return self._where("where_in", InClause(column, tuple(values), False, logical))

    def or_where_in(self, column: str, values: Iterable[Any]) -> QueryBuilder:
        return self.where_in(column, values, "OR")

    def where_not_in(
        self, column: str, values: Iterable[Any], logical: Logical = "AND"
    ) -> QueryBuilder:
        return self._where("where_not_in", InClause(column, tuple(values), True, logical))

    def or_where_not_in(self, column: str, values: Iterable[Any]) -> QueryBuilder:
        return self.where_not_in(column, values, "OR")

    def where_null(self, column: str, logical: Logical = "AND") -> QueryBuilder:
        return self._where("where_null", NullClause(column, False, logical))

    def or_where_null(self, column: str) -> QueryBuilder:
        return self.where_null(column, "OR")

    def where_not_null(self, column: str, logical: Logical = "AND") -> QueryBuilder:
        return self._where("where_not_null", NullClause(column, True, logical))

    def or_where_not_null(self, column: str) -> QueryBuilder:
        return self.where_not_null(column, "OR")

    def where_between(self, column: str, values: Sequence[Any]) -> QueryBuilder:
        low, high = values
        return self._where("where_between", BetweenClause(column, low, high, False))

    def where_not_between(self, column: str, values: Sequence[Any]) -> QueryBuilder:
        low, high = values
        return self._where("where_not_between", BetweenClause(column, low, high, True))

    def where_column(
        self, first: str, operator: str, second: str, logical: Logical = "AND"
    ) -> QueryBuilder:
        return self._where("where_column", ColumnClause(first, operator, second, logical))

    def where_raw(
        self, sql: str, bindings: Iterable[Any] = (), logical: Logical = "AND"
    ) -> QueryBuilder:
        return self._where("where_raw", RawClause(sql, tuple(bindings), logical))

    def or_where_raw(self, sql: str, bindings: Iterable[Any] = ()) -> QueryBuilder:
        return self.where_raw(sql, bindings, "OR")

    def where_exists(self, query: QueryBuilder) -> QueryBuilder:
        return self._where("where_exists", ExistsClause(query, False))

    def where_not_exists(self, query: QueryBuilder) -> QueryBuilder:
        return self._where("where_not_exists", ExistsClause(query, True))

    def where_like(self, column: str, pattern: str) -> QueryBuilder:
        return self.where(column, "LIKE", pattern)

    def or_where_like(self, column: str, pattern: str) -> QueryBuilder:
        return self.or_where(column, "LIKE", pattern)

    def where_contains(self, column: str, term: str) -> QueryBuilder:
        return self.where_like(column, f"%{term}%")

    def where_starts_with(self, column: str, prefix: str) -> QueryBuilder:
        return self.where_like(column, f"{prefix}%")

    def where_ends_with(self, column: str, suffix: str) -> QueryBuilder:
        return self.where_like(column, f"%{suffix}")

    def where_ilike(self, column: str, pattern: str) -> QueryBuilder:
        return self.where_raw(f"{column} LIKE ? COLLATE NOCASE", [pattern])

    def where_contains_ci(self, column: str, term: str) -> QueryBuilder:
        return self.where_ilike(column, f"%{term}%")

    def where_starts_with_ci(self, column: str, prefix: str) -> QueryBuilder:
        return self.where_ilike(column, f"{prefix}%")

    def where_ends_with_ci(self, column: str, suffix: str) -> QueryBuilder:
        return self.where_ilike(column, f"%{suffix}")

    def where_search(self, term: str, columns: Sequence[str]) -> QueryBuilder:
        """``(a LIKE ? OR b LIKE ? ...)`` over *columns*; no-op for an empty term."""
        if not term or not columns:
            return self
        conditions = " OR ".join(f"{column} LIKE ?" for column in columns)
        return self.where_raw(f"({conditions})", [f"%{term}%" for _ in columns])

    def range(
        self, field: str, start: datetime | None = None, end: datetime | None = None
    ) -> QueryBuilder:
        if start is not None:
            self.where_raw(f"{field} >= ?", [start.isoformat()])
        if end is not None:
            self.where_raw(f"{field} <= ?", [end.isoformat()])
        return self

    def period(self, field: str, key: str | None = None) -> QueryBuilder:
        """Restrict *field* to the last 24h / 7d / 30d (unknown keys mean 24h)."""
        if not key:
            return self
        since = _now() - _PERIODS.get(key, _PERIODS["24h"])
        return self.where_raw(f"{field} >= ?", [since.isoformat()])

    # --- Composition helpers ---

    def when(self, condition: Any, callback: Callable[[QueryBuilder, Any], Any]) -> QueryBuilder:
        if condition:
            callback(self, condition)
        return self

    def unless(self, condition: Any, callback: Callable[[QueryBuilder, Any], Any]) -> QueryBuilder:
        if not condition:
            callback(self, condition)
        return self

    def clone(self) -> QueryBuilder:
        """Independent copy sharing configuration and subqueries."""
        other = copy.copy(self)
        other.banks = list(self.banks) if self.banks is not None else None
        other._columns = list(self._columns)
        other._aggregates = list(self._aggregates)
        other._joins = list(self._joins)
        other._wheres = list(self._wheres)
        other._group_by = list(self._group_by)
        other._havings = list(self._havings)
        other._orders = list(self._orders)
        other._unions = list(self._unions)
        other._logs = list(self._logs)
        other._virtual = copy.deepcopy(self._virtual)
        return other

    # --- Ordering, paging, joins, grouping, sets ---

    def order_by(self, column: str, direction: str = "ASC") -> QueryBuilder:
        self._track("order_by", column=column, direction=direction)
        self._orders.append(Order(column, "DESC" if direction.upper() == "DESC" else "ASC"))
        return self

    def order_by_many(self, orders: Iterable[Mapping[str, str]]) -> QueryBuilder:
        for order in orders:
            self.order_by(order["column"], order.get("direction", "ASC"))
        return self

    def limit(self, count: int) -> QueryBuilder:
        self._track("limit", count=count)
        self._limit = count
        return self

    def offset(self, count: int) -> QueryBuilder:
        self._track("offset", count=count)
        self._offset = count
        return self

    def paginate(self, page: int = 1, per_page: int = 25) -> QueryBuilder:
        page = max(1, page or 1)
        per_page = max(1, per_page or 25)
        return self.limit(per_page).offset((page - 1) * per_page)

    def _join(self, kind: Any, table: str, on: str) -> QueryBuilder:
        self._track("join", kind=kind, table=table, on=on)
        self._joins.append(Join(kind, table, on))
        return self

    def inner_join(self, table: str, on: str) -> QueryBuilder:
        return self._join("INNER", table, on)

    def left_join(self, table: str, on: str) -> QueryBuilder:
        return self._join("LEFT", table, on)

    def right_join(self, table: str, on: str) -> QueryBuilder:
        return self._join("RIGHT", table, on)

    def inner_join_on(self, table: str, left: str, right: str) -> QueryBuilder:
        return self.inner_join(table, f"{left} = {right}")

    def left_join_on(self, table: str, left: str, right: str) -> QueryBuilder:
        return self.left_join(table, f"{left} = {right}")

    def right_join_on(self, table: str, left: str, right: str) -> QueryBuilder:
        return self.right_join(table, f"{left} = {right}")

    def group_by(self, *columns: str) -> QueryBuilder:
        self._group_by = [str(c) for c in _flatten(columns)]
        self._track("group_by", columns=self._group_by)
        return self

    def group_by_one(self, column: str) -> QueryBuilder:
        return self.group_by(column)

    def having(self, column: str, operator: str, value: Any) -> QueryBuilder:
        self._track("having", column=column, operator=operator, value=value)
        self._havings.append(BasicClause(column, operator, value))
        return self

    def having_raw(
        self, sql: str, bindings: Iterable[Any] = (), logical: Logical = "AND"
    ) -> QueryBuilder:
        self._track("having_raw", sql=sql)
        self._havings.append(RawClause(sql, tuple(bindings), logical))
        return self

    def having_if(self, condition: Any, column: str, operator: str, value: Any) -> QueryBuilder:
        if _present(condition):
            self.having(column, operator, value)
        return self

    def union(self, query: QueryBuilder) -> QueryBuilder:
        self._track("union", table=query.table)
        self._unions.append(UnionPart("UNION", query))
        return self

    def union_all(self, query: QueryBuilder) -> QueryBuilder:
        self._track("union_all", table=query.table)
        self._unions.append(UnionPart("UNION ALL", query))
        return self

    # --- Pending writes ---

    def insert(self, data: Mapping[str, Any] | Sequence[Mapping[str, Any]]) -> QueryBuilder:
        rows = [data] if isinstance(data, Mapping) else list(data)
        if not rows or any(not row for row in rows):
            raise EmptyInsertError()
        self._track("insert", data=rows)
        self._pending = InsertAction(rows=tuple(dict(row) for row in rows))
        return self

    def update(self, patch: Mapping[str, Any]) -> QueryBuilder:
        self._track("update", data=dict(patch))
        self._pending = UpdateAction(patch=dict(patch))
        return self

    def delete(self) -> QueryBuilder:
        self._track("delete")
        self._pending = DeleteAction()
        return self

    def increment(self, column: str, amount: float = 1) -> QueryBuilder:
        self._track("increment", column=column, amount=amount)
        self._pending = IncrementAction(column=column, amount=amount)
        return self

    def decrement(self, column: str, amount: float = 1) -> QueryBuilder:
        self._track("decrement", column=column, amount=amount)
        self._pending = DecrementAction(column=column, amount=amount)
        return self

    def update_or_insert(
        self, attributes: Mapping[str, Any], values: Mapping[str, Any] | None = None
    ) -> QueryBuilder:
        self._track("update_or_insert", attributes=dict(attributes), values=dict(values or {}))
        self._pending = UpsertAction(attributes=dict(attributes), values=dict(values or {}))
        return self

    # --- Compilation ---

    def to_sql(self) -> tuple[str, list[Any]]:
        """Compile to ``(sql, bindings)``; repeatable and side-effect free."""
        bindings: list[Any] = []

        if self._aggregates:
            projection = self._aggregates[0].to_sql()
        else:
            projection = ", ".join(
                c.to_sql() if isinstance(c, Raw) else str(c) for c in self._columns
            )
        keyword = "SELECT DISTINCT" if self._distinct else "SELECT"
        sql = f"{keyword} {projection} FROM {self.table}"
        if self._alias:
            sql += f" {self._alias}"
        if self._joins:
            sql += " " + " ".join(f"{j.kind} JOIN {j.table} ON {j.on}" for j in self._joins)

        where = compile_clauses(self._wheres, bindings)
        if where:
            sql += f" WHERE {where}"
        if self._group_by:
            sql += f" GROUP BY {', '.join(self._group_by)}"
        having = compile_clauses(self._havings, bindings)
        if having:
            sql += f" HAVING {having}"
        if self._orders:
            sql += " ORDER BY " + ", ".join(f"{o.column} {o.direction}" for o in self._orders)
        if self._limit is not None:
            sql += " LIMIT ?"
            bindings.append(self._limit)
        if self._offset is not None:
            sql += " OFFSET ?"
            bindings.append(self._offset)

        if self._unions:
            sql = f"({sql})"
            for part in self._unions:
                sub_sql, sub_bindings = part.query.to_sql()
                sql += f" {part.kind} ({sub_sql})"
                bindings.extend(sub_bindings)
        return sql, bindings

    # --- Execution plumbing ---

    def _executor(self) -> Any:
        return resolve_executor(self._config, self.table, self.banks)

    def _topic(self, timing: TriggerTiming, action: TriggerAction) -> str:
        return trigger_topic(self._config.namespace, timing.value, action.value, self.table)

    def _context(
        self, timing: TriggerTiming, action: TriggerAction, **fields: Any
    ) -> TriggerContext:
        return TriggerContext(table=self.table, action=action.value, timing=timing.value, **fields)

    async def _emit(self, timing: TriggerTiming, action: TriggerAction, **fields: Any) -> None:
        await self._config.events.emit(
            self._topic(timing, action), self._context(timing, action, **fields)
        )

    def _emit_sync(self, timing: TriggerTiming, action: TriggerAction, **fields: Any) -> None:
        self._config.events.emit_sync(
            self._topic(timing, action), self._context(timing, action, **fields)
        )

    def _simulated_rows(self) -> list[Row] | None:
        simulator = self._config.simulator
        if self._seeding or not simulator.is_active():
            return None
        state = simulator.get_state_for(self.table)
        if state is None:
            return None
        self._virtual = copy.deepcopy(state)
        rows = self._filter_virtual(self._virtual)
        start = self._offset or 0
        stop = None if self._limit is None else start + self._limit
        return copy.deepcopy(rows[start:stop])

    # --- Reads ---

    async def all(self) -> list[Row]:
        """Fetch every matching row."""
        self._track("all")
        rows = self._simulated_rows()
        executor = self._executor() if rows is None else None

        await self._emit(TriggerTiming.BEFORE, TriggerAction.READ)
        if executor is not None:
            sql, bindings = self.to_sql()
            rows = rows_of(await executor.execute_query(sql, bindings))
        await self._emit(TriggerTiming.AFTER, TriggerAction.READ, rows=rows)
        return rows

    def all_sync(self) -> list[Row]:
        self._track("all_sync")
        rows = self._simulated_rows()
        query_sync = None
        if rows is None:
            query_sync = getattr(self._executor(), "execute_query_sync", None)
            if not callable(query_sync):
                raise ConfigurationError("executor does not support synchronous queries")

        self._emit_sync(TriggerTiming.BEFORE, TriggerAction.READ)
        if query_sync is not None:
            sql, bindings = self.to_sql()
            rows = rows_of(query_sync(sql, bindings))
        self._emit_sync(TriggerTiming.AFTER, TriggerAction.READ, rows=rows)
        return rows

    async def get(self) -> Row | None:
        rows = await self.clone().limit(1).all()
        return rows[0] if rows else None

    async def first(self) -> Row | None:
        return await self.get()

    async def find(self, id: Any) -> Row | None:
        return await self.clone().where("id", "=", id).get()

    async def exists(self) -> bool:
        probe = self.clone().limit(1)
        probe._columns, probe._default_projection, probe._aggregates = [Raw("1")], False, []
        return bool(await probe.all())

    async def pluck(self, column: str) -> list[Any]:
        rows = await self.clone().select(column).all()
        return [row.get(column) for row in rows]

    async def scalar(self, alias: str | None = None) -> Any:
        return _scalar(await self.get(), alias)

    def get_sync(self) -> Row | None:
        rows = self.clone().limit(1).all_sync()
        return rows[0] if rows else None

    def first_sync(self) -> Row | None:
        return self.get_sync()

    def pluck_sync(self, column: str) -> list[Any]:
        rows = self.clone().select(column).all_sync()
        return [row.get(column) for row in rows]

    def scalar_sync(self, alias: str | None = None) -> Any:
        return _scalar(self.get_sync(), alias)

    def run(self) -> WriteResult:
        """Execute the compiled SELECT text through ``run_sync``, without events."""
        run_sync = getattr(self._executor(), "run_sync", None)
        if not callable(run_sync):
            raise ConfigurationError("executor does not support run_sync")
        sql, bindings = self.to_sql()
        return normalize_write_result(run_sync(sql, bindings))

    # --- Writes ---

    async def _write(self, executor: Any, sql: str, bindings: list[Any]) -> WriteResult:
        run_sync = getattr(executor, "run_sync", None)
        if callable(run_sync):
            return normalize_write_result(run_sync(sql, bindings))
        return normalize_write_result(await executor.execute_query(sql, bindings))

    def _require_where(self, action: str) -> WhereFragment:
        if not self._wheres:
            raise MissingWhereClauseError(action)
        return compile_where(self._wheres)

    async def make(self) -> WriteResult:
        """Execute the pending write action and clear it.

        Raises:
            NoPendingActionError: No insert/update/delete/... was declared.
            MissingWhereClauseError: update/delete/increment/decrement without WHERE.
            UnsupportedActionError: The pending action kind is unknown.
            ConfigurationError: No executor resolves for this table.
        """
        action = self._pending
        if action is None:
            raise NoPendingActionError()

        if isinstance(action, InsertAction):
            result = await self._make_insert(self._executor(), list(action.rows))
        elif isinstance(action, UpdateAction):
            where = self._require_where("update")
            result = await self._make_update(self._executor(), action.patch, where)
        elif isinstance(action, DeleteAction):
            where = self._require_where("delete")
            executor = self._executor()
            sql, bindings = compile_delete(self.table, where)
            await self._emit(TriggerTiming.BEFORE, TriggerAction.DELETE, where=where)
            result = await self._write(executor, sql, bindings)
            await self._emit(TriggerTiming.AFTER, TriggerAction.DELETE, where=where, result=result)
        elif isinstance(action, (IncrementAction, DecrementAction)):
            where = self._require_where("update")
            executor = self._executor()
            sign = "+" if isinstance(action, IncrementAction) else "-"
            sql, bindings = compile_step(self.table, action.column, action.amount, sign, where)
            data = {"column": action.column, "amount": action.amount}
            await self._emit(TriggerTiming.BEFORE, TriggerAction.UPDATE, data=data, where=where)
            result = await self._write(executor, sql, bindings)
            await self._emit(
                TriggerTiming.AFTER, TriggerAction.UPDATE, data=data, where=where, result=result
            )
        elif isinstance(action, UpsertAction):
            result = await self._make_upsert(action)
        else:
            raise UnsupportedActionError(getattr(action, "kind", action))

        self._pending = None
        return result

    async def _make_insert(self, executor: Any, rows: list[Row]) -> WriteResult:
        sql, bindings = compile_insert(self.table, rows)
        data: Any = rows[0] if len(rows) == 1 else rows
        await self._emit(TriggerTiming.BEFORE, TriggerAction.INSERT, data=data)
        result = await self._write(executor, sql, bindings)
        await self._emit(TriggerTiming.AFTER, TriggerAction.INSERT, data=data, result=result)
        return result

    async def _make_update(
        self, executor: Any, patch: dict[str, Any], where: WhereFragment
    ) -> WriteResult:
        sql, bindings = compile_update(self.table, patch, where)
        await self._emit(TriggerTiming.BEFORE, TriggerAction.UPDATE, data=patch, where=where)
        result = await self._write(executor, sql, bindings)
        await self._emit(
            TriggerTiming.AFTER, TriggerAction.UPDATE, data=patch, where=where, result=result
        )
        return result

    async def _make_upsert(self, action: UpsertAction) -> WriteResult:
        """UPDATE keyed by the match attributes; INSERT the merged row if nothing changed."""
        if not action.attributes:
            raise MissingWhereClauseError("update")
        executor = self._executor()
        saved = self._wheres
        self._wheres = [BasicClause(k, "=", v) for k, v in action.attributes.items()]
        try:
            where = compile_where(self._wheres)
            if action.values:
                result = await self._make_update(executor, action.values, where)
                found = result.changes > 0
            else:
                probe = f"SELECT 1 FROM {self.table} WHERE {where.sql} LIMIT 1"
                found = bool(rows_of(await executor.execute_query(probe, list(where.bindings))))
                result = WriteResult()
            if not found:
                result = await self._make_insert(executor, [{**action.attributes, **action.values}])
        finally:
            self._wheres = saved
        return result


def _scalar(row: Row | None, alias: str | None) -> Any:
    if not row:
        return None
    if alias is not None and alias in row:
        return row[alias]
    return next(iter(row.values()))


def table(name: str, config: QueryKitConfig | None = None) -> QueryBuilder:
    """Start a query on *name*."""
    return QueryBuilder(name, config)

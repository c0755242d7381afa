"""Predicate and statement compilation.

Bindings are appended to the caller's list in exactly the order their
placeholders are emitted, which keeps positional ``?`` markers aligned.
"""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from query_kit.query.plan import (
    BasicClause,
    BetweenClause,
    ColumnClause,
    ExistsClause,
    InClause,
    NullClause,
    RawClause,
    WhereClause,
    WhereFragment,
)


def compile_clause(clause: WhereClause, bindings: list[Any]) -> str:
    """Compile one predicate, pushing its bindings."""
    if isinstance(clause, BasicClause):
        bindings.append(clause.value)
        return f"{clause.column} {clause.operator} ?"
    if isinstance(clause, ColumnClause):
        return f"{clause.column} {clause.operator} {clause.other}"
    if isinstance(clause, RawClause):
        bindings.extend(clause.bindings)
        return clause.sql
    if isinstance(clause, InClause):
        if not clause.values:
            # An empty set matches nothing; its negation matches everything.
            return "1=1" if clause.negated else "1=0"
        bindings.extend(clause.values)
        placeholders = ",".join("?" for _ in clause.values)
        keyword = "NOT IN" if clause.negated else "IN"
        return f"{clause.column} {keyword} ({placeholders})"
    if isinstance(clause, NullClause):
        return f"{clause.column} IS {'NOT ' if clause.negated else ''}NULL"
    if isinstance(clause, BetweenClause):
        bindings.extend((clause.low, clause.high))
        keyword = "NOT BETWEEN" if clause.negated else "BETWEEN"
        return f"{clause.column} {keyword} ? AND ?"
    if isinstance(clause, ExistsClause):
        sub_sql, sub_bindings = clause.query.to_sql()
        bindings.extend(sub_bindings)
        return f"{'NOT ' if clause.negated else ''}EXISTS ({sub_sql})"
    raise TypeError(f"Unsupported where clause: {type(clause).__name__}")


def compile_clauses(clauses: Sequence[WhereClause], bindings: list[Any]) -> str:
    """Fold *clauses* left to right, joining with each clause's connector.

    The first clause's connector is never emitted.
    """
    parts: list[str] = []
    for index, clause in enumerate(clauses):
        condition = compile_clause(clause, bindings)
        parts.append(condition if index == 0 else f"{clause.logical or 'AND'} {condition}")
    return " ".join(parts)


def compile_insert(table: str, rows: Sequence[dict[str, Any]]) -> tuple[str, list[Any]]:
    """``INSERT INTO t (cols) VALUES (?, ...)[, (?, ...)]``

    Columns come from the first row; later rows are read in that order.
    """
    columns = list(rows[0].keys())
    row_placeholder = "(" + ", ".join("?" for _ in columns) + ")"
    bindings: list[Any] = []
    for row in rows:
        bindings.extend(row.get(column) for column in columns)
    values = ", ".join(row_placeholder for _ in rows)
    return f"INSERT INTO {table} ({', '.join(columns)}) VALUES {values}", bindings


def compile_where(clauses: Sequence[WhereClause]) -> WhereFragment:
    bindings: list[Any] = []
    sql = compile_clauses(clauses, bindings)
    return WhereFragment(sql=sql, bindings=tuple(bindings))


def compile_update(
    table: str, patch: dict[str, Any], where: WhereFragment
) -> tuple[str, list[Any]]:
    """SET bindings precede WHERE bindings."""
    set_clause = ", ".join(f"{column} = ?" for column in patch)
    bindings = [*patch.values(), *where.bindings]
    return f"UPDATE {table} SET {set_clause} WHERE {where.sql}", bindings


def compile_step(
    table: str, column: str, amount: Any, sign: str, where: WhereFragment
) -> tuple[str, list[Any]]:
    """Increment/decrement: ``UPDATE t SET c = c +/- ? WHERE ...``"""
    sql = f"UPDATE {table} SET {column} = {column} {sign} ? WHERE {where.sql}"
    return sql, [amount, *where.bindings]


def compile_delete(table: str, where: WhereFragment) -> tuple[str, list[Any]]:
    return f"DELETE FROM {table} WHERE {where.sql}", list(where.bindings)

"""Query AST node data classes.

Frozen dataclasses describing the pieces a QueryBuilder accumulates:
where/having predicates, projection entries, joins, ordering, set
operations, and the single pending write action.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import TYPE_CHECKING, Any, ClassVar, Literal, Union

from query_kit.core.enums import WriteKind

if TYPE_CHECKING:
    from query_kit.query.builder import QueryBuilder

Logical = Literal["AND", "OR"]

OPERATORS = frozenset(
    {
        "=",
        "!=",
        "<>",
        ">",
        ">=",
        "<",
        "<=",
        "LIKE",
        "NOT LIKE",
        "IN",
        "NOT IN",
        "BETWEEN",
        "NOT BETWEEN",
        "IS NULL",
        "IS NOT NULL",
    }
)


# --- Predicates ---


@dataclass(frozen=True)
class BasicClause:
    """``column <op> ?``"""

    column: str
    operator: str
    value: Any
    logical: Logical = "AND"


@dataclass(frozen=True)
class ColumnClause:
    """``column <op> other_column``"""

    column: str
    operator: str
    other: str
    logical: Logical = "AND"


@dataclass(frozen=True)
class RawClause:
    sql: str
    bindings: tuple[Any, ...] = ()
    logical: Logical = "AND"


@dataclass(frozen=True)
class InClause:
    column: str
    values: tuple[Any, ...]
    negated: bool = False
    logical: Logical = "AND"


@dataclass(frozen=True)
class NullClause:
    column: str
    negated: bool = False
    logical: Logical = "AND"


@dataclass(frozen=True)
class BetweenClause:
    column: str
    low: Any
    high: Any
    negated: bool = False
    logical: Logical = "AND"


@dataclass(frozen=True)
class ExistsClause:
    query: QueryBuilder
    negated: bool = False
    logical: Logical = "AND"


WhereClause = Union[
    BasicClause, ColumnClause, RawClause, InClause, NullClause, BetweenClause, ExistsClause
]


# --- Projection ---


@dataclass(frozen=True)
class Raw:
    """A SQL fragment emitted verbatim."""

    sql: str

    def to_sql(self) -> str:
        return self.sql


@dataclass(frozen=True)
class Aggregate:
    func: Literal["count", "sum", "avg", "min", "max"]
    column: str
    alias: str

    def to_sql(self) -> str:
        return f"{self.func}({self.column}) as {self.alias}"


Projection = Union[str, Raw]


def raw(sql: str) -> Raw:
    return Raw(sql)


# --- Structure ---


@dataclass(frozen=True)
class Join:
    kind: Literal["INNER", "LEFT", "RIGHT"]
    table: str
    on: str


@dataclass(frozen=True)
class Order:
    column: str
    direction: Literal["ASC", "DESC"] = "ASC"


@dataclass(frozen=True)
class UnionPart:
    kind: Literal["UNION", "UNION ALL"]
    query: QueryBuilder


# --- Pending write actions ---


@dataclass(frozen=True)
class InsertAction:
    kind: ClassVar[WriteKind] = WriteKind.INSERT
    rows: tuple[dict[str, Any], ...]


@dataclass(frozen=True)
class UpdateAction:
    kind: ClassVar[WriteKind] = WriteKind.UPDATE
    patch: dict[str, Any]


@dataclass(frozen=True)
class DeleteAction:
    kind: ClassVar[WriteKind] = WriteKind.DELETE


@dataclass(frozen=True)
class IncrementAction:
    kind: ClassVar[WriteKind] = WriteKind.INCREMENT
    column: str
    amount: float = 1


@dataclass(frozen=True)
class DecrementAction:
    kind: ClassVar[WriteKind] = WriteKind.DECREMENT
    column: str
    amount: float = 1


@dataclass(frozen=True)
class UpsertAction:
    kind: ClassVar[WriteKind] = WriteKind.UPSERT
    attributes: dict[str, Any]
    values: dict[str, Any] = field(default_factory=dict)


PendingAction = Union[
    InsertAction, UpdateAction, DeleteAction, IncrementAction, DecrementAction, UpsertAction
]


# --- Tracking ---


@dataclass(frozen=True)
class TrackingEntry:
    step: str
    details: Any
    timestamp: datetime


@dataclass(frozen=True)
class WhereFragment:
    """A compiled WHERE body with its own bindings."""

    sql: str
    bindings: tuple[Any, ...] = ()

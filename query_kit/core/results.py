"""Executor result shapes and their normalization.

Executors are supplied by the caller, so the shape of what they return is
not known in advance: mappings or objects, ``affected_rows`` or ``changes``
or a DB-API ``rowcount``, and tuple-style ``(rows, info)`` pairs from some
async drivers. Everything funnels into :class:`WriteResult` and a plain
list of row dicts.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

_CHANGE_FIELDS = ("changes", "affected_rows", "affectedRows", "rowcount")
_INSERT_ID_FIELDS = (
    "last_insert_rowid",
    "last_insert_id",
    "lastInsertRowid",
    "lastInsertId",
    "insert_id",
    "insertId",
    "lastrowid",
)


@dataclass(frozen=True)
class QueryResult:
    """What an executor returns from ``execute_query``."""

    data: list[dict[str, Any]] = field(default_factory=list)
    affected_rows: int | None = None
    last_insert_id: Any = None


@dataclass(frozen=True)
class WriteResult:
    """Normalized outcome of a write statement."""

    changes: int = 0
    last_insert_rowid: Any = 0


def _lookup(source: Any, names: tuple[str, ...]) -> Any:
    for name in names:
        if isinstance(source, Mapping):
            value = source.get(name)
        else:
            value = getattr(source, name, None)
        if value is not None:
            return value
    return None


def normalize_write_result(raw: Any) -> WriteResult:
    """Coerce any executor write result into a :class:`WriteResult`."""
    if isinstance(raw, WriteResult):
        return raw
    if isinstance(raw, (tuple, list)):
        raw = raw[1] if len(raw) > 1 and raw[1] is not None else {}
    if raw is None:
        return WriteResult()

    changes = _lookup(raw, _CHANGE_FIELDS)
    last_id = _lookup(raw, _INSERT_ID_FIELDS)
    return WriteResult(
        changes=int(changes) if changes is not None and changes >= 0 else 0,
        last_insert_rowid=last_id if last_id is not None else 0,
    )


def rows_of(result: Any) -> list[dict[str, Any]]:
    """Extract the row list from an executor read result."""
    if result is None:
        return []
    if isinstance(result, list):
        return result
    data = result.get("data") if isinstance(result, Mapping) else getattr(result, "data", None)
    return list(data) if data is not None else []

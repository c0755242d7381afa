"""Trigger body composition.

A body given by the caller is one of:

- a SQL string
- a callable taking a :class:`~query_kit.core.events.TriggerContext`
- a sequence of bodies, run strictly in order
- ``{"parallel": [bodies...]}``, run concurrently

:func:`parse_body` turns that into the closed ``Step`` union below, and
:func:`run_step` interprets it. Nesting is unrestricted.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable, Mapping, Sequence
from dataclasses import dataclass
from typing import Any, Union

from query_kit.core.exceptions import InvalidTriggerBodyError


@dataclass(frozen=True)
class SqlStep:
    sql: str


@dataclass(frozen=True)
class CallableStep:
    fn: Callable[..., Any]


@dataclass(frozen=True)
class SequenceStep:
    steps: tuple[Step, ...]


@dataclass(frozen=True)
class ParallelStep:
    steps: tuple[Step, ...]


Step = Union[SqlStep, CallableStep, SequenceStep, ParallelStep]

SqlRunner = Callable[[str, Any], Awaitable[Any]]


def is_body(value: Any) -> bool:
    """True if *value* has the shape of a trigger body."""
    if isinstance(value, (str, SqlStep, CallableStep, SequenceStep, ParallelStep)):
        return True
    if isinstance(value, Mapping):
        return "parallel" in value
    if isinstance(value, (list, tuple)):
        return True
    return callable(value)


def parse_body(body: Any) -> Step:
    """Convert a caller-supplied body into a :data:`Step`.

    Raises:
        InvalidTriggerBodyError: If *body* (or a nested member) has no
            recognizable shape.
    """
    if isinstance(body, (SqlStep, CallableStep, SequenceStep, ParallelStep)):
        return body
    if isinstance(body, str):
        return SqlStep(body)
    if isinstance(body, Mapping):
        members = body.get("parallel")
        if not isinstance(members, (list, tuple)):
            raise InvalidTriggerBodyError(body)
        return ParallelStep(tuple(parse_body(m) for m in members))
    if isinstance(body, (list, tuple)):
        return SequenceStep(tuple(parse_body(m) for m in body))
    if callable(body):
        return CallableStep(body)
    raise InvalidTriggerBodyError(body)


def sql_parts(step: Step) -> list[str]:
    """Every SQL string in *step*, depth first, in declaration order."""
    if isinstance(step, SqlStep):
        return [step.sql]
    if isinstance(step, (SequenceStep, ParallelStep)):
        return [sql for member in step.steps for sql in sql_parts(member)]
    return []


def join_sql(parts: Sequence[str]) -> str:
    """Trim each statement, drop trailing semicolons, join with ``"; "``."""
    cleaned = [part.strip().rstrip(";").strip() for part in parts]
    return "; ".join(part for part in cleaned if part)


def without_sql(step: Step) -> Step | None:
    """*step* with SQL removed, or None if nothing but SQL remains."""
    if isinstance(step, SqlStep):
        return None
    if isinstance(step, CallableStep):
        return step
    members = tuple(m for m in (without_sql(s) for s in step.steps) if m is not None)
    if not members:
        return None
    return type(step)(members)


async def run_step(step: Step, context: Any, run_sql: SqlRunner) -> None:
    """Interpret *step* for one lifecycle event.

    Sequence members run one after another; parallel members are gathered,
    so the first failure propagates once raised. A callable's return value
    that is itself a body runs as a continuation.
    """
    if isinstance(step, SqlStep):
        if step.sql.strip():
            await run_sql(step.sql, context)
    elif isinstance(step, CallableStep):
        result = step.fn(context)
        if inspect.isawaitable(result):
            result = await result
        if result is not None and is_body(result):
            await run_step(parse_body(result), context, run_sql)
    elif isinstance(step, SequenceStep):
        for member in step.steps:
            await run_step(member, context, run_sql)
    elif isinstance(step, ParallelStep):
        await asyncio.gather(*(run_step(m, context, run_sql) for m in step.steps))
    else:
        raise InvalidTriggerBodyError(step)

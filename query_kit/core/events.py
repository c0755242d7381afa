"""Topic-keyed publish/subscribe.

Listeners for a topic run in registration order. A listener may return an
awaitable; ``emit`` awaits it before moving on, which is what lets BEFORE
trigger bodies finish before a statement reaches its executor. Listener
exceptions propagate to whoever emitted the event.
"""

from __future__ import annotations

import asyncio
import inspect
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any

import structlog

from query_kit.core.exceptions import RunningLoopError

logger = structlog.get_logger(__name__)

Listener = Callable[..., Any]


def trigger_topic(namespace: str, timing: str, action: str, table: str) -> str:
    """Topic name of a query lifecycle event."""
    return f"{namespace}:trigger:{timing}:{action}:{table}"


class EventManager:
    """Local event bus with an optional external delegate.

    Args:
        delegate: Resolves the external bus at emit time (or returns None).
            A callable rather than the bus itself so that swapping the bus on
            a configuration context takes effect without rebuilding managers.
    """

    def __init__(self, delegate: Callable[[], Any] | None = None) -> None:
        self._listeners: dict[str, list[Listener]] = {}
        self._delegate = delegate

    def on(self, event: str, listener: Listener) -> Callable[[], None]:
        """Subscribe *listener* to *event*; returns an unsubscribe handle."""
        self._listeners.setdefault(event, []).append(listener)
        return lambda: self.off(event, listener)

    def off(self, event: str, listener: Listener) -> None:
        listeners = self._listeners.get(event)
        if not listeners:
            return
        self._listeners[event] = [fn for fn in listeners if fn is not listener]

    def listeners(self, event: str) -> list[Listener]:
        return list(self._listeners.get(event, []))

    def clear(self) -> None:
        self._listeners.clear()

    async def emit(self, event: str, *args: Any) -> None:
        """Run every listener of *event*, awaiting awaitable results in order."""
        for listener in self.listeners(event):
            result = listener(*args)
            if inspect.isawaitable(result):
                await result
        self._forward(event, args)

    def emit_sync(self, event: str, *args: Any) -> None:
        """Synchronous variant of :meth:`emit` for the ``*_sync`` query paths.

        Awaitable listener results are driven to completion with
        ``asyncio.run``. That is impossible inside a running loop, so an
        awaitable result there raises ``ConfigurationError`` before the
        statement continues.
        """
        for listener in self.listeners(event):
            result = listener(*args)
            if inspect.isawaitable(result):
                self._drive(event, result)
        self._forward(event, args)

    def _drive(self, event: str, awaitable: Awaitable[Any]) -> None:
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(_as_coroutine(awaitable))
            return

        close = getattr(awaitable, "close", None)
        if callable(close):
            close()
        raise RunningLoopError(event)

    def _forward(self, event: str, args: tuple[Any, ...]) -> None:
        bus = self._delegate() if self._delegate is not None else None
        if bus is None:
            return
        try:
            bus.emit(event, *args)
        except Exception as e:
            logger.warning("external_event_bus_failed", topic=event, error=str(e))


async def _as_coroutine(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


@dataclass
class TriggerContext:
    """Payload of a query lifecycle event, handed to trigger callables.

    ``where`` is set for UPDATE/DELETE, ``rows`` for READ, and ``result``
    for AFTER events of writes.
    """

    table: str
    action: str
    timing: str
    data: Any = None
    where: Any = None
    rows: list[dict[str, Any]] | None = None
    result: Any = None

"""Configuration context.

QueryKitConfig is a Pydantic model holding everything executor resolution,
the event bus and the simulation engine need. Components take a config
explicitly; when none is given they fall back to the process-wide context
returned by :func:`get_config`. Tests build their own instances.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, PrivateAttr

from query_kit.core.enums import Dialect
from query_kit.core.events import EventManager

if TYPE_CHECKING:
    from query_kit.core.simulation import SimulationEngine

ExecutorResolver = Callable[[str], Any]


class QueryKitConfig(BaseModel):
    """Configuration for executor resolution, events and simulation."""

    model_config = ConfigDict(arbitrary_types_allowed=True, validate_assignment=True)

    default_executor: Any = None
    executor_resolver: ExecutorResolver | None = None
    multi_db: Any = None
    table_to_database: dict[str, str] = {}
    database_name: str | None = None
    dialect: Dialect | None = None
    namespace: str = "query_kit"
    event_bus: Any = None
    simulation: Any = None

    _events: EventManager | None = PrivateAttr(default=None)
    _simulator: Any = PrivateAttr(default=None)

    @property
    def events(self) -> EventManager:
        """The local event bus bound to this context."""
        if self._events is None:
            self._events = EventManager(delegate=lambda: self.event_bus)
        return self._events

    @property
    def simulator(self) -> SimulationEngine:
        """The simulation engine bound to this context."""
        if self._simulator is None:
            from query_kit.core.simulation import SimulationEngine

            self._simulator = SimulationEngine(self)
        return self._simulator


_default_config = QueryKitConfig()


def get_config() -> QueryKitConfig:
    """Return the process-wide configuration context."""
    return _default_config


def reset_config() -> QueryKitConfig:
    """Replace the process-wide context with a fresh one and return it."""
    global _default_config
    _default_config = QueryKitConfig()
    return _default_config


def _target(config: QueryKitConfig | None) -> QueryKitConfig:
    return config if config is not None else _default_config


def set_default_executor(executor: Any, config: QueryKitConfig | None = None) -> None:
    _target(config).default_executor = executor


def set_executor_resolver(
    resolver: ExecutorResolver | None, config: QueryKitConfig | None = None
) -> None:
    _target(config).executor_resolver = resolver


def set_multi_db_registry(registry: Any, config: QueryKitConfig | None = None) -> None:
    _target(config).multi_db = registry


def set_table_to_database(mapping: dict[str, str], config: QueryKitConfig | None = None) -> None:
    _target(config).table_to_database = dict(mapping)


def set_database_name(name: str | None, config: QueryKitConfig | None = None) -> None:
    _target(config).database_name = name


def set_dialect(dialect: Dialect | str | None, config: QueryKitConfig | None = None) -> None:
    _target(config).dialect = Dialect(dialect) if isinstance(dialect, str) else dialect


def set_event_bus(bus: Any, config: QueryKitConfig | None = None) -> None:
    _target(config).event_bus = bus


def set_simulation_controller(controller: Any, config: QueryKitConfig | None = None) -> None:
    _target(config).simulation = controller

"""QueryKit - fluent SQL query builder with lifecycle triggers and simulation."""

from __future__ import annotations

from query_kit.adapters.postgresql import AsyncPostgresqlExecutor, PostgresqlExecutor
from query_kit.adapters.sqlite import AsyncSqliteExecutor, SqliteExecutor
from query_kit.core.config import (
    QueryKitConfig,
    get_config,
    reset_config,
    set_database_name,
    set_default_executor,
    set_dialect,
    set_event_bus,
    set_executor_resolver,
    set_multi_db_registry,
    set_simulation_controller,
    set_table_to_database,
)
from query_kit.core.connection import DatabaseConfig, MultiDatabaseManager
from query_kit.core.enums import Dialect, TriggerAction, TriggerState, TriggerTiming, WriteKind
from query_kit.core.events import EventManager, TriggerContext
from query_kit.core.exceptions import (
    AdapterError,
    ConfigurationError,
    ConnectionError,  # noqa: A004
    ContractViolationError,
    EmptyInsertError,
    InvalidTriggerBodyError,
    MissingWhereClauseError,
    NoPendingActionError,
    QueryKitError,
    RegistryError,
    RunningLoopError,
    TriggerError,
    UnknownDatabaseError,
    UnsupportedActionError,
)
from query_kit.core.logging import configure_logging
from query_kit.core.resolver import resolve_executor
from query_kit.core.results import QueryResult, WriteResult, normalize_write_result
from query_kit.core.simulation import SimulationEngine
from query_kit.query.builder import QueryBuilder, table
from query_kit.query.parallel import parallel
from query_kit.query.plan import Raw, raw
from query_kit.triggers.manager import TriggerManager
from query_kit.triggers.views import ViewManager

__all__ = [
    # Configuration
    "QueryKitConfig",
    "get_config",
    "reset_config",
    "set_default_executor",
    "set_executor_resolver",
    "set_multi_db_registry",
    "set_table_to_database",
    "set_database_name",
    "set_dialect",
    "set_event_bus",
    "set_simulation_controller",
    "resolve_executor",
    "configure_logging",
    # Connections
    "DatabaseConfig",
    "MultiDatabaseManager",
    # Executors
    "SqliteExecutor",
    "AsyncSqliteExecutor",
    "PostgresqlExecutor",
    "AsyncPostgresqlExecutor",
    # Query
    "QueryBuilder",
    "table",
    "parallel",
    "Raw",
    "raw",
    "QueryResult",
    "WriteResult",
    "normalize_write_result",
    # Events and simulation
    "EventManager",
    "TriggerContext",
    "SimulationEngine",
    # Triggers and views
    "TriggerManager",
    "ViewManager",
    # Enums
    "Dialect",
    "TriggerAction",
    "TriggerState",
    "TriggerTiming",
    "WriteKind",
    # Exceptions
    "QueryKitError",
    "ConfigurationError",
    "RunningLoopError",
    "RegistryError",
    "UnknownDatabaseError",
    "ContractViolationError",
    "MissingWhereClauseError",
    "NoPendingActionError",
    "EmptyInsertError",
    "UnsupportedActionError",
    "TriggerError",
    "InvalidTriggerBodyError",
    "AdapterError",
    "ConnectionError",
]

"""Unit tests for configuration accessors and executor resolution."""

from __future__ import annotations

from typing import Any

import pytest

from query_kit.core import config as config_module
from query_kit.core.config import (
    QueryKitConfig,
    get_config,
    reset_config,
    set_database_name,
    set_default_executor,
    set_dialect,
    set_executor_resolver,
    set_multi_db_registry,
    set_table_to_database,
)
from query_kit.core.connection import MultiDatabaseManager
from query_kit.core.enums import Dialect
from query_kit.core.exceptions import ConfigurationError
from query_kit.core.resolver import resolve_executor


class Named:
    def __init__(self, name: str) -> None:
        self.name = name

    async def execute_query(self, sql: str, bindings: Any) -> dict[str, Any]:
        return {"data": []}


@pytest.fixture
def registry() -> MultiDatabaseManager:
    return MultiDatabaseManager(
        {"main": Named("main"), "replica": Named("replica"), "archive": Named("archive")}
    )


class TestResolutionOrder:
    def test_resolver_wins(self, registry: MultiDatabaseManager) -> None:
        config = QueryKitConfig(
            executor_resolver=lambda table: Named(f"custom:{table}"),
            multi_db=registry,
            database_name="main",
            default_executor=Named("default"),
        )
        assert resolve_executor(config, "users", ["replica"]).name == "custom:users"

    def test_resolver_returning_none_falls_through(self, registry: MultiDatabaseManager) -> None:
        config = QueryKitConfig(executor_resolver=lambda table: None, multi_db=registry)
        assert resolve_executor(config, "users", ["replica"]).name == "replica"

    def test_bank_hints_skip_unknown(self, registry: MultiDatabaseManager) -> None:
        config = QueryKitConfig(multi_db=registry, database_name="main")
        assert resolve_executor(config, "users", ["missing", "archive"]).name == "archive"

    def test_registry_default_is_not_a_resolution_layer(self) -> None:
        registry = MultiDatabaseManager({"main": Named("main")}, default_database="main")
        config = QueryKitConfig(multi_db=registry, default_executor=Named("default"))
        assert resolve_executor(config, "users").name == "default"
        with pytest.raises(ConfigurationError):
            resolve_executor(QueryKitConfig(multi_db=registry), "users")

    def test_table_map_beats_database_name(self, registry: MultiDatabaseManager) -> None:
        config = QueryKitConfig(
            multi_db=registry, table_to_database={"logs": "archive"}, database_name="main"
        )
        assert resolve_executor(config, "logs").name == "archive"
        assert resolve_executor(config, "users").name == "main"

    def test_default_executor_last(self, registry: MultiDatabaseManager) -> None:
        config = QueryKitConfig(
            multi_db=registry, database_name="nope", default_executor=Named("default")
        )
        assert resolve_executor(config, "users", ["missing"]).name == "default"

    def test_nothing_configured(self) -> None:
        with pytest.raises(ConfigurationError, match="No executor configured for QueryKit"):
            resolve_executor(QueryKitConfig(), "users")

    def test_registry_that_raises_is_skipped(self) -> None:
        class Broken:
            def get_adapter(self, name: str) -> Any:
                raise RuntimeError("down")

        config = QueryKitConfig(multi_db=Broken(), default_executor=Named("default"))
        assert resolve_executor(config, "users", ["a"]).name == "default"


class TestAccessors:
    def test_setters_target_explicit_config(self, registry: MultiDatabaseManager) -> None:
        config = QueryKitConfig()
        executor = Named("x")
        set_default_executor(executor, config)
        set_multi_db_registry(registry, config)
        set_table_to_database({"logs": "archive"}, config)
        set_database_name("main", config)
        set_dialect("postgres", config)
        resolver = lambda table: None  # noqa: E731
        set_executor_resolver(resolver, config)

        assert config.default_executor is executor
        assert config.multi_db is registry
        assert config.table_to_database == {"logs": "archive"}
        assert config.database_name == "main"
        assert config.dialect is Dialect.POSTGRES
        assert config.executor_resolver is resolver

    def test_process_wide_default(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(config_module, "_default_config", QueryKitConfig())
        executor = Named("global")
        set_default_executor(executor)
        assert get_config().default_executor is executor

        fresh = reset_config()
        assert get_config() is fresh
        assert fresh.default_executor is None

    def test_lazily_owned_components(self) -> None:
        config = QueryKitConfig()
        assert config.events is config.events
        assert config.simulator is config.simulator
        assert config.namespace == "query_kit"

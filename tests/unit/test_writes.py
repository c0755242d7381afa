"""Unit tests for pending write actions and make()."""

from __future__ import annotations

from typing import Any

import pytest

from query_kit.core.config import QueryKitConfig
from query_kit.core.events import TriggerContext, trigger_topic
from query_kit.core.exceptions import (
    ConfigurationError,
    EmptyInsertError,
    MissingWhereClauseError,
    NoPendingActionError,
    UnsupportedActionError,
)
from query_kit.core.results import WriteResult
from query_kit.query.builder import QueryBuilder


class TestInsert:
    async def test_insert_scenario(self, config: QueryKitConfig, executor: Any) -> None:
        result = await QueryBuilder("users", config).insert({"email": "a@b.com"}).make()
        assert executor.calls == [
            ("run_sync", "INSERT INTO users (email) VALUES (?)", ["a@b.com"])
        ]
        assert result == WriteResult(changes=1, last_insert_rowid=1)

    @pytest.mark.parametrize("data", [[], {}, [{"n": 1}, {}]])
    def test_empty_insert_is_rejected(
        self, config: QueryKitConfig, executor: Any, data: Any
    ) -> None:
        query = QueryBuilder("users", config)
        with pytest.raises(EmptyInsertError):
            query.insert(data)
        assert not query.has_pending_write()
        assert executor.calls == []

    async def test_multi_row_insert_is_one_statement(
        self, config: QueryKitConfig, executor: Any
    ) -> None:
        await QueryBuilder("users", config).insert([{"n": 1}, {"n": 2}]).make()
        assert executor.calls == [("run_sync", "INSERT INTO users (n) VALUES (?), (?)", [1, 2])]

    async def test_async_only_executor_result_is_normalized(
        self, async_only_executor: Any
    ) -> None:
        config = QueryKitConfig(default_executor=async_only_executor)
        result = await QueryBuilder("users", config).insert({"n": 1}).make()
        assert async_only_executor.calls == [("INSERT INTO users (n) VALUES (?)", [1])]
        assert result == WriteResult(changes=2, last_insert_rowid=7)


class TestPendingAction:
    async def test_make_without_pending_action(self, config: QueryKitConfig) -> None:
        with pytest.raises(NoPendingActionError):
            await QueryBuilder("users", config).make()

    async def test_pending_action_is_cleared(
        self, config: QueryKitConfig, executor: Any
    ) -> None:
        query = QueryBuilder("users", config)
        await query.insert({"id": 1}).make()
        assert not query.has_pending_write()
        await query.update({"name": "x"}).where("id", "=", 1).make()
        assert executor.statements == [
            "INSERT INTO users (id) VALUES (?)",
            "UPDATE users SET name = ? WHERE id = ?",
        ]
        with pytest.raises(NoPendingActionError):
            await query.make()

    async def test_unsupported_action(self, config: QueryKitConfig, executor: Any) -> None:
        query = QueryBuilder("users", config)
        query._pending = object()  # type: ignore[assignment]
        with pytest.raises(UnsupportedActionError):
            await query.make()
        assert executor.calls == []

    async def test_no_executor_is_a_configuration_error(self, bare_config: QueryKitConfig) -> None:
        with pytest.raises(ConfigurationError, match="No executor configured for QueryKit"):
            await QueryBuilder("users", bare_config).insert({"a": 1}).make()


class TestGuardedWrites:
    @pytest.mark.parametrize(
        "declare",
        [
            lambda q: q.update({"a": 1}),
            lambda q: q.delete(),
            lambda q: q.increment("a"),
            lambda q: q.decrement("a", 2),
        ],
    )
    async def test_requires_where_before_touching_executor(
        self, config: QueryKitConfig, executor: Any, declare: Any
    ) -> None:
        with pytest.raises(MissingWhereClauseError):
            await declare(QueryBuilder("users", config)).make()
        assert executor.calls == []

    async def test_missing_where_does_not_need_an_executor(
        self, bare_config: QueryKitConfig
    ) -> None:
        with pytest.raises(MissingWhereClauseError, match="Delete operations"):
            await QueryBuilder("users", bare_config).delete().make()

    async def test_delete(self, config: QueryKitConfig, executor: Any) -> None:
        await QueryBuilder("users", config).where_in("id", [1, 2]).delete().make()
        assert executor.calls == [("run_sync", "DELETE FROM users WHERE id IN (?,?)", [1, 2])]

    async def test_increment_and_decrement(self, config: QueryKitConfig, executor: Any) -> None:
        await QueryBuilder("accounts", config).where("id", 1).increment("balance", 5).make()
        await QueryBuilder("accounts", config).where("id", 2).decrement("balance").make()
        assert executor.calls == [
            ("run_sync", "UPDATE accounts SET balance = balance + ? WHERE id = ?", [5, 1]),
            ("run_sync", "UPDATE accounts SET balance = balance - ? WHERE id = ?", [1, 2]),
        ]


class TestUpsert:
    async def test_updates_when_rows_change(self, config: QueryKitConfig, executor: Any) -> None:
        await QueryBuilder("users", config).update_or_insert({"email": "a@b"}, {"name": "A"}).make()
        assert executor.statements == ["UPDATE users SET name = ? WHERE email = ?"]

    async def test_inserts_merged_row_when_nothing_changed(
        self, config: QueryKitConfig, executor: Any
    ) -> None:
        executor.changes = 0
        await QueryBuilder("users", config).update_or_insert({"email": "a@b"}, {"name": "A"}).make()
        assert executor.calls[-1] == (
            "run_sync",
            "INSERT INTO users (email, name) VALUES (?, ?)",
            ["a@b", "A"],
        )

    async def test_existence_check_without_values(
        self, config: QueryKitConfig, executor: Any
    ) -> None:
        executor.rows = [{"1": 1}]
        await QueryBuilder("users", config).update_or_insert({"email": "a@b"}).make()
        assert executor.calls == [
            ("execute_query", "SELECT 1 FROM users WHERE email = ? LIMIT 1", ["a@b"])
        ]

    async def test_restores_where_clauses(self, config: QueryKitConfig) -> None:
        query = QueryBuilder("users", config).where("tenant", 3)
        before = query.wheres
        await query.update_or_insert({"email": "a@b"}, {"name": "A"}).make()
        assert query.wheres == before

    async def test_empty_attributes(self, config: QueryKitConfig) -> None:
        with pytest.raises(MissingWhereClauseError):
            await QueryBuilder("users", config).update_or_insert({}, {"a": 1}).make()


class TestWriteEvents:
    async def test_before_and_after_carry_where_and_result(self, config: QueryKitConfig) -> None:
        seen: list[TriggerContext] = []
        for timing in ("BEFORE", "AFTER"):
            config.events.on(
                trigger_topic(config.namespace, timing, "UPDATE", "users"), seen.append
            )

        await QueryBuilder("users", config).where("id", 1).update({"name": "B"}).make()

        before, after = seen
        assert (before.timing, after.timing) == ("BEFORE", "AFTER")
        assert before.where.sql == "id = ?"
        assert before.where.bindings == (1,)
        assert before.data == {"name": "B"}
        assert before.result is None
        assert after.result == WriteResult(changes=1, last_insert_rowid=1)

    async def test_before_runs_before_executor(self, config: QueryKitConfig, executor: Any) -> None:
        order: list[str] = []

        async def before(ctx: TriggerContext) -> None:
            order.append(f"before:{len(executor.calls)}")

        config.events.on(trigger_topic(config.namespace, "BEFORE", "DELETE", "users"), before)
        await QueryBuilder("users", config).where("id", 1).delete().make()
        assert order == ["before:0"]
        assert len(executor.calls) == 1

    async def test_insert_context_data(self, config: QueryKitConfig) -> None:
        seen: list[Any] = []
        config.events.on(
            trigger_topic(config.namespace, "AFTER", "INSERT", "users"),
            lambda ctx: seen.append(ctx.data),
        )
        await QueryBuilder("users", config).insert({"id": 1}).make()
        await QueryBuilder("users", config).insert([{"id": 2}, {"id": 3}]).make()
        assert seen == [{"id": 1}, [{"id": 2}, {"id": 3}]]

    async def test_listener_failure_reaches_caller(self, config: QueryKitConfig) -> None:
        def boom(ctx: TriggerContext) -> None:
            raise RuntimeError("listener failed")

        config.events.on(trigger_topic(config.namespace, "BEFORE", "INSERT", "users"), boom)
        with pytest.raises(RuntimeError, match="listener failed"):
            await QueryBuilder("users", config).insert({"id": 1}).make()

    def test_run_executes_compiled_statement(self, config: QueryKitConfig, executor: Any) -> None:
        result = QueryBuilder("users", config).where("id", 1).run()
        assert executor.calls == [("run_sync", "SELECT * FROM users WHERE id = ?", [1])]
        assert result.changes == 1

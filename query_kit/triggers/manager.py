"""Trigger registrations.

A registration binds a body to (timing, action, table) combinations. In
``bank`` mode the SQL portions become native ``CREATE TRIGGER`` objects and
the rest runs in-process; in ``state`` mode everything runs in-process as
a listener on the query lifecycle topic. Either way, the body runs once
per matching event.
"""

from __future__ import annotations

from collections.abc import Callable, Iterable
from dataclasses import dataclass, field
from typing import Any

import structlog

from query_kit.core.config import QueryKitConfig, get_config
from query_kit.core.enums import TriggerAction, TriggerState, TriggerTiming
from query_kit.core.events import TriggerContext, trigger_topic
from query_kit.core.exceptions import ConfigurationError
from query_kit.core.resolver import resolve_executor
from query_kit.core.results import normalize_write_result
from query_kit.triggers.body import Step, join_sql, parse_body, run_step, sql_parts, without_sql
from query_kit.triggers.catalog import (
    TRIGGER_QUERIES,
    first_listing,
    first_listing_async,
    resolve_dialect,
)

logger = structlog.get_logger(__name__)

ALL_ACTIONS = (
    TriggerAction.INSERT,
    TriggerAction.UPDATE,
    TriggerAction.DELETE,
    TriggerAction.READ,
)


@dataclass(frozen=True)
class NativeTrigger:
    name: str
    table: str


@dataclass
class TriggerRegistration:
    """Everything one named trigger owns.

    Native triggers and listener handles are torn down independently.
    """

    name: str
    native: list[NativeTrigger] = field(default_factory=list)
    unsubscribers: list[Callable[[], None]] = field(default_factory=list)


@dataclass(frozen=True)
class _Pair:
    action: TriggerAction
    table: str
    native_sql: str | None


def native_trigger_name(name: str, timing: TriggerTiming, action: TriggerAction, table: str) -> str:
    return f"{name}__{timing.value}__{action.value}__{table}"


def _listify(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (str, TriggerAction)):
        return [value]
    return list(value)


def expand_actions(action: Any, except_: Any = None) -> list[TriggerAction]:
    """Expand ``"*"`` and subtract *except_*; unknown names are skipped."""

    def expand(values: Iterable[Any]) -> list[TriggerAction]:
        found: list[TriggerAction] = []
        for value in values:
            if isinstance(value, TriggerAction):
                candidates = [value]
            elif str(value).strip() == "*":
                candidates = list(ALL_ACTIONS)
            else:
                try:
                    candidates = [TriggerAction(str(value).strip().upper())]
                except ValueError:
                    logger.warning("invalid_trigger_action", action=value)
                    continue
            found.extend(c for c in candidates if c not in found)
        return found

    excluded = set(expand(_listify(except_)))
    return [a for a in expand(_listify(action)) if a not in excluded]


class TriggerManager:
    """Create, list and drop trigger registrations.

    Args:
        config: Configuration context; defaults to the process-wide one.
    """

    def __init__(self, config: QueryKitConfig | None = None) -> None:
        self._config = config if config is not None else get_config()
        self._registrations: dict[str, TriggerRegistration] = {}

    # --- Registration ---

    def _plan(
        self,
        name: str,
        timing: TriggerTiming,
        action: Any,
        table: Any,
        except_: Any,
        step: Step,
        state: TriggerState,
    ) -> list[_Pair]:
        sql = join_sql(sql_parts(step)) if state is TriggerState.BANK else ""
        pairs = []
        for act in expand_actions(action, except_):
            for tbl in _listify(table):
                native_sql = None
                if sql and act is not TriggerAction.READ:
                    trigger_name = native_trigger_name(name, timing, act, tbl)
                    native_sql = (
                        f"CREATE TRIGGER IF NOT EXISTS {trigger_name} "
                        f"{timing.value} {act.value} ON {tbl} "
                        f"FOR EACH ROW BEGIN {sql}; END"
                    )
                pairs.append(_Pair(act, tbl, native_sql))
        return pairs

    def _prepare(
        self, name: str, when: Any, body: Any, state: Any
    ) -> tuple[TriggerTiming, Step, TriggerState]:
        timing = when if isinstance(when, TriggerTiming) else TriggerTiming(str(when).upper())
        mode = state if isinstance(state, TriggerState) else TriggerState(str(state).lower())
        step = parse_body(body)
        self.drop(name)
        return timing, step, mode

    def create(
        self,
        name: str,
        *,
        when: TriggerTiming | str,
        action: Any,
        table: str | Iterable[str],
        body: Any,
        except_: Any = None,
        state: TriggerState | str = TriggerState.BANK,
    ) -> TriggerRegistration:
        """Register *body* under *name*, replacing any previous registration.

        Native triggers are created through the executor's ``run_sync``.

        Raises:
            InvalidTriggerBodyError: If *body* is not a valid body.
        """
        timing, step, mode = self._prepare(name, when, body, state)
        registration = TriggerRegistration(name=name)
        for pair in self._plan(name, timing, action, table, except_, step, mode):
            created = False
            if pair.native_sql is not None:
                created = self._try_native(registration, timing, pair)
            self._attach(registration, timing, pair, step, created)
        return self._register(registration)

    async def create_async(
        self,
        name: str,
        *,
        when: TriggerTiming | str,
        action: Any,
        table: str | Iterable[str],
        body: Any,
        except_: Any = None,
        state: TriggerState | str = TriggerState.BANK,
    ) -> TriggerRegistration:
        """Like :meth:`create`, falling back to ``execute_query`` for native DDL."""
        timing, step, mode = self._prepare(name, when, body, state)
        registration = TriggerRegistration(name=name)
        for pair in self._plan(name, timing, action, table, except_, step, mode):
            created = False
            if pair.native_sql is not None:
                try:
                    await self._execute(pair.table, pair.native_sql)
                except Exception as e:
                    logger.warning(
                        "native_trigger_failed", trigger=name, table=pair.table, error=str(e)
                    )
                else:
                    self._record_native(registration, timing, pair)
                    created = True
            self._attach(registration, timing, pair, step, created)
        return self._register(registration)

    def _register(self, registration: TriggerRegistration) -> TriggerRegistration:
        self._registrations[registration.name] = registration
        logger.info(
            "trigger_created",
            trigger=registration.name,
            native=[n.name for n in registration.native],
            listeners=len(registration.unsubscribers),
        )
        return registration

    def _try_native(
        self,
        registration: TriggerRegistration,
        timing: TriggerTiming,
        pair: _Pair,
    ) -> bool:
        try:
            self._run_sync(pair.table, pair.native_sql)
        except Exception as e:
            logger.warning(
                "native_trigger_failed", trigger=registration.name, table=pair.table, error=str(e)
            )
            return False
        self._record_native(registration, timing, pair)
        return True

    def _record_native(
        self, registration: TriggerRegistration, timing: TriggerTiming, pair: _Pair
    ) -> None:
        trigger_name = native_trigger_name(registration.name, timing, pair.action, pair.table)
        registration.native.append(NativeTrigger(trigger_name, pair.table))

    def _attach(
        self,
        registration: TriggerRegistration,
        timing: TriggerTiming,
        pair: _Pair,
        step: Step,
        native_created: bool,
    ) -> None:
        # Once SQL lives in a native trigger only the non-SQL remainder runs
        # in-process; otherwise the whole body does.
        listener_step = without_sql(step) if native_created else step
        if listener_step is None:
            return
        topic = trigger_topic(self._config.namespace, timing.value, pair.action.value, pair.table)
        unsubscribe = self._config.events.on(topic, self._listener(listener_step))
        registration.unsubscribers.append(unsubscribe)

    def _listener(self, step: Step) -> Callable[[TriggerContext], Any]:
        async def listener(context: TriggerContext) -> None:
            await run_step(step, context, self._run_sql)

        return listener

    async def _run_sql(self, sql: str, context: Any) -> Any:
        return await self._execute(getattr(context, "table", ""), sql)

    async def _execute(self, table: str, sql: str, bindings: list[Any] | None = None) -> Any:
        executor = resolve_executor(self._config, table)
        run_sync = getattr(executor, "run_sync", None)
        if callable(run_sync):
            return normalize_write_result(run_sync(sql, bindings or []))
        return await executor.execute_query(sql, bindings or [])

    def _run_sync(self, table: str, sql: str, bindings: list[Any] | None = None) -> Any:
        executor = resolve_executor(self._config, table)
        run_sync = getattr(executor, "run_sync", None)
        if not callable(run_sync):
            raise ConfigurationError("executor does not support run_sync")
        return run_sync(sql, bindings or [])

    # --- Teardown ---

    def drop(self, name: str) -> None:
        """Remove the registration *name*; teardown failures are logged only."""
        registration = self._registrations.pop(name, None)
        if registration is None:
            return
        self._unsubscribe(registration)
        for native in registration.native:
            try:
                self._run_sync(native.table, f"DROP TRIGGER IF EXISTS {native.name}")
            except Exception as e:
                logger.warning("trigger_teardown_failed", trigger=native.name, error=str(e))
        logger.info("trigger_dropped", trigger=name)

    async def drop_async(self, name: str) -> None:
        registration = self._registrations.pop(name, None)
        if registration is None:
            return
        self._unsubscribe(registration)
        for native in registration.native:
            try:
                await self._execute(native.table, f"DROP TRIGGER IF EXISTS {native.name}")
            except Exception as e:
                logger.warning("trigger_teardown_failed", trigger=native.name, error=str(e))
        logger.info("trigger_dropped", trigger=name)

    def _unsubscribe(self, registration: TriggerRegistration) -> None:
        for unsubscribe in registration.unsubscribers:
            try:
                unsubscribe()
            except Exception as e:
                logger.warning(
                    "trigger_teardown_failed", trigger=registration.name, error=str(e)
                )

    def drop_all(self) -> None:
        for name in list(self._registrations):
            try:
                self.drop(name)
            except Exception as e:
                logger.warning("trigger_teardown_failed", trigger=name, error=str(e))

    # --- Introspection ---

    def list(self) -> list[str]:
        """Names of live registrations."""
        return list(self._registrations)

    def get(self, name: str) -> TriggerRegistration | None:
        return self._registrations.get(name)

    def _detailed(self, catalog: list[str]) -> dict[str, list[str]]:
        bank = [n.name for r in self._registrations.values() for n in r.native]
        bank.extend(name for name in catalog if name not in bank)
        state = [r.name for r in self._registrations.values() if r.unsubscribers]
        return {"bank_triggers": bank, "state_triggers": state}

    def list_detailed(self, include_catalog: bool = False) -> dict[str, list[str]]:
        """``{"bank_triggers": [...], "state_triggers": [...]}``

        bank_triggers holds native trigger names; state_triggers holds the
        names of registrations with in-process listeners.
        """
        return self._detailed(self.list_triggers() if include_catalog else [])

    async def list_detailed_async(self, include_catalog: bool = False) -> dict[str, list[str]]:
        return self._detailed(await self.list_triggers_async() if include_catalog else [])

    # --- Native trigger helpers ---

    def create_trigger(
        self,
        name: str,
        table: str,
        timing: TriggerTiming | str,
        event: TriggerAction | str,
        body: str,
    ) -> None:
        """Create a native trigger directly, outside any registration."""
        timing_value = timing.value if isinstance(timing, TriggerTiming) else str(timing).upper()
        event_value = event.value if isinstance(event, TriggerAction) else str(event).upper()
        self._run_sync(
            table,
            f"CREATE TRIGGER IF NOT EXISTS {name} {timing_value} {event_value} ON {table} "
            f"FOR EACH ROW BEGIN {body} END",
        )

    def drop_trigger(self, name: str, table: str | None = None) -> None:
        self._run_sync(table or name, f"DROP TRIGGER IF EXISTS {name}")

    def list_triggers(self) -> list[str]:
        """Native triggers known to the database catalog.

        Empty when the executor cannot run synchronous queries or every
        catalog candidate fails.
        """
        executor = resolve_executor(self._config, "")
        query = getattr(executor, "execute_query_sync", None)
        if not callable(query):
            return []
        dialect = resolve_dialect(executor, self._config.dialect)
        return first_listing(TRIGGER_QUERIES[dialect], query)

    async def list_triggers_async(self) -> list[str]:
        executor = resolve_executor(self._config, "")
        query = getattr(executor, "execute_query", None)
        if not callable(query):
            return []
        dialect = resolve_dialect(executor, self._config.dialect)
        return await first_listing_async(TRIGGER_QUERIES[dialect], query)

    def trigger_exists(self, name: str) -> bool:
        return name in self.list_triggers()

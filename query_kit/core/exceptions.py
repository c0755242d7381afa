"""QueryKit exception hierarchy.

Configuration and contract errors always reach the caller. Catalog
introspection and teardown failures are handled where they happen and
never surface as exceptions.
"""

from __future__ import annotations


class QueryKitError(Exception):
    """Base exception for all QueryKit errors."""


# --- Configuration ---


class ConfigurationError(QueryKitError):
    """Raised when no executor can be determined for a statement."""

    def __init__(self, detail: str | None = None) -> None:
        message = "No executor configured for QueryKit"
        if detail:
            message = f"{message}: {detail}"
        super().__init__(message)


class RunningLoopError(ConfigurationError):
    """Raised when a sync query path meets an async listener inside a running loop."""

    def __init__(self, event: str) -> None:
        self.event = event
        QueryKitError.__init__(
            self,
            f"Async listener for '{event}' cannot complete inside a running event loop; "
            "use the async query methods instead",
        )


# --- Registry ---


class RegistryError(QueryKitError):
    """Base for multi-database registry errors."""


class UnknownDatabaseError(RegistryError):
    """Raised when a registry has no adapter under the requested name."""

    def __init__(self, database_name: str) -> None:
        self.database_name = database_name
        super().__init__(f"Database adapter '{database_name}' not found")


# --- Contract violations ---


class ContractViolationError(QueryKitError):
    """Base for programmer errors in how a query is assembled."""


class MissingWhereClauseError(ContractViolationError):
    """Raised when update/delete/increment/decrement has no WHERE clause."""

    def __init__(self, action: str) -> None:
        self.action = action
        super().__init__(f"{action.capitalize()} operations must have a WHERE clause.")


class NoPendingActionError(ContractViolationError):
    """Raised when make() is called without a pending write action."""

    def __init__(self) -> None:
        super().__init__(
            "No pending write action to execute. "
            "Call insert(), update(), or delete() before make()"
        )


class EmptyInsertError(ContractViolationError):
    """Raised when insert() is given no rows or a row without columns."""

    def __init__(self) -> None:
        super().__init__("Insert requires at least one row with at least one column")


class UnsupportedActionError(ContractViolationError):
    """Raised when a pending action has a kind the executor path does not know."""

    def __init__(self, kind: object) -> None:
        self.kind = kind
        super().__init__(f"Unsupported pending action: {kind}")


# --- Triggers ---


class TriggerError(QueryKitError):
    """Base for trigger engine errors."""


class InvalidTriggerBodyError(TriggerError):
    """Raised when a trigger body is not SQL, a callable, a sequence or a parallel group."""

    def __init__(self, body: object) -> None:
        self.body = body
        super().__init__(f"Invalid trigger body: {type(body).__name__}")


# --- Adapter ---


class AdapterError(QueryKitError):
    """Base for adapter errors."""


class ConnectionError(AdapterError):  # noqa: A001
    """Raised on connection failures."""

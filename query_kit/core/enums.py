"""Enumerations shared across the query, trigger and catalog layers."""

from __future__ import annotations

from enum import Enum


class Dialect(Enum):
    """SQL dialects understood by catalog introspection."""

    SQLITE = "sqlite"
    MYSQL = "mysql"
    POSTGRES = "postgres"
    MSSQL = "mssql"
    ORACLE = "oracle"


class TriggerTiming(Enum):
    BEFORE = "BEFORE"
    AFTER = "AFTER"


class TriggerAction(Enum):
    INSERT = "INSERT"
    UPDATE = "UPDATE"
    DELETE = "DELETE"
    READ = "READ"


class TriggerState(Enum):
    """Where a trigger registration is materialized."""

    BANK = "bank"
    STATE = "state"


class WriteKind(Enum):
    """Kinds of pending write action a query can hold."""

    INSERT = "insert"
    UPDATE = "update"
    DELETE = "delete"
    INCREMENT = "increment"
    DECREMENT = "decrement"
    UPSERT = "update_or_insert"

"""Trigger layer - body composition, registrations and views."""

from __future__ import annotations

from query_kit.triggers.body import CallableStep, ParallelStep, SequenceStep, SqlStep, parse_body
from query_kit.triggers.manager import TriggerManager, TriggerRegistration
from query_kit.triggers.views import ViewManager

__all__ = [
    "TriggerManager",
    "TriggerRegistration",
    "ViewManager",
    "parse_body",
    "SqlStep",
    "CallableStep",
    "SequenceStep",
    "ParallelStep",
]

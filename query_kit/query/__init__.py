"""Query layer - AST nodes, compiler and the fluent builder."""

from __future__ import annotations

from query_kit.query.builder import QueryBuilder, table
from query_kit.query.parallel import parallel
from query_kit.query.plan import Aggregate, Raw, TrackingEntry, WhereFragment, raw

__all__ = [
    "QueryBuilder",
    "table",
    "parallel",
    "Raw",
    "raw",
    "Aggregate",
    "TrackingEntry",
    "WhereFragment",
]

"""Query planning — request terms resolved against a model schema."""

from __future__ import annotations

from .plan import QueryPlan, SortTerm
from .planner import QueryPlanner, not_deleted
from .sorting import parse_select, parse_sort

__all__ = [
    "QueryPlan",
    "QueryPlanner",
    "SortTerm",
    "not_deleted",
    "parse_select",
    "parse_sort",
]

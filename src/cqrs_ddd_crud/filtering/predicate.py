"""Predicate — a single ``(field, operator, value)`` filter term."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any

from ..operators import FilterOperator


@dataclass(frozen=True)
class Predicate:
    """
    One filter term. A list of predicates is combined with implicit AND.

    ``field`` is a logical field name; it is not checked against any
    schema here. Unknown fields are dropped later, by the planner.
    """

    field: str
    operator: FilterOperator = FilterOperator.EQ
    value: Any = None

    def as_tuple(self) -> tuple[str, str, Any]:
        return (self.field, self.operator.value, self.value)

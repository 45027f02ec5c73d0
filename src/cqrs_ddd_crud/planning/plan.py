"""QueryPlan — a backend-neutral description of one list/count request."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from ..filtering.predicate import Predicate


@dataclass(frozen=True)
class SortTerm:
    field: str
    descending: bool = False


@dataclass(frozen=True)
class QueryPlan:
    """
    Immutable plan shared by the data query and the count query.

    Attributes:
        predicates: Resolved predicates, lifecycle terms first. The count
            query uses exactly this set.
        order_by: Never empty; falls back to newest-created first.
        projection: Fields to return; every declared field by default.
        page, limit, offset: Already clamped.
        include_deleted: Whether the caller asked for deleted rows.
    """

    predicates: tuple[Predicate, ...]
    order_by: tuple[SortTerm, ...]
    projection: tuple[str, ...]
    page: int
    limit: int
    offset: int
    include_deleted: bool = False
    dropped_terms: tuple[str, ...] = field(default_factory=tuple)

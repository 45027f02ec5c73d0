"""
Compile predicates and sort terms into SQLAlchemy clauses.

Terms naming a column the table does not have are dropped here as well as
in the planner, so adapters stay safe to call with raw predicates.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from sqlalchemy import ColumnElement, and_, asc, desc, true

from .operators import DEFAULT_SQLA_REGISTRY

if TYPE_CHECKING:
    from collections.abc import Sequence

    from ...filtering.predicate import Predicate
    from ...planning.plan import SortTerm
    from .strategy import SQLAlchemyOperatorRegistry
    from .tables import SQLAlchemyTable

logger = logging.getLogger(__name__)


def build_clauses(
    handle: SQLAlchemyTable,
    predicates: Sequence[Predicate],
    *,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> list[ColumnElement[bool]]:
    """Compile each resolvable predicate into one boolean clause."""
    reg = registry or DEFAULT_SQLA_REGISTRY
    clauses: list[ColumnElement[bool]] = []
    for predicate in predicates:
        column = handle.column(predicate.field)
        if column is None:
            logger.debug(
                "Ignoring predicate on unknown column %s.%s",
                handle.table.name,
                predicate.field,
            )
            continue
        clauses.append(reg.compile(predicate, column))
    return clauses


def build_sqla_filter(
    handle: SQLAlchemyTable,
    predicates: Sequence[Predicate],
    *,
    registry: SQLAlchemyOperatorRegistry | None = None,
) -> ColumnElement[bool]:
    """AND every resolvable predicate together; an empty set matches all rows."""
    clauses = build_clauses(handle, predicates, registry=registry)
    if not clauses:
        return true()
    if len(clauses) == 1:
        return clauses[0]
    return and_(*clauses)


def build_order_by(handle: SQLAlchemyTable, terms: Sequence[SortTerm]) -> list[Any]:
    order: list[Any] = []
    for term in terms:
        column = handle.column(term.field)
        if column is None:
            continue
        order.append(desc(column) if term.descending else asc(column))
    return order


def build_projection(handle: SQLAlchemyTable, fields: Sequence[str]) -> list[Any]:
    columns = [c for c in (handle.column(f) for f in fields) if c is not None]
    return columns or list(handle.table.c)

"""Sort and select expression parsing against a model schema."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from .plan import SortTerm

if TYPE_CHECKING:
    from ..schema import ModelSchema

logger = logging.getLogger(__name__)

DESC_PREFIX = "desc_"


def parse_sort(
    expression: str | None,
    schema: ModelSchema,
    *,
    default_field: str,
) -> tuple[SortTerm, ...]:
    """
    Parse ``"name,desc_created_at"`` into sort terms.

    A ``desc_`` prefix sorts descending on the remainder of the name.
    Unresolvable names are dropped; if nothing resolves, or no expression
    is given, the order is descending on *default_field*.
    """
    terms: list[SortTerm] = []
    for raw in (expression or "").split(","):
        name = raw.strip()
        if not name:
            continue
        descending = False
        if name.startswith(DESC_PREFIX):
            name = name[len(DESC_PREFIX) :]
            descending = True
        if schema.resolve(name) is None:
            logger.debug(
                "Dropping unknown sort field %r on %s", name, schema.table_name
            )
            continue
        terms.append(SortTerm(name, descending))
    if terms:
        return tuple(terms)
    return (SortTerm(default_field, descending=True),)


def parse_select(expression: str | None, schema: ModelSchema) -> tuple[str, ...]:
    """
    Parse ``"id,name"`` into a projection.

    No expression means every declared field. Unknown names are dropped;
    if none of the names resolve, every declared field is returned.
    """
    if not expression:
        return schema.field_names
    fields: list[str] = []
    for raw in expression.split(","):
        name = raw.strip()
        if not name:
            continue
        if schema.resolve(name) is None:
            logger.debug(
                "Dropping unknown select field %r on %s", name, schema.table_name
            )
            continue
        if name not in fields:
            fields.append(name)
    return tuple(fields) if fields else schema.field_names

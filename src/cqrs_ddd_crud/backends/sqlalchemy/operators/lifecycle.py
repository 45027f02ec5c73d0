"""Soft-delete and current-version operators for SQLAlchemy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from sqlalchemy import and_, exists, not_, or_

from ....operators import FilterOperator
from ....schema import CREATED_AT, UPDATED_AT
from ..strategy import SQLAlchemyOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class IsNullOperator(SQLAlchemyOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IS_NULL

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if value is False:
            return cast("ColumnElement[bool]", column.is_not(None))
        return cast("ColumnElement[bool]", column.is_(None))


class IsCurrentOperator(SQLAlchemyOperator):
    """
    Keep only the current version of each logical entity.

    ``column`` is the physical identity column; ``value`` names the fields
    that together identify one logical entity. A row is current when no
    other row with the same identity sorts after it under
    ``(updated_at, created_at, physical id)``. A soft delete stamps the
    current row, so a deleted entity stays current-and-deleted.
    """

    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IS_CURRENT

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        table = column.table
        newer = table.alias(f"{table.name}_newer")
        nc, tc = newer.c, table.c
        same_identity = [nc[field] == tc[field] for field in value]
        later = or_(
            nc[UPDATED_AT] > tc[UPDATED_AT],
            and_(nc[UPDATED_AT] == tc[UPDATED_AT], nc[CREATED_AT] > tc[CREATED_AT]),
            and_(
                nc[UPDATED_AT] == tc[UPDATED_AT],
                nc[CREATED_AT] == tc[CREATED_AT],
                nc[column.name] > column,
            ),
        )
        newer_exists = exists().where(*same_identity, later)
        return cast("ColumnElement[bool]", not_(newer_exists))

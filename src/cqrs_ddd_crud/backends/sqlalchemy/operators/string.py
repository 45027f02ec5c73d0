"""Case-insensitive string match operators for SQLAlchemy."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, cast

from ....operators import FilterOperator
from ..strategy import SQLAlchemyOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class IStartsWithOperator(SQLAlchemyOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.PREFIX

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        clause = column.istartswith(str(value), autoescape=True)
        return cast("ColumnElement[bool]", clause)


class IEndsWithOperator(SQLAlchemyOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.SUFFIX

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        clause = column.iendswith(str(value), autoescape=True)
        return cast("ColumnElement[bool]", clause)


class IContainsOperator(SQLAlchemyOperator):
    @property
    def name(self) -> FilterOperator:
        return FilterOperator.SUBSTR

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        clause = column.icontains(str(value), autoescape=True)
        return cast("ColumnElement[bool]", clause)

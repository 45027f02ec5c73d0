"""Comparison and membership operators for SQLAlchemy."""

from __future__ import annotations

import operator as op_module
from collections.abc import Callable
from typing import TYPE_CHECKING, Any, ClassVar, cast

from ....operators import FilterOperator
from ..strategy import SQLAlchemyOperator

if TYPE_CHECKING:
    from sqlalchemy.sql.elements import ColumnElement


class _BinaryComparison(SQLAlchemyOperator):
    operator: ClassVar[FilterOperator]
    compare: ClassVar[Callable[[Any, Any], Any]]

    @property
    def name(self) -> FilterOperator:
        return self.operator

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        return cast("ColumnElement[bool]", type(self).compare(column, value))


class EqualOperator(_BinaryComparison):
    """``= value``; a ``None`` value compiles to ``IS NULL``."""

    operator = FilterOperator.EQ
    compare = op_module.eq

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if value is None:
            return cast("ColumnElement[bool]", column.is_(None))
        return super().apply(column, value)


class NotEqualOperator(_BinaryComparison):
    operator = FilterOperator.NE
    compare = op_module.ne

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if value is None:
            return cast("ColumnElement[bool]", column.is_not(None))
        return super().apply(column, value)


class GreaterThanOperator(_BinaryComparison):
    operator = FilterOperator.GT
    compare = op_module.gt


class LessThanOperator(_BinaryComparison):
    operator = FilterOperator.LT
    compare = op_module.lt


class GreaterEqualOperator(_BinaryComparison):
    operator = FilterOperator.GTE
    compare = op_module.ge


class LessEqualOperator(_BinaryComparison):
    operator = FilterOperator.LTE
    compare = op_module.le


class InOperator(SQLAlchemyOperator):
    """Membership; a scalar value is treated as a one-element list."""

    @property
    def name(self) -> FilterOperator:
        return FilterOperator.IN

    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        if not isinstance(value, list | tuple | set | frozenset):
            value = [value]
        return cast("ColumnElement[bool]", column.in_(list(value)))

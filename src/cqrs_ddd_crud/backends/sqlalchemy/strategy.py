"""
Operator strategies for the SQL backend.

One :class:`SQLAlchemyOperator` per :class:`FilterOperator` turns a
column and an already-coerced value into a boolean clause. Backends look
strategies up in a :class:`SQLAlchemyOperatorRegistry`, so a deployment
can swap one (say, a case-sensitive ``prefix``) without touching the
compiler.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Any

from ...exceptions import BackendError

if TYPE_CHECKING:
    from collections.abc import Iterable

    from sqlalchemy import ColumnElement

    from ...filtering.predicate import Predicate
    from ...operators import FilterOperator


class SQLAlchemyOperator(ABC):
    """Compiles one filter operator into a ``ColumnElement[bool]``."""

    @property
    @abstractmethod
    def name(self) -> FilterOperator: ...

    @abstractmethod
    def apply(self, column: Any, value: Any) -> ColumnElement[bool]:
        """
        Args:
            column: A ``Table`` column; ``column.table`` is the owning table.
            value: The predicate value, already coerced by the planner.
        """


class SQLAlchemyOperatorRegistry:
    """Operator strategies keyed by :class:`FilterOperator`."""

    def __init__(self, operators: Iterable[SQLAlchemyOperator] = ()) -> None:
        self._strategies: dict[FilterOperator, SQLAlchemyOperator] = {}
        for strategy in operators:
            self.register(strategy)

    # ── Registration ─────────────────────────────────────────────

    def register(
        self, strategy: SQLAlchemyOperator, *, replace: bool = False
    ) -> None:
        """
        Add *strategy*.

        Raises:
            BackendError: If its operator already has a strategy and
                *replace* is not set.
        """
        if strategy.name in self._strategies and not replace:
            raise BackendError(
                f"Operator {strategy.name.value!r} already has a strategy "
                f"({type(self._strategies[strategy.name]).__name__})"
            )
        self._strategies[strategy.name] = strategy

    # ── Lookup ───────────────────────────────────────────────────

    def __contains__(self, name: object) -> bool:
        return name in self._strategies

    @property
    def supported_operators(self) -> frozenset[FilterOperator]:
        return frozenset(self._strategies)

    def apply(
        self, name: FilterOperator, column: Any, value: Any
    ) -> ColumnElement[bool]:
        """
        Raises:
            BackendError: If no strategy handles *name*.
        """
        strategy = self._strategies.get(name)
        if strategy is None:
            raise BackendError(f"No SQL strategy for operator {name!r}")
        return strategy.apply(column, value)

    def compile(self, predicate: Predicate, column: Any) -> ColumnElement[bool]:
        return self.apply(predicate.operator, column, predicate.value)

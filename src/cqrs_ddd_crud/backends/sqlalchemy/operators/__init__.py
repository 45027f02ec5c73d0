"""
SQLAlchemy operator implementations and default registry.

Usage::

    from cqrs_ddd_crud.backends.sqlalchemy.operators import DEFAULT_SQLA_REGISTRY

    expr = DEFAULT_SQLA_REGISTRY.apply(FilterOperator.EQ, column, value)
"""

from __future__ import annotations

from ..strategy import SQLAlchemyOperatorRegistry
from .comparison import (
    EqualOperator,
    GreaterEqualOperator,
    GreaterThanOperator,
    InOperator,
    LessEqualOperator,
    LessThanOperator,
    NotEqualOperator,
)
from .lifecycle import IsCurrentOperator, IsNullOperator
from .string import IContainsOperator, IEndsWithOperator, IStartsWithOperator


def build_default_sqla_registry() -> SQLAlchemyOperatorRegistry:
    """Create a registry with all built-in SQLAlchemy operators."""
    return SQLAlchemyOperatorRegistry(
        [
            # Comparison
            EqualOperator(),
            NotEqualOperator(),
            GreaterThanOperator(),
            LessThanOperator(),
            GreaterEqualOperator(),
            LessEqualOperator(),
            InOperator(),
            # String
            IStartsWithOperator(),
            IEndsWithOperator(),
            IContainsOperator(),
            # Lifecycle
            IsNullOperator(),
            IsCurrentOperator(),
        ]
    )


DEFAULT_SQLA_REGISTRY = build_default_sqla_registry()

__all__ = [
    "DEFAULT_SQLA_REGISTRY",
    "EqualOperator",
    "GreaterEqualOperator",
    "GreaterThanOperator",
    "IContainsOperator",
    "IEndsWithOperator",
    "IStartsWithOperator",
    "InOperator",
    "IsCurrentOperator",
    "IsNullOperator",
    "LessEqualOperator",
    "LessThanOperator",
    "NotEqualOperator",
    "build_default_sqla_registry",
]

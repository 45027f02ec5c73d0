"""Reference SQL backend built on async SQLAlchemy 2.0."""

from __future__ import annotations

from .backend import (
    SQLAlchemyBackend,
    SQLAlchemyInsert,
    SQLAlchemySelect,
    SQLAlchemyUpdate,
    create_backend_from_url,
)
from .compiler import build_clauses, build_order_by, build_projection, build_sqla_filter
from .operators import DEFAULT_SQLA_REGISTRY, build_default_sqla_registry
from .strategy import SQLAlchemyOperator, SQLAlchemyOperatorRegistry
from .tables import SQLAlchemyTable, build_table

__all__ = [
    "DEFAULT_SQLA_REGISTRY",
    "SQLAlchemyBackend",
    "SQLAlchemyInsert",
    "SQLAlchemyOperator",
    "SQLAlchemyOperatorRegistry",
    "SQLAlchemySelect",
    "SQLAlchemyTable",
    "SQLAlchemyUpdate",
    "build_clauses",
    "build_default_sqla_registry",
    "build_order_by",
    "build_projection",
    "build_sqla_filter",
    "build_table",
    "create_backend_from_url",
]

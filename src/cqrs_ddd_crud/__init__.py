"""
cqrs-ddd-crud — a schema-agnostic async CRUD engine.

Typical wiring::

    backend = create_backend_from_url("sqlite:///app.db")
    registry = ModelRegistry(backend)
    registry.register("User", ModelSchema.append_only("users"))
    await registry.create_tables()
    registry.freeze()

    engine = CrudEngine(registry, EngineConfig(default_limit=20))
    user = await engine.create("User", {"name": "Bob"}, scope_key=1)
    page = await engine.list("User", {"name_substr": "bo"}, scope_key=1)
"""

from __future__ import annotations

from .backends.sqlalchemy import SQLAlchemyBackend, create_backend_from_url
from .config import EngineConfig, resolve_database_url
from .engine import CrudEngine
from .exceptions import (
    BackendError,
    ConfigurationError,
    CrudError,
    DuplicateModelError,
    FilterParseError,
    ModelNotRegisteredError,
    PayloadValidationError,
    RegistryFrozenError,
    ScopeRequiredError,
)
from .filtering import (
    FilterParser,
    LegacyPrefixKeySyntax,
    PaginationParser,
    Predicate,
    QueryStringBuilder,
    SuffixKeySyntax,
    parse_query_string,
)
from .identity import IIDGenerator, UUID4Generator
from .models import CreatePayload, Entity, UpdatePatch
from .operators import FilterOperator
from .planning import QueryPlan, QueryPlanner, SortTerm
from .ports import IBackendAdapter, ITableHandle
from .registry import ModelRegistry, RegisteredModel
from .results import ListResult
from .schema import ColumnDescriptor, ColumnKind, LifecyclePolicy, ModelSchema

__version__ = "0.1.0"

__all__ = [
    "BackendError",
    "ColumnDescriptor",
    "ColumnKind",
    "ConfigurationError",
    "CreatePayload",
    "CrudEngine",
    "CrudError",
    "DuplicateModelError",
    "EngineConfig",
    "Entity",
    "FilterOperator",
    "FilterParseError",
    "FilterParser",
    "IBackendAdapter",
    "IIDGenerator",
    "ITableHandle",
    "LegacyPrefixKeySyntax",
    "LifecyclePolicy",
    "ListResult",
    "ModelNotRegisteredError",
    "ModelRegistry",
    "ModelSchema",
    "PaginationParser",
    "PayloadValidationError",
    "Predicate",
    "QueryPlan",
    "QueryPlanner",
    "QueryStringBuilder",
    "RegisteredModel",
    "RegistryFrozenError",
    "SQLAlchemyBackend",
    "ScopeRequiredError",
    "SortTerm",
    "SuffixKeySyntax",
    "UUID4Generator",
    "UpdatePatch",
    "create_backend_from_url",
    "parse_query_string",
    "resolve_database_url",
]

from __future__ import annotations

import pytest
from sqlalchemy import inspect

from cqrs_ddd_crud import (
    ConfigurationError,
    DuplicateModelError,
    ModelNotRegisteredError,
    ModelRegistry,
    ModelSchema,
    RegistryFrozenError,
)
from cqrs_ddd_crud.ports import IBackendAdapter, ITableHandle


def test_backend_satisfies_port(backend):
    assert isinstance(backend, IBackendAdapter)


def test_register_and_lookup(backend):
    registry = ModelRegistry(backend)
    schema = ModelSchema.append_only("users")

    handle = registry.register("User", schema)

    assert isinstance(handle, ITableHandle)
    assert registry.get("User").handle is handle
    assert registry.schema_for("User") is schema
    assert registry.schema_for("Nope") is None
    assert "User" in registry
    assert len(registry) == 1


def test_registered_models_keep_order(backend):
    registry = ModelRegistry(backend)
    for name in ("Zeta", "Alpha", "Mid"):
        registry.register(name, ModelSchema.single_row(name.lower()))

    assert registry.registered_models() == ["Zeta", "Alpha", "Mid"]


def test_unknown_model(backend):
    with pytest.raises(ModelNotRegisteredError) as excinfo:
        ModelRegistry(backend).get("Nope")
    assert excinfo.value.model_name == "Nope"


def test_duplicate_model(backend):
    registry = ModelRegistry(backend)
    registry.register("User", ModelSchema.single_row("users"))

    with pytest.raises(DuplicateModelError):
        registry.register("User", ModelSchema.single_row("people"))


def test_same_table_twice(backend):
    registry = ModelRegistry(backend)
    registry.register("User", ModelSchema.single_row("users"))

    with pytest.raises(ConfigurationError):
        registry.register("Person", ModelSchema.single_row("users"))


def test_frozen_registry(backend):
    registry = ModelRegistry(backend)
    registry.freeze()

    assert registry.frozen
    with pytest.raises(RegistryFrozenError):
        registry.register("User", ModelSchema.single_row("users"))


@pytest.mark.asyncio
async def test_create_tables_provisions_indexes(backend):
    registry = ModelRegistry(backend)
    registry.register("User", ModelSchema.append_only("users"))
    registry.register("Product", ModelSchema.single_row("products"))

    await registry.create_tables()
    await registry.create_tables()

    def _inspect(conn):
        inspector = inspect(conn)
        indexed = {
            tuple(ix["column_names"]) for ix in inspector.get_indexes("users")
        }
        return set(inspector.get_table_names()), indexed

    async with backend.engine.connect() as conn:
        tables, indexed = await conn.run_sync(_inspect)

    assert {"users", "products"} <= tables
    assert {
        ("workspace_id",),
        ("id",),
        ("name",),
        ("deleted_at",),
        ("created_at",),
        ("workspace_id", "id"),
    } <= indexed

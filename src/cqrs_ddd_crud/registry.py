"""ModelRegistry — owned mapping of model name to schema and table handle."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, NamedTuple

from .exceptions import (
    DuplicateModelError,
    ModelNotRegisteredError,
    RegistryFrozenError,
)

if TYPE_CHECKING:
    from .ports.backend import IBackendAdapter, ITableHandle
    from .schema import ModelSchema

logger = logging.getLogger(__name__)


class RegisteredModel(NamedTuple):
    name: str
    schema: ModelSchema
    handle: ITableHandle


class ModelRegistry:
    """Registry of the models one engine serves.

    Construct it once at start-up, register every model, optionally
    :meth:`freeze` it, then hand it to the engine. Registration is not
    safe to race with lookups; lookups are safe to run concurrently once
    registration is done.

    **Conflict detection:** registering a name twice raises
    :class:`~cqrs_ddd_crud.exceptions.DuplicateModelError`; registering
    after :meth:`freeze` raises
    :class:`~cqrs_ddd_crud.exceptions.RegistryFrozenError`.
    """

    def __init__(self, backend: IBackendAdapter) -> None:
        self._backend = backend
        self._models: dict[str, RegisteredModel] = {}
        self._frozen = False

    @property
    def backend(self) -> IBackendAdapter:
        return self._backend

    @property
    def frozen(self) -> bool:
        return self._frozen

    # ── Registration ─────────────────────────────────────────────

    def register(self, name: str, schema: ModelSchema) -> ITableHandle:
        if self._frozen:
            raise RegistryFrozenError(
                f"Cannot register {name!r}: the registry is frozen"
            )
        if name in self._models:
            raise DuplicateModelError(f"Model {name!r} is already registered")
        handle = self._backend.bind(schema)
        self._models[name] = RegisteredModel(name, schema, handle)
        logger.info(
            "Registered model %s -> %s (%s)",
            name,
            schema.table_name,
            schema.policy.value,
        )
        return handle

    def freeze(self) -> None:
        self._frozen = True

    async def create_tables(self) -> None:
        """Create every registered table (and its indexes) if missing."""
        await self._backend.create_tables([m.handle for m in self._models.values()])

    # ── Lookup ───────────────────────────────────────────────────

    def get(self, name: str) -> RegisteredModel:
        try:
            return self._models[name]
        except KeyError:
            raise ModelNotRegisteredError(name) from None

    def registered_models(self) -> list[str]:
        return list(self._models)

    def schema_for(self, name: str) -> ModelSchema | None:
        model = self._models.get(name)
        return model.schema if model is not None else None

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def __len__(self) -> int:
        return len(self._models)

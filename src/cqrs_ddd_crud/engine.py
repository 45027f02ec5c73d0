"""
CrudEngine — the async façade over registry, planner, lifecycle stores and backend.

Every operation resolves the model in the registry first, so an unknown
model fails with :class:`ModelNotRegisteredError` before any I/O.

Failure policy::

    create / bulk_create / update / delete  -> backend errors propagate
    get / get_all                            -> backend errors propagate
    list                                     -> ListResult(success=False)
    count                                    -> 0

Not-found is ``None`` (``get``, ``update``) or ``False`` (``delete``).
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Mapping, Sequence
from typing import TYPE_CHECKING, Any

from .config import EngineConfig
from .exceptions import ScopeRequiredError
from .filtering.parser import FilterParser
from .filtering.syntax import LegacyPrefixKeySyntax, SuffixKeySyntax
from .models import CreatePayload, Entity, UpdatePatch, validate_payload
from .planning.planner import QueryPlanner
from .results import ListResult
from .versioning import store_class_for

if TYPE_CHECKING:
    from .identity import IIDGenerator
    from .ports.backend import IBackendAdapter
    from .registry import ModelRegistry, RegisteredModel
    from .versioning.base import Clock, LifecycleStore

logger = logging.getLogger(__name__)


class CrudEngine:
    """
    Schema-agnostic CRUD over registered models.

    Args:
        registry: The models this engine serves, already registered.
        config: Paging, sorting and parsing settings.
        id_generator: Source of entity and row ids (UUIDv4 by default).
        clock: Current-time source (UTC ``now`` by default).
    """

    def __init__(
        self,
        registry: ModelRegistry,
        config: EngineConfig | None = None,
        *,
        id_generator: IIDGenerator | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.registry = registry
        self.config = config or EngineConfig()
        self._id_generator = id_generator
        self._clock = clock
        syntax = (
            LegacyPrefixKeySyntax()
            if self.config.legacy_prefix_operators
            else SuffixKeySyntax()
        )
        self.parser = FilterParser(syntax, reserved_keys=self.config.reserved_keys)
        self.planner = QueryPlanner(self.config)

    @property
    def backend(self) -> IBackendAdapter:
        return self.registry.backend

    # -- writes -------------------------------------------------------------

    async def create(
        self,
        model: str,
        payload: Mapping[str, Any] | CreatePayload,
        *,
        scope_key: Any = None,
    ) -> Entity:
        """Create one entity. The scope may also come from the payload."""
        [entity] = await self.bulk_create(model, [payload], scope_key=scope_key)
        return entity

    async def bulk_create(
        self,
        model: str,
        payloads: Sequence[Mapping[str, Any] | CreatePayload],
        *,
        scope_key: Any = None,
    ) -> list[Entity]:
        """
        Create every payload in one backend insert.

        Each item gets its own fresh identity. All payloads are validated
        before anything is written; the insert succeeds or fails as a whole.
        """
        entry = self.registry.get(model)
        records = [
            validate_payload(CreatePayload, payload).model_dump()
            for payload in payloads
        ]
        scope = self._create_scope(entry, scope_key, records)
        store = self._store(entry)
        try:
            rows = await store.bulk_create(records, scope)
        except Exception:
            logger.exception("Create failed for %s", model)
            raise
        logger.info("Created %d %s record(s)", len(rows), model)
        return [Entity.from_row(row) for row in rows]

    async def update(
        self,
        model: str,
        scope_key: Any,
        entity_id: str,
        patch: Mapping[str, Any] | UpdatePatch,
    ) -> Entity | None:
        entry = self.registry.get(model)
        scope = self._require_scope(entry, scope_key)
        changes = validate_payload(UpdatePatch, patch).to_patch()
        try:
            row = await self._store(entry).update(scope, entity_id, changes)
        except Exception:
            logger.exception("Update failed for %s/%s", model, entity_id)
            raise
        if row is None:
            logger.warning("Update target %s/%s not found", model, entity_id)
            return None
        return Entity.from_row(row)

    async def delete(self, model: str, scope_key: Any, entity_id: str) -> bool:
        """Soft-delete the current version. ``False`` if already deleted or missing."""
        entry = self.registry.get(model)
        scope = self._require_scope(entry, scope_key)
        try:
            deleted = await self._store(entry).delete(scope, entity_id)
        except Exception:
            logger.exception("Delete failed for %s/%s", model, entity_id)
            raise
        if deleted:
            logger.info("Soft-deleted %s/%s", model, entity_id)
        else:
            logger.warning(
                "Delete target %s/%s not found or already deleted", model, entity_id
            )
        return deleted

    # -- point reads --------------------------------------------------------

    async def get(
        self,
        model: str,
        scope_key: Any,
        entity_id: str,
        *,
        include_deleted: bool = False,
    ) -> Entity | None:
        entry = self.registry.get(model)
        scope = self._require_scope(entry, scope_key)
        row = await self._store(entry).current(
            scope, entity_id, include_deleted=include_deleted
        )
        return Entity.from_row(row) if row is not None else None

    async def get_all(self, model: str, scope_key: Any = None) -> list[Entity]:
        """Latest active version of every entity in scope, newest first."""
        entry = self.registry.get(model)
        scope = self._require_scope(entry, scope_key)
        rows = await self._store(entry).get_all(scope)
        return [Entity.from_row(row) for row in rows]

    # -- list / count -------------------------------------------------------

    async def list(
        self,
        model: str,
        params: Mapping[str, Any] | None = None,
        *,
        scope_key: Any = None,
    ) -> ListResult:
        """
        Filtered, sorted, paginated read.

        The data query and the count query run concurrently with the same
        predicate set. A backend failure yields an empty, unsuccessful
        :class:`ListResult` instead of an exception.
        """
        entry = self.registry.get(model)
        scope = self._require_scope(entry, scope_key)
        predicates, options = self.parser.parse(params or {})
        lifecycle = self._store(entry).list_predicates(
            scope, include_deleted=options.include_deleted
        )
        plan = self.planner.plan(entry.schema, predicates, options, lifecycle=lifecycle)

        query = (
            self.backend.select(entry.handle)
            .where(plan.predicates)
            .order_by(plan.order_by)
            .project(plan.projection)
            .limit(plan.limit)
            .offset(plan.offset)
        )
        try:
            rows, total = await asyncio.gather(
                query, self.backend.count(entry.handle, plan.predicates)
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning(
                "List of %s failed; returning an empty page", model, exc_info=True
            )
            return ListResult.failed(exc, page=plan.page, limit=plan.limit)
        return ListResult(
            records=[Entity.from_row(row) for row in rows],
            record_count=total,
            page=plan.page,
            limit=plan.limit,
        )

    async def count(
        self,
        model: str,
        params: Mapping[str, Any] | None = None,
        *,
        scope_key: Any = None,
    ) -> int:
        """Number of rows ``list`` would match; ``0`` if the backend fails."""
        entry = self.registry.get(model)
        scope = self._require_scope(entry, scope_key)
        predicates, options = self.parser.parse(params or {})
        lifecycle = self._store(entry).list_predicates(
            scope, include_deleted=options.include_deleted
        )
        where = self.planner.plan_count(
            entry.schema,
            predicates,
            include_deleted=options.include_deleted,
            lifecycle=lifecycle,
        )
        try:
            return await self.backend.count(entry.handle, where)
        except Exception:  # noqa: BLE001
            logger.warning("Count of %s failed; returning 0", model, exc_info=True)
            return 0

    # -- helpers ------------------------------------------------------------

    def _store(self, entry: RegisteredModel) -> LifecycleStore:
        return store_class_for(entry.schema)(
            self.backend,
            entry.handle,
            id_generator=self._id_generator,
            clock=self._clock,
        )

    @staticmethod
    def _require_scope(entry: RegisteredModel, scope_key: Any) -> Any:
        scope_field = entry.schema.scope_field
        if scope_field is not None and scope_key is None:
            raise ScopeRequiredError(entry.name, scope_field)
        return scope_key

    @classmethod
    def _create_scope(
        cls,
        entry: RegisteredModel,
        scope_key: Any,
        records: Sequence[Mapping[str, Any]],
    ) -> Any:
        scope_field = entry.schema.scope_field
        if scope_key is None and scope_field is not None and records:
            scopes = {record.get(scope_field) for record in records}
            if len(scopes) == 1:
                scope_key = scopes.pop()
        return cls._require_scope(entry, scope_key)

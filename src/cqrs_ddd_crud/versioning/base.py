"""
LifecycleStore — how one lifecycle policy reads and writes entity rows.

A store talks only to the backend port. It never parses requests and
never plans list queries; it contributes lifecycle predicates instead.
"""

from __future__ import annotations

import datetime
import logging
from abc import ABC, abstractmethod
from collections.abc import Callable, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from ..filtering.predicate import Predicate
from ..identity import IIDGenerator, UUID4Generator, utc_now
from ..operators import FilterOperator
from ..schema import DATA, DELETED_AT, NAME, UPDATED_AT
from .resolution import merge_data

if TYPE_CHECKING:
    from ..ports.backend import IBackendAdapter, ITableHandle, Row
    from ..schema import ModelSchema

logger = logging.getLogger(__name__)

Clock = Callable[[], datetime.datetime]


class LifecycleStore(ABC):
    """
    Base class for lifecycle policies.

    Args:
        backend: The storage adapter.
        handle: The table handle returned by ``backend.bind(schema)``.
        id_generator: Source of logical and physical identities.
        clock: Returns the current time; UTC by default.
    """

    def __init__(
        self,
        backend: IBackendAdapter,
        handle: ITableHandle,
        *,
        id_generator: IIDGenerator | None = None,
        clock: Clock | None = None,
    ) -> None:
        self.backend = backend
        self.handle = handle
        self.ids = id_generator or UUID4Generator()
        self.clock = clock or utc_now

    @property
    def schema(self) -> ModelSchema:
        return self.handle.schema

    # -- writes -------------------------------------------------------------

    async def bulk_create(
        self, records: Sequence[Mapping[str, Any]], scope_key: Any = None
    ) -> list[Row]:
        """Insert every record in one statement; all succeed or none do."""
        if not records:
            return []
        now = self.clock()
        rows = [self.new_row(record, scope_key, now) for record in records]
        return await self.backend.insert(self.handle).values(rows).returning()

    @abstractmethod
    def new_row(
        self, record: Mapping[str, Any], scope_key: Any, now: datetime.datetime
    ) -> dict[str, Any]:
        """Build the physical row for a freshly created entity."""

    @abstractmethod
    async def update(
        self, scope_key: Any, entity_id: str, patch: Mapping[str, Any]
    ) -> Row | None: ...

    async def delete(self, scope_key: Any, entity_id: str) -> bool:
        """Soft-delete the current row. ``False`` if nothing active was found."""
        current = await self.current(scope_key, entity_id)
        if current is None:
            return False
        physical = self.schema.physical_id_field
        now = self.clock()
        # updated_at never moves backwards.
        stamped = max(now, current[UPDATED_AT] or now)
        rows = await (
            self.backend.update(self.handle)
            .set({DELETED_AT: now, UPDATED_AT: stamped})
            .where(
                [
                    Predicate(physical, FilterOperator.EQ, current[physical]),
                    Predicate(DELETED_AT, FilterOperator.IS_NULL, True),
                ]
            )
            .returning()
        )
        return bool(rows)

    # -- reads --------------------------------------------------------------

    @abstractmethod
    async def current(
        self, scope_key: Any, entity_id: str, *, include_deleted: bool = False
    ) -> Row | None: ...

    @abstractmethod
    async def get_all(self, scope_key: Any) -> list[Row]: ...

    @abstractmethod
    def list_predicates(
        self, scope_key: Any, *, include_deleted: bool = False
    ) -> list[Predicate]:
        """Lifecycle predicates a list/count query must carry."""

    # -- helpers ------------------------------------------------------------

    def merge(
        self, previous: Mapping[str, Any], patch: Mapping[str, Any]
    ) -> dict[str, Any]:
        """Copy *previous* forward and apply *patch* (``data`` merges shallowly)."""
        merged = {
            field: previous.get(field)
            for field in (NAME, DATA, *self.schema.extra_fields)
        }
        for field, value in patch.items():
            if field == DATA:
                merged[DATA] = merge_data(previous.get(DATA), value)
            elif field == NAME:
                merged[NAME] = value
            elif field in self.schema.extra_fields:
                merged[field] = self.schema.coerce(field, value)
        return merged

    def extra_values(self, record: Mapping[str, Any]) -> dict[str, Any]:
        return {
            field: self.schema.coerce(field, record[field])
            for field in self.schema.extra_fields
            if field in record
        }

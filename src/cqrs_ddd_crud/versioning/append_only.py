"""
AppendOnlyStore — every write appends a new physical row.

All reads and writes are partitioned by the scope field. The current
version of an entity is its newest row; the entity is deleted when that
row carries ``deleted_at``. Updates copy the current version forward
into a new row that keeps the logical id and the original ``created_at``.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..filtering.predicate import Predicate
from ..operators import FilterOperator
from ..schema import CREATED_AT, DATA, DELETED_AT, ID, NAME, UPDATED_AT
from .base import LifecycleStore
from .resolution import latest_per_entity, pick_current

if TYPE_CHECKING:
    from ..ports.backend import Row

logger = logging.getLogger(__name__)


class AppendOnlyStore(LifecycleStore):
    def _scope(self, scope_key: Any) -> Predicate:
        field = self.schema.scope_field
        assert field is not None
        return Predicate(field, FilterOperator.EQ, self.schema.coerce(field, scope_key))

    def new_row(
        self, record: Mapping[str, Any], scope_key: Any, now: datetime.datetime
    ) -> dict[str, Any]:
        row = {
            self.schema.physical_id_field: self.ids.next_id(),
            self.schema.scope_field: self.schema.coerce(
                self.schema.scope_field, scope_key
            ),
            ID: self.ids.next_id(),
            NAME: record[NAME],
            DATA: dict(record.get(DATA) or {}),
            CREATED_AT: now,
            UPDATED_AT: now,
            DELETED_AT: None,
        }
        row.update(self.extra_values(record))
        return row

    async def current(
        self, scope_key: Any, entity_id: str, *, include_deleted: bool = False
    ) -> Row | None:
        rows = await self.backend.select(self.handle).where(
            [self._scope(scope_key), Predicate(ID, FilterOperator.EQ, entity_id)]
        )
        current = pick_current(rows, self.schema)
        if current is None:
            return None
        if current[DELETED_AT] is not None and not include_deleted:
            return None
        return current

    async def get_all(self, scope_key: Any) -> list[Row]:
        rows = await self.backend.select(self.handle).where([self._scope(scope_key)])
        return [
            row
            for row in latest_per_entity(rows, self.schema)
            if row[DELETED_AT] is None
        ]

    async def update(
        self, scope_key: Any, entity_id: str, patch: Mapping[str, Any]
    ) -> Row | None:
        previous = await self.current(scope_key, entity_id)
        if previous is None:
            return None
        row = {
            self.schema.physical_id_field: self.ids.next_id(),
            self.schema.scope_field: previous[self.schema.scope_field],
            ID: previous[ID],
            CREATED_AT: previous[CREATED_AT],
            UPDATED_AT: self._after(previous[UPDATED_AT]),
            DELETED_AT: None,
            **self.merge(previous, patch),
        }
        [appended] = await self.backend.insert(self.handle).values(row).returning()
        logger.info(
            "Appended version %s of %s/%s",
            appended[self.schema.physical_id_field],
            self.schema.table_name,
            entity_id,
        )
        return appended

    def list_predicates(
        self, scope_key: Any, *, include_deleted: bool = False
    ) -> list[Predicate]:
        predicates = [self._scope(scope_key)]
        if not include_deleted:
            predicates.append(
                Predicate(
                    self.schema.physical_id_field,
                    FilterOperator.IS_CURRENT,
                    self.schema.identity_fields,
                )
            )
        return predicates

    def _after(self, previous: datetime.datetime | None) -> datetime.datetime:
        # A coarse clock must still order the new version after the old one.
        now = self.clock()
        if previous is not None and now <= previous:
            return previous + datetime.timedelta(microseconds=1)
        return now

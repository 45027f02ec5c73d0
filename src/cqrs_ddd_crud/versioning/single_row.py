"""SingleRowStore — one physical row per entity, updated in place."""

from __future__ import annotations

import datetime
import logging
from collections.abc import Mapping
from typing import TYPE_CHECKING, Any

from ..filtering.predicate import Predicate
from ..operators import FilterOperator
from ..planning.plan import SortTerm
from ..planning.planner import not_deleted
from ..schema import CREATED_AT, DATA, DELETED_AT, ID, NAME, UPDATED_AT
from .base import LifecycleStore

if TYPE_CHECKING:
    from ..ports.backend import Row

logger = logging.getLogger(__name__)


class SingleRowStore(LifecycleStore):
    """
    Physical identity equals logical identity, so there is never more than
    one candidate row. ``scope_key`` is accepted for a uniform interface
    and ignored.
    """

    def new_row(
        self, record: Mapping[str, Any], scope_key: Any, now: datetime.datetime
    ) -> dict[str, Any]:
        row = {
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
        predicates = [Predicate(ID, FilterOperator.EQ, entity_id)]
        if not include_deleted:
            predicates.append(not_deleted())
        rows = await self.backend.select(self.handle).where(predicates).limit(1)
        return rows[0] if rows else None

    async def get_all(self, scope_key: Any) -> list[Row]:
        return await (
            self.backend.select(self.handle)
            .where([not_deleted()])
            .order_by(self._newest_first())
        )

    async def update(
        self, scope_key: Any, entity_id: str, patch: Mapping[str, Any]
    ) -> Row | None:
        previous = await self.current(scope_key, entity_id)
        if previous is None:
            return None
        values = self.merge(previous, patch)
        values[UPDATED_AT] = self.clock()
        rows = await (
            self.backend.update(self.handle)
            .set(values)
            .where([Predicate(ID, FilterOperator.EQ, entity_id), not_deleted()])
            .returning()
        )
        if not rows:
            return None
        logger.info("Updated %s/%s in place", self.schema.table_name, entity_id)
        return rows[0]

    def list_predicates(
        self, scope_key: Any, *, include_deleted: bool = False
    ) -> list[Predicate]:
        return []

    @staticmethod
    def _newest_first() -> list[SortTerm]:
        return [SortTerm(CREATED_AT, descending=True), SortTerm(ID, descending=True)]

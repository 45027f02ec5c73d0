"""
QueryPlanner — compiled predicates + request options -> :class:`QueryPlan`.

The planner is the boundary where request terms meet the model schema:

- predicates on undeclared fields are dropped (never an error);
- values are coerced to the declared column kind where possible;
- timestamp predicates whose value cannot be parsed are dropped too;
- an implicit ``deleted_at IS NULL`` term is prepended unless the caller
  asked for deleted rows;
- lifecycle terms supplied by the versioning layer (workspace scope,
  current-version) follow the soft-delete term;
- sort, projection and pagination are resolved and clamped.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Sequence
from typing import TYPE_CHECKING

from ..filtering.pagination import PaginationParser
from ..filtering.predicate import Predicate
from ..operators import REQUEST_OPERATORS, FilterOperator
from ..schema import DELETED_AT, ColumnKind, coerce_value
from .plan import QueryPlan
from .sorting import parse_select, parse_sort

if TYPE_CHECKING:
    from ..config import EngineConfig
    from ..filtering.parser import RequestOptions
    from ..schema import ModelSchema

logger = logging.getLogger(__name__)

_STRING_MATCH_OPERATORS = frozenset(
    {FilterOperator.PREFIX, FilterOperator.SUFFIX, FilterOperator.SUBSTR}
)


def not_deleted() -> Predicate:
    return Predicate(DELETED_AT, FilterOperator.IS_NULL, True)


def _is_timestamp(predicate: Predicate) -> bool:
    if predicate.operator in _STRING_MATCH_OPERATORS:
        return False
    values = predicate.value if isinstance(predicate.value, list) else [predicate.value]
    return all(v is None or isinstance(v, datetime.datetime) for v in values)


class QueryPlanner:
    """Build backend-neutral query plans for one engine configuration."""

    def __init__(self, config: EngineConfig) -> None:
        self._config = config
        self._pagination = PaginationParser(
            default_limit=config.default_limit,
            max_limit=config.max_limit,
        )

    def plan(
        self,
        schema: ModelSchema,
        predicates: Sequence[Predicate],
        options: RequestOptions,
        *,
        lifecycle: Sequence[Predicate] = (),
    ) -> QueryPlan:
        resolved, dropped = self.resolve_predicates(schema, predicates)
        head: list[Predicate] = []
        if not options.include_deleted:
            head.append(not_deleted())
        head.extend(lifecycle)

        pagination = self._pagination.parse(options.page, options.limit)
        return QueryPlan(
            predicates=tuple(head + resolved),
            order_by=parse_sort(
                options.sort,
                schema,
                default_field=self._config.default_sort_field,
            ),
            projection=parse_select(options.select, schema),
            page=pagination.page,
            limit=pagination.limit,
            offset=pagination.offset,
            include_deleted=options.include_deleted,
            dropped_terms=tuple(dropped),
        )

    def plan_count(
        self,
        schema: ModelSchema,
        predicates: Sequence[Predicate],
        *,
        include_deleted: bool = False,
        lifecycle: Sequence[Predicate] = (),
    ) -> tuple[Predicate, ...]:
        """Return the predicate set a count query runs with."""
        resolved, _ = self.resolve_predicates(schema, predicates)
        head = [] if include_deleted else [not_deleted()]
        return tuple([*head, *lifecycle, *resolved])

    def resolve_predicates(
        self,
        schema: ModelSchema,
        predicates: Sequence[Predicate],
    ) -> tuple[list[Predicate], list[str]]:
        """Split *predicates* into resolved (coerced) terms and dropped field names."""
        resolved: list[Predicate] = []
        dropped: list[str] = []
        for predicate in predicates:
            column = schema.resolve(predicate.field)
            if column is None or predicate.operator not in REQUEST_OPERATORS:
                logger.debug(
                    "Dropping filter %s_%s on %s",
                    predicate.field,
                    predicate.operator.value,
                    schema.table_name,
                )
                dropped.append(predicate.field)
                continue
            coerced = self._coerce(predicate, column.kind)
            if column.kind is ColumnKind.TIMESTAMP and not _is_timestamp(coerced):
                logger.debug(
                    "Dropping filter %s_%s on %s: %r is not a timestamp",
                    predicate.field,
                    predicate.operator.value,
                    schema.table_name,
                    predicate.value,
                )
                dropped.append(predicate.field)
                continue
            resolved.append(coerced)
        return resolved, dropped

    @staticmethod
    def _coerce(predicate: Predicate, kind: ColumnKind) -> Predicate:
        if predicate.operator in _STRING_MATCH_OPERATORS:
            value = "" if predicate.value is None else str(predicate.value)
            return Predicate(predicate.field, predicate.operator, value)
        return Predicate(
            predicate.field,
            predicate.operator,
            coerce_value(predicate.value, kind),
        )

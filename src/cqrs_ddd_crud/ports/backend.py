"""
IBackendAdapter — the only storage contract the engine consumes.

Query builders are chainable and lazy: nothing reaches the backend until
the builder is awaited::

    rows = await (
        backend.select(handle)
        .where(predicates)
        .order_by(terms)
        .limit(10)
        .offset(20)
    )

    [row] = await backend.insert(handle).values(record).returning()
    rows = await backend.update(handle).set(partial).where(predicates).returning()
    total = await backend.count(handle, predicates)

Rows are plain ``dict`` objects keyed by logical field name. Predicates on
fields the handle does not declare are ignored, never rejected.
"""

from __future__ import annotations

from collections.abc import Generator, Mapping, Sequence
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..filtering.predicate import Predicate
    from ..planning.plan import SortTerm
    from ..schema import ModelSchema

Row = dict[str, Any]


@runtime_checkable
class ITableHandle(Protocol):
    """A backend-bound table. Exposes its schema and named columns."""

    @property
    def schema(self) -> ModelSchema: ...

    def has_column(self, field_name: str) -> bool: ...


class ISelectQuery(Protocol):
    def where(self, predicates: Sequence[Predicate]) -> ISelectQuery: ...

    def order_by(self, terms: Sequence[SortTerm]) -> ISelectQuery: ...

    def project(self, fields: Sequence[str]) -> ISelectQuery: ...

    def limit(self, n: int) -> ISelectQuery: ...

    def offset(self, n: int) -> ISelectQuery: ...

    def __await__(self) -> Generator[Any, None, list[Row]]: ...


class IInsertQuery(Protocol):
    def values(
        self, records: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> IInsertQuery: ...

    def returning(self) -> IInsertQuery: ...

    def __await__(self) -> Generator[Any, None, list[Row]]: ...


class IUpdateQuery(Protocol):
    def set(self, partial: Mapping[str, Any]) -> IUpdateQuery: ...

    def where(self, predicates: Sequence[Predicate]) -> IUpdateQuery: ...

    def returning(self) -> IUpdateQuery: ...

    def __await__(self) -> Generator[Any, None, list[Row]]: ...


@runtime_checkable
class IBackendAdapter(Protocol):
    """
    Storage capability contract.

    ``bind`` is called once per model at registration time; every later
    call receives the handle it returned. Driver errors raised while a
    builder executes propagate unchanged.
    """

    def bind(self, schema: ModelSchema) -> ITableHandle: ...

    async def create_tables(self, handles: Sequence[ITableHandle]) -> None: ...

    def select(self, handle: ITableHandle) -> ISelectQuery: ...

    def insert(self, handle: ITableHandle) -> IInsertQuery: ...

    def update(self, handle: ITableHandle) -> IUpdateQuery: ...

    async def count(
        self,
        handle: ITableHandle,
        predicates: Sequence[Predicate] = (),
    ) -> int: ...

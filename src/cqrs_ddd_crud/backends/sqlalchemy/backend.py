"""
SQLAlchemyBackend — reference :class:`IBackendAdapter` over async SQLAlchemy.

Every awaited builder runs in its own ``AsyncSession``; writes run inside
``session.begin()`` so a multi-row insert commits or fails as one
statement. Driver exceptions are not wrapped.
"""

from __future__ import annotations

import logging
from collections.abc import Generator, Mapping, Sequence
from typing import TYPE_CHECKING, Any

from sqlalchemy import MetaData, func, insert, select, update
from sqlalchemy.ext.asyncio import async_sessionmaker, create_async_engine

from ...config import resolve_database_url
from ...exceptions import BackendError
from .compiler import build_clauses, build_order_by, build_projection
from .tables import SQLAlchemyTable, build_table

if TYPE_CHECKING:
    from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession

    from ...filtering.predicate import Predicate
    from ...planning.plan import SortTerm
    from ...ports.backend import ITableHandle, Row
    from ...schema import ModelSchema
    from .strategy import SQLAlchemyOperatorRegistry

logger = logging.getLogger(__name__)


class _Query:
    def __init__(self, backend: SQLAlchemyBackend, handle: SQLAlchemyTable) -> None:
        self._backend = backend
        self._handle = handle

    def __await__(self) -> Generator[Any, None, list[Row]]:
        return self._execute().__await__()

    async def _execute(self) -> list[Row]:
        raise NotImplementedError


class SQLAlchemySelect(_Query):
    def __init__(self, backend: SQLAlchemyBackend, handle: SQLAlchemyTable) -> None:
        super().__init__(backend, handle)
        self._predicates: list[Predicate] = []
        self._order: list[SortTerm] = []
        self._fields: list[str] = []
        self._limit: int | None = None
        self._offset: int | None = None

    def where(self, predicates: Sequence[Predicate]) -> SQLAlchemySelect:
        self._predicates.extend(predicates)
        return self

    def order_by(self, terms: Sequence[SortTerm]) -> SQLAlchemySelect:
        self._order.extend(terms)
        return self

    def project(self, fields: Sequence[str]) -> SQLAlchemySelect:
        self._fields = list(fields)
        return self

    def limit(self, n: int) -> SQLAlchemySelect:
        self._limit = n
        return self

    def offset(self, n: int) -> SQLAlchemySelect:
        self._offset = n
        return self

    async def _execute(self) -> list[Row]:
        handle = self._handle
        stmt = select(*build_projection(handle, self._fields)).where(
            *build_clauses(handle, self._predicates, registry=self._backend.registry)
        )
        order = build_order_by(handle, self._order)
        if order:
            stmt = stmt.order_by(*order)
        if self._limit is not None:
            stmt = stmt.limit(self._limit)
        if self._offset:
            stmt = stmt.offset(self._offset)
        async with self._backend.session() as session:
            result = await session.execute(stmt)
            return [dict(row) for row in result.mappings().all()]


class SQLAlchemyInsert(_Query):
    def __init__(self, backend: SQLAlchemyBackend, handle: SQLAlchemyTable) -> None:
        super().__init__(backend, handle)
        self._records: list[dict[str, Any]] = []
        self._returning = False

    def values(
        self, records: Mapping[str, Any] | Sequence[Mapping[str, Any]]
    ) -> SQLAlchemyInsert:
        if isinstance(records, Mapping):
            records = [records]
        known = self._handle.table.c
        self._records.extend(
            {k: v for k, v in record.items() if k in known} for record in records
        )
        return self

    def returning(self) -> SQLAlchemyInsert:
        self._returning = True
        return self

    async def _execute(self) -> list[Row]:
        if not self._records:
            raise BackendError("insert() executed without values()")
        table = self._handle.table
        stmt = insert(table)
        async with self._backend.session() as session, session.begin():
            if not self._returning:
                await session.execute(stmt, self._records)
                return []
            result = await session.execute(
                stmt.returning(*table.c, sort_by_parameter_order=True),
                self._records,
            )
            return [dict(row) for row in result.mappings().all()]


class SQLAlchemyUpdate(_Query):
    def __init__(self, backend: SQLAlchemyBackend, handle: SQLAlchemyTable) -> None:
        super().__init__(backend, handle)
        self._values: dict[str, Any] = {}
        self._predicates: list[Predicate] = []
        self._returning = False

    def set(self, partial: Mapping[str, Any]) -> SQLAlchemyUpdate:
        known = self._handle.table.c
        self._values.update({k: v for k, v in partial.items() if k in known})
        return self

    def where(self, predicates: Sequence[Predicate]) -> SQLAlchemyUpdate:
        self._predicates.extend(predicates)
        return self

    def returning(self) -> SQLAlchemyUpdate:
        self._returning = True
        return self

    async def _execute(self) -> list[Row]:
        if not self._values:
            raise BackendError("update() executed without set()")
        handle = self._handle
        clauses = build_clauses(
            handle, self._predicates, registry=self._backend.registry
        )
        if not clauses:
            raise BackendError("update() requires at least one resolvable predicate")
        stmt = update(handle.table).where(*clauses).values(**self._values)
        async with self._backend.session() as session, session.begin():
            if not self._returning:
                await session.execute(stmt)
                return []
            result = await session.execute(stmt.returning(*handle.table.c))
            return [dict(row) for row in result.mappings().all()]


class SQLAlchemyBackend:
    """
    Reference SQL backend.

    Args:
        engine: An ``AsyncEngine`` (``sqlite+aiosqlite`` or
            ``postgresql+asyncpg``).
        registry: Optional operator registry; defaults to the built-in one.
        metadata: Optional ``MetaData`` to attach generated tables to.
    """

    def __init__(
        self,
        engine: AsyncEngine,
        *,
        registry: SQLAlchemyOperatorRegistry | None = None,
        metadata: MetaData | None = None,
    ) -> None:
        self.engine = engine
        self.registry = registry
        self.metadata = metadata or MetaData()
        self._session_factory = async_sessionmaker(engine, expire_on_commit=False)

    def session(self) -> AsyncSession:
        return self._session_factory()

    # -- binding ------------------------------------------------------------

    def bind(self, schema: ModelSchema) -> SQLAlchemyTable:
        return SQLAlchemyTable(schema=schema, table=build_table(schema, self.metadata))

    async def create_tables(self, handles: Sequence[ITableHandle]) -> None:
        """Create missing tables and their indexes; existing tables are kept."""
        tables = [self._unwrap(h).table for h in handles]
        async with self.engine.begin() as conn:
            await conn.run_sync(self.metadata.create_all, tables=tables)
        logger.info("Provisioned %d table(s)", len(tables))

    # -- builders -----------------------------------------------------------

    def select(self, handle: ITableHandle) -> SQLAlchemySelect:
        return SQLAlchemySelect(self, self._unwrap(handle))

    def insert(self, handle: ITableHandle) -> SQLAlchemyInsert:
        return SQLAlchemyInsert(self, self._unwrap(handle))

    def update(self, handle: ITableHandle) -> SQLAlchemyUpdate:
        return SQLAlchemyUpdate(self, self._unwrap(handle))

    async def count(
        self,
        handle: ITableHandle,
        predicates: Sequence[Predicate] = (),
    ) -> int:
        table_handle = self._unwrap(handle)
        stmt = (
            select(func.count())
            .select_from(table_handle.table)
            .where(*build_clauses(table_handle, predicates, registry=self.registry))
        )
        async with self.session() as session:
            total = await session.scalar(stmt)
        return int(total or 0)

    async def dispose(self) -> None:
        await self.engine.dispose()

    @staticmethod
    def _unwrap(handle: ITableHandle) -> SQLAlchemyTable:
        if not isinstance(handle, SQLAlchemyTable):
            raise BackendError(
                f"Expected a SQLAlchemyTable handle, got {type(handle).__name__}"
            )
        return handle


def create_backend_from_url(url: str, **engine_kwargs: Any) -> SQLAlchemyBackend:
    """
    Build a :class:`SQLAlchemyBackend` for *url*, picking the async driver
    from the URL's dialect. Extra keyword arguments go to
    ``create_async_engine``.
    """
    engine = create_async_engine(resolve_database_url(url), **engine_kwargs)
    logger.debug("Created async engine for dialect %s", engine.dialect.name)
    return SQLAlchemyBackend(engine)

from __future__ import annotations

import datetime
import itertools
from typing import TYPE_CHECKING

import pytest
from sqlalchemy.ext.asyncio import create_async_engine

from cqrs_ddd_crud import (
    ColumnDescriptor,
    ColumnKind,
    CrudEngine,
    ModelRegistry,
    ModelSchema,
    SQLAlchemyBackend,
)

if TYPE_CHECKING:
    from collections.abc import AsyncGenerator


class TickingClock:
    """Deterministic clock: every call is one second after the previous one."""

    def __init__(self, start: datetime.datetime | None = None) -> None:
        self._start = start or datetime.datetime(
            2024, 1, 1, tzinfo=datetime.timezone.utc
        )
        self._ticks = itertools.count()

    def __call__(self) -> datetime.datetime:
        return self._start + datetime.timedelta(seconds=next(self._ticks))


def user_schema() -> ModelSchema:
    return ModelSchema.append_only(
        "users",
        [
            ColumnDescriptor("age", ColumnKind.INTEGER),
            ColumnDescriptor("email", ColumnKind.TEXT),
        ],
    )


def product_schema() -> ModelSchema:
    return ModelSchema.single_row(
        "products",
        [
            ColumnDescriptor("price", ColumnKind.FLOAT),
            ColumnDescriptor("active", ColumnKind.BOOLEAN),
        ],
    )


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
async def backend(tmp_path) -> AsyncGenerator[SQLAlchemyBackend, None]:
    eng = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'crud.db'}")
    backend = SQLAlchemyBackend(eng)
    yield backend
    await backend.dispose()


@pytest.fixture
async def registry(backend) -> ModelRegistry:
    registry = ModelRegistry(backend)
    registry.register("User", user_schema())
    registry.register("Product", product_schema())
    await registry.create_tables()
    registry.freeze()
    return registry


@pytest.fixture
def clock() -> TickingClock:
    return TickingClock()


@pytest.fixture
def crud(registry, clock) -> CrudEngine:
    return CrudEngine(registry, clock=clock)

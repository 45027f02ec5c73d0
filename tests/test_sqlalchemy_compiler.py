from __future__ import annotations

import pytest
from sqlalchemy import MetaData, select
from sqlalchemy.sql.elements import True_

from cqrs_ddd_crud.backends.sqlalchemy import (
    DEFAULT_SQLA_REGISTRY,
    SQLAlchemyTable,
    build_clauses,
    build_order_by,
    build_projection,
    build_sqla_filter,
    build_table,
)
from cqrs_ddd_crud.backends.sqlalchemy.operators import (
    EqualOperator,
    build_default_sqla_registry,
)
from cqrs_ddd_crud.backends.sqlalchemy.strategy import SQLAlchemyOperator
from cqrs_ddd_crud.exceptions import BackendError, ConfigurationError
from cqrs_ddd_crud.filtering import Predicate
from cqrs_ddd_crud.operators import FilterOperator
from cqrs_ddd_crud.planning import SortTerm
from cqrs_ddd_crud.schema import ColumnDescriptor, ColumnKind, ModelSchema


@pytest.fixture
def users() -> SQLAlchemyTable:
    schema = ModelSchema.append_only(
        "users", [ColumnDescriptor("age", ColumnKind.INTEGER)]
    )
    return SQLAlchemyTable(schema, build_table(schema, MetaData()))


def _sql(expr) -> str:
    return str(expr.compile())


@pytest.mark.parametrize(
    ("op", "value", "expected"),
    [
        (FilterOperator.EQ, 30, "users.age = :age_1"),
        (FilterOperator.NE, 30, "users.age != :age_1"),
        (FilterOperator.GT, 30, "users.age > :age_1"),
        (FilterOperator.GTE, 30, "users.age >= :age_1"),
        (FilterOperator.LT, 30, "users.age < :age_1"),
        (FilterOperator.LTE, 30, "users.age <= :age_1"),
        (FilterOperator.EQ, None, "users.age IS NULL"),
        (FilterOperator.NE, None, "users.age IS NOT NULL"),
    ],
)
def test_comparison_operators(users, op, value, expected):
    [clause] = build_clauses(users, [Predicate("age", op, value)])
    assert _sql(clause) == expected


def test_in_operator(users):
    [clause] = build_clauses(users, [Predicate("age", FilterOperator.IN, [1, 2])])
    assert "users.age IN" in _sql(clause)


def test_in_operator_wraps_scalar(users):
    clause = DEFAULT_SQLA_REGISTRY.apply(FilterOperator.IN, users.column("age"), 5)
    assert "users.age IN" in _sql(clause)


@pytest.mark.parametrize(
    "op", [FilterOperator.PREFIX, FilterOperator.SUFFIX, FilterOperator.SUBSTR]
)
def test_string_operators_are_case_insensitive(users, op):
    [clause] = build_clauses(users, [Predicate("name", op, "ann")])
    compiled = _sql(clause)
    assert "lower(users.name) LIKE" in compiled
    assert "ESCAPE" in compiled


def test_is_null_operator(users):
    [clause] = build_clauses(
        users, [Predicate("deleted_at", FilterOperator.IS_NULL, True)]
    )
    assert _sql(clause) == "users.deleted_at IS NULL"


def test_is_current_operator_is_correlated_not_exists(users):
    predicate = Predicate(
        "row_id", FilterOperator.IS_CURRENT, ("workspace_id", "id")
    )
    stmt = select(users.table.c.id).where(*build_clauses(users, [predicate]))
    compiled = _sql(stmt)

    assert "NOT" in compiled
    assert "EXISTS" in compiled
    assert "users AS users_newer" in compiled
    assert "users_newer.workspace_id = users.workspace_id" in compiled


def test_unknown_columns_are_ignored(users):
    clauses = build_clauses(
        users,
        [
            Predicate("bogus", FilterOperator.EQ, 1),
            Predicate("age", FilterOperator.GT, 1),
        ],
    )
    assert len(clauses) == 1


def test_build_sqla_filter_ands_clauses(users):
    expr = build_sqla_filter(
        users,
        [
            Predicate("age", FilterOperator.GT, 1),
            Predicate("name", FilterOperator.EQ, "Bob"),
        ],
    )
    assert _sql(expr) == "users.age > :age_1 AND users.name = :name_1"


def test_build_sqla_filter_empty_matches_everything(users):
    assert isinstance(build_sqla_filter(users, []), True_)


def test_order_by_and_projection(users):
    order = build_order_by(
        users, [SortTerm("name"), SortTerm("bogus"), SortTerm("age", descending=True)]
    )
    assert [_sql(o) for o in order] == ["users.name ASC", "users.age DESC"]

    assert [c.name for c in build_projection(users, ["id", "bogus", "name"])] == [
        "id",
        "name",
    ]
    assert len(build_projection(users, ["bogus"])) == len(users.table.c)


def test_unsupported_operator_raises(users):
    with pytest.raises(BackendError):
        DEFAULT_SQLA_REGISTRY.apply(
            "nope", users.column("age"), 1  # type: ignore[arg-type]
        )


def test_registry_rejects_duplicate_strategy():
    registry = build_default_sqla_registry()
    assert FilterOperator.IS_CURRENT in registry
    assert registry.supported_operators == frozenset(FilterOperator)

    with pytest.raises(BackendError, match="already has a strategy"):
        registry.register(EqualOperator())


def test_registry_replace_swaps_strategy(users):
    class CaseSensitivePrefix(SQLAlchemyOperator):
        @property
        def name(self) -> FilterOperator:
            return FilterOperator.PREFIX

        def apply(self, column, value):
            return column.startswith(value)

    registry = build_default_sqla_registry()
    registry.register(CaseSensitivePrefix(), replace=True)

    clause = registry.compile(
        Predicate("name", FilterOperator.PREFIX, "An"), users.column("name")
    )
    assert "lower" not in _sql(clause).lower()


# ---------------------------------------------------------------------------
# Table building
# ---------------------------------------------------------------------------


def test_build_table_columns_and_indexes(users):
    table = users.table

    assert [c.name for c in table.primary_key] == ["row_id"]
    assert table.c.deleted_at.nullable
    assert not table.c.name.nullable
    indexed = {tuple(c.name for c in index.columns) for index in table.indexes}
    assert {
        ("workspace_id",),
        ("id",),
        ("name",),
        ("deleted_at",),
        ("created_at",),
        ("updated_at",),
        ("workspace_id", "id"),
    } <= indexed


def test_build_table_twice_on_same_metadata_fails():
    metadata = MetaData()
    schema = ModelSchema.single_row("products")
    build_table(schema, metadata)
    with pytest.raises(ConfigurationError):
        build_table(schema, metadata)

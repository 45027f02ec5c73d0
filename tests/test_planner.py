from __future__ import annotations

import datetime

import pytest

from cqrs_ddd_crud.config import EngineConfig
from cqrs_ddd_crud.filtering import FilterParser, PaginationParser, Predicate
from cqrs_ddd_crud.operators import FilterOperator
from cqrs_ddd_crud.planning import QueryPlanner, SortTerm, parse_select, parse_sort
from cqrs_ddd_crud.schema import ColumnDescriptor, ColumnKind, ModelSchema

SCHEMA = ModelSchema.single_row(
    "people",
    [
        ColumnDescriptor("age", ColumnKind.INTEGER),
        ColumnDescriptor("score", ColumnKind.FLOAT),
        ColumnDescriptor("active", ColumnKind.BOOLEAN),
    ],
)

NEWEST_FIRST = (SortTerm("created_at", descending=True),)


def _plan(params, **kwargs):
    predicates, options = FilterParser().parse(params)
    return QueryPlanner(EngineConfig()).plan(SCHEMA, predicates, options, **kwargs)


# ---------------------------------------------------------------------------
# Pagination
# ---------------------------------------------------------------------------


@pytest.mark.parametrize(
    ("limit", "expected"),
    [
        (None, 10),
        (0, 1),
        (-5, 1),
        (1, 1),
        (50, 50),
        (100, 100),
        (101, 100),
        (10_000, 100),
        ("7", 7),
        ("7.9", 7),
        ("abc", 10),
    ],
)
def test_limit_clamped(limit, expected):
    assert PaginationParser().parse(1, limit).limit == expected


@pytest.mark.parametrize(
    ("page", "expected"),
    [(None, 1), (0, 1), (-3, 1), (1, 1), (4, 4), ("2", 2), ("x", 1)],
)
def test_page_floored(page, expected):
    assert PaginationParser().parse(page, 10).page == expected


def test_offset_from_page_and_limit():
    pagination = PaginationParser().parse(3, 5)
    assert pagination.offset == 10


def test_pagination_parser_rejects_bad_defaults():
    with pytest.raises(ValueError):
        PaginationParser(default_limit=200, max_limit=100)


# ---------------------------------------------------------------------------
# Predicates
# ---------------------------------------------------------------------------


def test_not_deleted_prepended():
    plan = _plan({"age_gt": 30, "name_substr": "ann"})

    assert [p.as_tuple() for p in plan.predicates] == [
        ("deleted_at", "is_null", True),
        ("age", "gt", 30),
        ("name", "substr", "ann"),
    ]


def test_deleted_true_skips_not_deleted():
    plan = _plan({"age_gt": 30, "name_substr": "ann", "deleted": "true"})

    assert len(plan.predicates) == 2
    assert plan.include_deleted is True


def test_unknown_fields_dropped():
    plan = _plan({"nope": 1, "age_lt": 5})

    assert [p.field for p in plan.predicates] == ["deleted_at", "age"]
    assert plan.dropped_terms == ("nope",)


def test_values_coerced_to_column_kind():
    plan = _plan(
        {
            "age_gte": "30",
            "score_lt": "2.5",
            "active": "true",
            "age_in": ["1", "2"],
            "created_at_gt": "2024-01-01T00:00:00+00:00",
        }
    )
    values = {p.field + "_" + p.operator.value: p.value for p in plan.predicates}

    assert values["age_gte"] == 30
    assert values["score_lt"] == 2.5
    assert values["active_eq"] is True
    assert values["age_in"] == [1, 2]
    assert values["created_at_gt"] == datetime.datetime(
        2024, 1, 1, tzinfo=datetime.timezone.utc
    )


def test_uncoercible_value_passes_through():
    plan = _plan({"age": "abc"})
    assert plan.predicates[-1].value == "abc"


def test_string_match_values_stay_text():
    plan = _plan({"age_prefix": 4})
    assert plan.predicates[-1] == Predicate("age", FilterOperator.PREFIX, "4")


def test_unparseable_timestamp_filters_dropped():
    plan = _plan(
        {
            "created_at_gte": "yesterday",
            "updated_at_in": ["2024-01-01", "soon"],
            "created_at_substr": "2024",
            "updated_at_lt": "2024-06-01T00:00:00Z",
        }
    )

    assert [p.as_tuple() for p in plan.predicates] == [
        ("deleted_at", "is_null", True),
        (
            "updated_at",
            "lt",
            datetime.datetime(2024, 6, 1, tzinfo=datetime.timezone.utc),
        ),
    ]
    assert plan.dropped_terms == ("created_at", "updated_at", "created_at")


def test_lifecycle_predicates_follow_soft_delete():
    scope = Predicate("workspace_id", FilterOperator.EQ, 1)
    plan = _plan({"age": 3}, lifecycle=[scope])

    assert plan.predicates[0].operator is FilterOperator.IS_NULL
    assert plan.predicates[1] == scope
    assert plan.predicates[2].field == "age"


def test_count_uses_same_predicates_as_plan():
    predicates, options = FilterParser().parse({"age_gt": "3", "bogus": 1})
    planner = QueryPlanner(EngineConfig())
    plan = planner.plan(SCHEMA, predicates, options)

    assert planner.plan_count(SCHEMA, predicates) == plan.predicates


# ---------------------------------------------------------------------------
# Sort / select
# ---------------------------------------------------------------------------


def test_no_sort_defaults_to_newest_created():
    assert _plan({}).order_by == NEWEST_FIRST


def test_sort_with_desc_prefix():
    terms = parse_sort("name,desc_age", SCHEMA, default_field="created_at")
    assert terms == (SortTerm("name"), SortTerm("age", descending=True))


@pytest.mark.parametrize("expression", ["bogus", "desc_bogus,other", ",", "desc_"])
def test_unresolvable_sort_falls_back(expression):
    terms = parse_sort(expression, SCHEMA, default_field="created_at")
    assert terms == NEWEST_FIRST


def test_sort_drops_only_unknown_terms():
    terms = parse_sort("bogus,desc_updated_at", SCHEMA, default_field="created_at")
    assert terms == (SortTerm("updated_at", descending=True),)


def test_select_defaults_to_all_fields():
    assert _plan({}).projection == SCHEMA.field_names


def test_select_restricts_and_drops_unknown():
    assert parse_select("id, name,bogus,name", SCHEMA) == ("id", "name")


def test_select_with_nothing_resolvable_returns_all():
    assert parse_select("bogus", SCHEMA) == SCHEMA.field_names


def test_plan_pagination_uses_config():
    config = EngineConfig(default_limit=25, max_limit=50)
    predicates, options = FilterParser().parse({"page": "2"})
    plan = QueryPlanner(config).plan(SCHEMA, predicates, options)
    assert (plan.page, plan.limit, plan.offset) == (2, 25, 25)

    predicates, options = FilterParser().parse({"limit": "500"})
    assert QueryPlanner(config).plan(SCHEMA, predicates, options).limit == 50

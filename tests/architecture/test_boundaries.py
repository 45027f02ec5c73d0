from pytest_archon import archrule


def test_filtering_independence() -> None:
    """
    Filtering turns request params into predicates.
    It knows nothing about plans, lifecycles or storage.
    """
    (
        archrule("filtering_is_independent")
        .match("cqrs_ddd_crud.filtering*")
        .should_not_import("cqrs_ddd_crud.planning*")
        .should_not_import("cqrs_ddd_crud.versioning*")
        .should_not_import("cqrs_ddd_crud.backends*")
        .should_not_import("cqrs_ddd_crud.engine")
        .should_not_import("sqlalchemy*")
        .check("cqrs_ddd_crud")
    )


def test_planning_layering() -> None:
    """
    Planning may use filtering and the schema, but stays backend-neutral.
    """
    (
        archrule("planning_layering")
        .match("cqrs_ddd_crud.planning*")
        .should_not_import("cqrs_ddd_crud.versioning*")
        .should_not_import("cqrs_ddd_crud.backends*")
        .should_not_import("cqrs_ddd_crud.engine")
        .should_not_import("sqlalchemy*")
        .check("cqrs_ddd_crud")
    )


def test_versioning_talks_to_ports_only() -> None:
    """
    Lifecycle stores reach storage through the backend port,
    never through a concrete backend.
    """
    (
        archrule("versioning_ports_only")
        .match("cqrs_ddd_crud.versioning*")
        .should_not_import("cqrs_ddd_crud.backends*")
        .should_not_import("cqrs_ddd_crud.engine")
        .should_not_import("sqlalchemy*")
        .check("cqrs_ddd_crud")
    )


def test_ports_layering() -> None:
    """
    Ports (interfaces) should not depend on backends (implementations).
    """
    (
        archrule("ports_layering")
        .match("cqrs_ddd_crud.ports*")
        .should_not_import("cqrs_ddd_crud.backends*")
        .should_not_import("sqlalchemy*")
        .check("cqrs_ddd_crud")
    )


def test_primitives_isolation() -> None:
    """
    Schema, operators and exceptions are the lowest level.
    """
    (
        archrule("primitives_isolation")
        .match("cqrs_ddd_crud.schema")
        .match("cqrs_ddd_crud.operators")
        .match("cqrs_ddd_crud.exceptions")
        .should_not_import("cqrs_ddd_crud.filtering*")
        .should_not_import("cqrs_ddd_crud.planning*")
        .should_not_import("cqrs_ddd_crud.versioning*")
        .should_not_import("cqrs_ddd_crud.backends*")
        .should_not_import("cqrs_ddd_crud.engine")
        .check("cqrs_ddd_crud")
    )

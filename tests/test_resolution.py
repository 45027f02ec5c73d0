from __future__ import annotations

import datetime

from cqrs_ddd_crud.schema import ModelSchema
from cqrs_ddd_crud.versioning import latest_per_entity, merge_data, pick_current

SCHEMA = ModelSchema.append_only("users")
T0 = datetime.datetime(2024, 1, 1, tzinfo=datetime.timezone.utc)


def _version(row_id, entity_id="e1", *, updated=0, created=0, workspace=1):
    return {
        "row_id": row_id,
        "workspace_id": workspace,
        "id": entity_id,
        "created_at": T0 + datetime.timedelta(seconds=created),
        "updated_at": T0 + datetime.timedelta(seconds=updated),
    }


def test_pick_current_empty():
    assert pick_current([], SCHEMA) is None


def test_pick_current_latest_updated_wins():
    rows = [
        _version("r1", updated=1),
        _version("r3", updated=3),
        _version("r2", updated=2),
    ]
    assert pick_current(rows, SCHEMA)["row_id"] == "r3"


def test_pick_current_ties_break_on_created_then_row_id():
    rows = [
        _version("r1", updated=5, created=1),
        _version("r2", updated=5, created=2),
    ]
    assert pick_current(rows, SCHEMA)["row_id"] == "r2"

    rows = [_version(r, updated=5) for r in ("b", "a", "c")]
    assert pick_current(rows, SCHEMA)["row_id"] == "c"
    assert pick_current(list(reversed(rows)), SCHEMA)["row_id"] == "c"


def test_latest_per_entity_keeps_one_row_per_id():
    rows = [
        _version("r1", "e1", updated=1),
        _version("r2", "e1", updated=4),
        _version("r3", "e2", updated=2),
        _version("r4", "e2", updated=3),
        _version("r5", "e3", updated=0),
    ]
    latest = latest_per_entity(rows, SCHEMA)

    assert [row["row_id"] for row in latest] == ["r2", "r4", "r5"]


def test_latest_per_entity_partitions_by_workspace():
    rows = [
        _version("r1", "e1", updated=1, workspace=1),
        _version("r2", "e1", updated=2, workspace=2),
    ]
    assert len(latest_per_entity(rows, SCHEMA)) == 2


def test_merge_data_is_shallow():
    previous = {"x": 1, "nested": {"a": 1, "b": 2}}
    merged = merge_data(previous, {"y": 2, "nested": {"a": 9}})

    assert merged == {"x": 1, "y": 2, "nested": {"a": 9}}
    assert previous == {"x": 1, "nested": {"a": 1, "b": 2}}


def test_merge_data_handles_missing_sides():
    assert merge_data(None, {"a": 1}) == {"a": 1}
    assert merge_data({"a": 1}, None) == {"a": 1}

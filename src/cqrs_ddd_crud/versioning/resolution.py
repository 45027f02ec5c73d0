"""
Current-version resolution over fetched rows.

Versions of one entity are totally ordered by ``updated_at``, then
``created_at``, then physical id. The greatest key wins, deleted or not:
a soft delete stamps ``updated_at`` on the row it marks, so a deleted
entity never falls back to an older active version.
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from ..schema import ModelSchema


def version_key(row: Mapping[str, Any], schema: ModelSchema) -> tuple[Any, ...]:
    return tuple(row.get(field) for field in schema.version_order)


def pick_current(
    rows: Iterable[Mapping[str, Any]],
    schema: ModelSchema,
) -> dict[str, Any] | None:
    """Return the newest row, or ``None`` if *rows* is empty."""
    current: Mapping[str, Any] | None = None
    current_key: tuple[Any, ...] | None = None
    for row in rows:
        key = version_key(row, schema)
        if current_key is None or key > current_key:
            current, current_key = row, key
    return dict(current) if current is not None else None


def latest_per_entity(
    rows: Iterable[Mapping[str, Any]],
    schema: ModelSchema,
) -> list[dict[str, Any]]:
    """
    Reduce *rows* to one row per logical entity, keeping the newest.

    The result is ordered newest first.
    """
    groups: dict[tuple[Any, ...], list[Mapping[str, Any]]] = {}
    for row in rows:
        identity = tuple(row.get(field) for field in schema.identity_fields)
        groups.setdefault(identity, []).append(row)
    latest = [pick_current(group, schema) for group in groups.values()]
    resolved = [row for row in latest if row is not None]
    resolved.sort(key=lambda row: version_key(row, schema), reverse=True)
    return resolved


def merge_data(
    previous: Mapping[str, Any] | None,
    patch: Mapping[str, Any] | None,
) -> dict[str, Any]:
    """Shallow merge: keys in *patch* override, other keys are kept."""
    merged = dict(previous or {})
    merged.update(patch or {})
    return merged

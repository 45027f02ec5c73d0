"""Lifecycle policies and current-version resolution."""

from __future__ import annotations

from typing import TYPE_CHECKING

from ..schema import LifecyclePolicy
from .append_only import AppendOnlyStore
from .base import Clock, LifecycleStore
from .resolution import latest_per_entity, merge_data, pick_current, version_key
from .single_row import SingleRowStore

if TYPE_CHECKING:
    from ..schema import ModelSchema

_STORES: dict[LifecyclePolicy, type[LifecycleStore]] = {
    LifecyclePolicy.SINGLE_ROW: SingleRowStore,
    LifecyclePolicy.APPEND_ONLY: AppendOnlyStore,
}


def store_class_for(schema: ModelSchema) -> type[LifecycleStore]:
    return _STORES[schema.policy]


__all__ = [
    "AppendOnlyStore",
    "Clock",
    "LifecycleStore",
    "SingleRowStore",
    "latest_per_entity",
    "merge_data",
    "pick_current",
    "store_class_for",
    "version_key",
]

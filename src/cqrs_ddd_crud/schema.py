"""
Explicit schema descriptors for registered models.

Every registered model is described once by a :class:`ModelSchema`: an
ordered mapping from logical field name to :class:`ColumnDescriptor`.
Field lookups are plain map accesses; a name that is not declared
resolves to ``None`` and callers ignore the term instead of failing.

Two lifecycle policies share the same standard shape:

- ``single_row``: one physical row per entity, ``id`` is both the
  physical and the logical identity.
- ``append_only``: every write inserts a new row; ``row_id`` is the
  physical identity, ``id`` the logical one, and all access is scoped by
  ``workspace_id``.
"""

from __future__ import annotations

import datetime
import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from .exceptions import ConfigurationError

logger = logging.getLogger(__name__)


class ColumnKind(str, Enum):
    TEXT = "text"
    INTEGER = "integer"
    FLOAT = "float"
    BOOLEAN = "boolean"
    TIMESTAMP = "timestamp"
    JSON = "json"


class LifecyclePolicy(str, Enum):
    SINGLE_ROW = "single_row"
    APPEND_ONLY = "append_only"


@dataclass(frozen=True)
class ColumnDescriptor:
    """A single declared column of a model table."""

    name: str
    kind: ColumnKind = ColumnKind.TEXT
    nullable: bool = True
    indexed: bool = False
    primary_key: bool = False


# Standard field names
ROW_ID = "row_id"
WORKSPACE_ID = "workspace_id"
ID = "id"
NAME = "name"
DATA = "data"
CREATED_AT = "created_at"
UPDATED_AT = "updated_at"
DELETED_AT = "deleted_at"

SYSTEM_FIELDS: frozenset[str] = frozenset(
    {ROW_ID, WORKSPACE_ID, ID, CREATED_AT, UPDATED_AT, DELETED_AT}
)


def _common_columns() -> list[ColumnDescriptor]:
    return [
        ColumnDescriptor(NAME, ColumnKind.TEXT, nullable=False, indexed=True),
        ColumnDescriptor(DATA, ColumnKind.JSON, nullable=False),
        ColumnDescriptor(
            CREATED_AT, ColumnKind.TIMESTAMP, nullable=False, indexed=True
        ),
        ColumnDescriptor(
            UPDATED_AT, ColumnKind.TIMESTAMP, nullable=False, indexed=True
        ),
        ColumnDescriptor(DELETED_AT, ColumnKind.TIMESTAMP, nullable=True, indexed=True),
    ]


@dataclass(frozen=True)
class ModelSchema:
    """
    Schema descriptor for one registered model.

    Use :meth:`single_row` or :meth:`append_only` rather than the
    constructor; they lay down the standard columns and validate any
    extra, model-specific columns.
    """

    table_name: str
    policy: LifecyclePolicy
    columns: Mapping[str, ColumnDescriptor]
    physical_id_field: str = ID
    id_field: str = ID
    scope_field: str | None = None
    extra_fields: tuple[str, ...] = field(default_factory=tuple)

    # -- construction -------------------------------------------------------

    @classmethod
    def single_row(
        cls,
        table_name: str,
        extra_columns: Iterable[ColumnDescriptor] = (),
    ) -> ModelSchema:
        standard = [
            ColumnDescriptor(ID, ColumnKind.TEXT, nullable=False, primary_key=True),
            *_common_columns(),
        ]
        return cls._build(
            table_name,
            LifecyclePolicy.SINGLE_ROW,
            standard,
            extra_columns,
            physical_id_field=ID,
            scope_field=None,
        )

    @classmethod
    def append_only(
        cls,
        table_name: str,
        extra_columns: Iterable[ColumnDescriptor] = (),
        *,
        scope_kind: ColumnKind = ColumnKind.INTEGER,
    ) -> ModelSchema:
        standard = [
            ColumnDescriptor(ROW_ID, ColumnKind.TEXT, nullable=False, primary_key=True),
            ColumnDescriptor(WORKSPACE_ID, scope_kind, nullable=False, indexed=True),
            ColumnDescriptor(ID, ColumnKind.TEXT, nullable=False, indexed=True),
            *_common_columns(),
        ]
        return cls._build(
            table_name,
            LifecyclePolicy.APPEND_ONLY,
            standard,
            extra_columns,
            physical_id_field=ROW_ID,
            scope_field=WORKSPACE_ID,
        )

    @classmethod
    def _build(
        cls,
        table_name: str,
        policy: LifecyclePolicy,
        standard: list[ColumnDescriptor],
        extra_columns: Iterable[ColumnDescriptor],
        *,
        physical_id_field: str,
        scope_field: str | None,
    ) -> ModelSchema:
        if not table_name:
            raise ConfigurationError("table_name is required")
        columns: dict[str, ColumnDescriptor] = {c.name: c for c in standard}
        extras: list[str] = []
        for col in extra_columns:
            if col.name in columns or col.name in SYSTEM_FIELDS:
                raise ConfigurationError(
                    f"Column {col.name!r} clashes with a standard column "
                    f"of {table_name!r}"
                )
            if col.primary_key:
                raise ConfigurationError(
                    f"Extra column {col.name!r} cannot be a primary key"
                )
            columns[col.name] = col
            extras.append(col.name)
        return cls(
            table_name=table_name,
            policy=policy,
            columns=MappingProxyType(columns),
            physical_id_field=physical_id_field,
            id_field=ID,
            scope_field=scope_field,
            extra_fields=tuple(extras),
        )

    # -- lookups ------------------------------------------------------------

    def resolve(self, field_name: str) -> ColumnDescriptor | None:
        """Return the column for *field_name*, or ``None`` if undeclared."""
        return self.columns.get(field_name)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(self.columns)

    @property
    def is_append_only(self) -> bool:
        return self.policy is LifecyclePolicy.APPEND_ONLY

    @property
    def version_order(self) -> tuple[str, ...]:
        """Fields that totally order the versions of one entity, newest last."""
        return (UPDATED_AT, CREATED_AT, self.physical_id_field)

    @property
    def identity_fields(self) -> tuple[str, ...]:
        """Fields that together name one logical entity."""
        if self.scope_field is None:
            return (self.id_field,)
        return (self.scope_field, self.id_field)

    def coerce(self, field_name: str, value: Any) -> Any:
        """Coerce *value* to the declared kind of *field_name*, if possible."""
        column = self.resolve(field_name)
        if column is None:
            return value
        return coerce_value(value, column.kind)


# ---------------------------------------------------------------------------
# Value coercion
# ---------------------------------------------------------------------------


def coerce_value(value: Any, kind: ColumnKind) -> Any:
    """
    Cast *value* to the Python type matching *kind*.

    Lists are cast item by item. A value that cannot be cast is returned
    unchanged; the backend decides what to do with it.
    """
    if isinstance(value, list | tuple):
        return [coerce_value(item, kind) for item in value]
    if value is None:
        return None
    try:
        return _cast(value, kind)
    except (TypeError, ValueError):
        logger.debug("Could not coerce %r to %s; passing through", value, kind.value)
        return value


def _cast(value: Any, kind: ColumnKind) -> Any:
    if kind is ColumnKind.INTEGER:
        return int(value)
    if kind is ColumnKind.FLOAT:
        return float(value)
    if kind is ColumnKind.BOOLEAN:
        return parse_bool(value)
    if kind is ColumnKind.TIMESTAMP:
        return parse_timestamp(value)
    if kind is ColumnKind.TEXT:
        return value if isinstance(value, str) else str(value)
    return value


def parse_timestamp(value: Any) -> datetime.datetime:
    """
    Parse an ISO-8601 timestamp, including the ``Z`` suffix.

    Raises:
        ValueError: If *value* is not an ISO-8601 timestamp.
    """
    if isinstance(value, datetime.datetime):
        return value
    text = str(value).strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    return datetime.datetime.fromisoformat(text)


def parse_bool(value: Any) -> bool:
    """Interpret request-style booleans (``"true"``, ``"1"``, ``"yes"``)."""
    if isinstance(value, bool):
        return value
    if isinstance(value, str):
        return value.strip().lower() in ("true", "1", "yes")
    return bool(value)

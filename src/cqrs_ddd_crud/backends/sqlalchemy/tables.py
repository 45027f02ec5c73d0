"""
Build ``sqlalchemy.Table`` objects from :class:`ModelSchema` descriptors.

Single-column indexes follow ``ColumnDescriptor.indexed``. Append-only
tables also get a composite ``(workspace_id, id)`` index, the access path
of every current-version lookup.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from sqlalchemy import Boolean, Column, Float, Index, Integer, MetaData, String, Table

from ...exceptions import ConfigurationError
from ...schema import ColumnKind
from .types import JSONType, UTCDateTime

if TYPE_CHECKING:
    from ...schema import ColumnDescriptor, ModelSchema

_TYPE_MAP: dict[ColumnKind, Any] = {
    ColumnKind.TEXT: String,
    ColumnKind.INTEGER: Integer,
    ColumnKind.FLOAT: Float,
    ColumnKind.BOOLEAN: Boolean,
    ColumnKind.TIMESTAMP: UTCDateTime,
    ColumnKind.JSON: JSONType,
}


@dataclass(frozen=True)
class SQLAlchemyTable:
    """Table handle returned by :meth:`SQLAlchemyBackend.bind`."""

    schema: ModelSchema
    table: Table

    def has_column(self, field_name: str) -> bool:
        return field_name in self.table.c

    def column(self, field_name: str) -> Any | None:
        """Return the column for *field_name*, or ``None`` if undeclared."""
        return self.table.c.get(field_name)


def _build_column(descriptor: ColumnDescriptor) -> Column[Any]:
    return Column(
        descriptor.name,
        _TYPE_MAP[descriptor.kind](),
        primary_key=descriptor.primary_key,
        nullable=descriptor.nullable and not descriptor.primary_key,
        index=descriptor.indexed or None,
    )


def build_table(schema: ModelSchema, metadata: MetaData) -> Table:
    """Create the ``Table`` for *schema* inside *metadata*."""
    if schema.table_name in metadata.tables:
        raise ConfigurationError(
            f"Table {schema.table_name!r} is already bound on this backend"
        )
    table = Table(
        schema.table_name,
        metadata,
        *(_build_column(c) for c in schema.columns.values()),
    )
    if schema.scope_field is not None:
        Index(
            f"ix_{schema.table_name}_scope_identity",
            table.c[schema.scope_field],
            table.c[schema.id_field],
        )
    return table

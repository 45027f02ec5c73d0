"""Dialect-aware column types used by generated tables."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any

from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.types import JSON, DateTime, TypeDecorator

from ...schema import parse_timestamp


class JSONType(TypeDecorator[Any]):
    """Type of the ``data`` document: JSONB on PostgreSQL, plain JSON elsewhere."""

    impl = JSON
    cache_ok = True

    def load_dialect_impl(self, dialect: Any) -> Any:
        if dialect.name == "postgresql":
            return dialect.type_descriptor(JSONB())
        return dialect.type_descriptor(JSON())


class UTCDateTime(TypeDecorator[datetime]):
    """
    Timezone-aware timestamp.

    Values (datetimes or ISO-8601 strings) are normalised to UTC on the
    way in. Dialects that store naive timestamps (SQLite) get UTC attached
    on the way out, so every row a backend returns carries aware datetimes.
    """

    impl = DateTime(timezone=True)
    cache_ok = True

    def process_bind_param(self, value: datetime | str | None, dialect: Any) -> Any:
        if value is None:
            return None
        if isinstance(value, str):
            value = parse_timestamp(value)
        if value.tzinfo is not None:
            value = value.astimezone(timezone.utc)
            if dialect.name == "sqlite":
                value = value.replace(tzinfo=None)
        return value

    def process_result_value(self, value: datetime | None, dialect: Any) -> Any:
        if value is None:
            return None
        if value.tzinfo is None:
            return value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc)

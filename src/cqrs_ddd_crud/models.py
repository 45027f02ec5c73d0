"""
Pydantic models for entity records and write payloads.

Payloads are validated before any backend I/O; failures surface as
:class:`~cqrs_ddd_crud.exceptions.PayloadValidationError` with
``{field: [messages]}`` errors.
"""

from __future__ import annotations

import datetime
from collections.abc import Mapping
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, JsonValue
from pydantic import ValidationError as PydanticValidationError
from typing_extensions import TypeVar

from .exceptions import PayloadValidationError
from .schema import DATA, NAME

M = TypeVar("M", bound=BaseModel)


class Entity(BaseModel):
    """
    One entity record as returned by the engine.

    Every field is optional so that projected list results (``select=``)
    validate too; point lookups always carry the full row. Model-specific
    extra columns are kept as extra attributes.
    """

    model_config = ConfigDict(extra="allow")

    id: str | None = None
    name: str | None = None
    data: dict[str, Any] | None = None
    created_at: datetime.datetime | None = None
    updated_at: datetime.datetime | None = None
    deleted_at: datetime.datetime | None = None
    row_id: str | None = None
    workspace_id: Any = None

    @classmethod
    def from_row(cls, row: Mapping[str, Any]) -> Entity:
        return cls.model_validate(dict(row))

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    def to_dict(self) -> dict[str, Any]:
        """Serialisable mapping of the fields the row actually carried."""
        return self.model_dump(mode="json", exclude_unset=True)


class CreatePayload(BaseModel):
    model_config = ConfigDict(extra="allow")

    name: str = Field(min_length=1)
    data: dict[str, JsonValue] = Field(default_factory=dict)


class UpdatePatch(BaseModel):
    """Fields left out of the patch are copied forward unchanged."""

    model_config = ConfigDict(extra="allow")

    name: str | None = Field(default=None, min_length=1)
    data: dict[str, JsonValue] | None = None

    def to_patch(self) -> dict[str, Any]:
        patch = self.model_dump(exclude_unset=True)
        for field in (NAME, DATA):
            if field in patch and patch[field] is None:
                del patch[field]
        return patch


def validate_payload(model_cls: type[M], payload: Any) -> M:
    """Validate *payload* into *model_cls*, raising PayloadValidationError."""
    if isinstance(payload, model_cls):
        return payload
    if isinstance(payload, BaseModel):
        payload = payload.model_dump(exclude_unset=True)
    try:
        return model_cls.model_validate(payload)
    except PydanticValidationError as exc:
        raise PayloadValidationError(errors_from_pydantic(exc)) from exc


def errors_from_pydantic(exc: PydanticValidationError) -> dict[str, list[str]]:
    errors: dict[str, list[str]] = {}
    for error in exc.errors():
        loc = ".".join(str(p) for p in error.get("loc", ())) or "__root__"
        msg = error.get("msg", "validation error")
        errors.setdefault(loc, []).append(msg)
    return errors

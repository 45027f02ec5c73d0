"""Engine configuration and backend URL handling."""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field, model_validator

from .exceptions import ConfigurationError
from .filtering.parser import RESERVED_KEYS
from .schema import CREATED_AT


class EngineConfig(BaseModel):
    """Immutable settings for a :class:`~cqrs_ddd_crud.engine.CrudEngine`.

    Constructed once at start-up and passed explicitly; nothing here is
    read from the environment.
    """

    model_config = ConfigDict(frozen=True)

    default_limit: int = Field(default=10, ge=1)
    max_limit: int = Field(default=100, ge=1)
    reserved_keys: frozenset[str] = RESERVED_KEYS
    default_sort_field: str = CREATED_AT
    legacy_prefix_operators: bool = False

    @model_validator(mode="after")
    def _check_limits(self) -> EngineConfig:
        if self.default_limit > self.max_limit:
            raise ValueError("default_limit must not exceed max_limit")
        return self


_POSTGRES_SCHEMES = ("postgres://", "postgresql://")


def resolve_database_url(url: str) -> str:
    """
    Map a connection URL onto an async SQLAlchemy URL.

    - ``postgres://`` / ``postgresql://`` -> ``postgresql+asyncpg://``
    - ``sqlite://``, ``file:`` or a path ending in ``.db`` -> ``sqlite+aiosqlite``
    - URLs that already name an async driver pass through.
    """
    if "+asyncpg://" in url or "+aiosqlite://" in url:
        return url
    for scheme in _POSTGRES_SCHEMES:
        if url.startswith(scheme):
            return "postgresql+asyncpg://" + url[len(scheme) :]
    if url.startswith("sqlite://"):
        return "sqlite+aiosqlite://" + url[len("sqlite://") :]
    if url.startswith("file:"):
        return "sqlite+aiosqlite:///" + url[len("file:") :]
    if url.endswith(".db"):
        return "sqlite+aiosqlite:///" + url
    raise ConfigurationError(
        "Unsupported database dialect. Use postgres://, sqlite:// or a .db file"
    )

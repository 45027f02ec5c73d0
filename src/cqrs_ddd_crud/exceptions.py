"""Exceptions for the CRUD engine."""

from __future__ import annotations


class CrudError(Exception):
    """Root exception for the entire cqrs-ddd-crud package."""


# ── Configuration ────────────────────────────────────────────────────


class ConfigurationError(CrudError):
    """Base class for deterministic set-up errors.

    Always raised before any backend I/O happens.
    """


class ModelNotRegisteredError(ConfigurationError):
    """Raised when an operation names a model that was never registered."""

    def __init__(self, model_name: str) -> None:
        self.model_name = model_name
        super().__init__(
            f"Model {model_name!r} is not registered. Use register() first."
        )


class DuplicateModelError(ConfigurationError):
    """Raised when a model name is registered twice."""


class RegistryFrozenError(ConfigurationError):
    """Raised when registering a model after the registry was frozen.

    Registration belongs to the start-up phase; once the registry is
    frozen it only serves lookups.
    """


class ScopeRequiredError(ConfigurationError):
    """Raised when a workspace-scoped model is used without a scope key."""

    def __init__(self, model_name: str, scope_field: str) -> None:
        self.model_name = model_name
        self.scope_field = scope_field
        super().__init__(
            f"Model {model_name!r} is scoped by {scope_field!r}; "
            "a scope key is required"
        )


# ── Validation ───────────────────────────────────────────────────────


class PayloadValidationError(CrudError):
    """Raised when a create/update payload fails validation.

    Carries structured errors: ``{field: [messages]}``.
    """

    def __init__(self, errors: dict[str, list[str]] | str | None = None) -> None:
        if isinstance(errors, str):
            self.errors: dict[str, list[str]] = {"__root__": [errors]}
        elif errors is None:
            self.errors = {}
        else:
            self.errors = errors
        super().__init__(str(self.errors))


class FilterParseError(CrudError):
    """Raised when a predicate cannot be serialised back to a request key."""


# ── Backend ──────────────────────────────────────────────────────────


class BackendError(CrudError):
    """Base class for failures raised by a backend adapter itself.

    Driver exceptions (connectivity, constraint violations) are not
    wrapped; they reach the caller unchanged.
    """


__all__: list[str] = [
    "BackendError",
    "ConfigurationError",
    "CrudError",
    "DuplicateModelError",
    "FilterParseError",
    "ModelNotRegisteredError",
    "PayloadValidationError",
    "RegistryFrozenError",
    "ScopeRequiredError",
]

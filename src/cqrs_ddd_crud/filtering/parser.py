"""FilterParser — flat request params -> predicates + request options."""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from typing import Any, NamedTuple

from ..operators import FilterOperator
from ..schema import parse_bool
from .predicate import Predicate
from .syntax import KeySyntax, SuffixKeySyntax

RESERVED_KEYS: frozenset[str] = frozenset(
    {"page", "limit", "sort", "select", "deleted"}
)


class RequestOptions(NamedTuple):
    """Control parameters lifted out of the request, unclamped."""

    page: Any
    limit: Any
    sort: str | None
    select: str | None
    include_deleted: bool


class FilterParser:
    """Parse a flat mapping of request params into predicates.

    Every key that is not reserved becomes one predicate; the operator is
    inferred from the key by the configured :class:`KeySyntax`. Nothing
    is rejected here: ``in`` values are wrapped into lists and other list
    values collapse to their last element.
    """

    def __init__(
        self,
        syntax: KeySyntax | None = None,
        reserved_keys: Iterable[str] = RESERVED_KEYS,
    ) -> None:
        self._syntax = syntax or SuffixKeySyntax()
        self._reserved = frozenset(reserved_keys)

    @property
    def syntax(self) -> KeySyntax:
        return self._syntax

    def parse(
        self, query_params: Mapping[str, Any]
    ) -> tuple[list[Predicate], RequestOptions]:
        """Return ``(predicates, request_options)``."""
        return self.parse_predicates(query_params), self.parse_options(query_params)

    def parse_predicates(self, query_params: Mapping[str, Any]) -> list[Predicate]:
        predicates: list[Predicate] = []
        for key, value in query_params.items():
            if key in self._reserved:
                continue
            field, op = self._syntax.split_key(key)
            predicates.append(Predicate(field, op, self._normalise_value(op, value)))
        return predicates

    def parse_options(self, query_params: Mapping[str, Any]) -> RequestOptions:
        return RequestOptions(
            page=self._scalar(query_params.get("page")),
            limit=self._scalar(query_params.get("limit")),
            sort=self._text(query_params.get("sort")),
            select=self._text(query_params.get("select")),
            include_deleted=parse_bool(self._scalar(query_params.get("deleted"))),
        )

    # -- helpers ------------------------------------------------------------

    @staticmethod
    def _normalise_value(op: FilterOperator, value: Any) -> Any:
        if op is FilterOperator.IN:
            if isinstance(value, list | tuple | set | frozenset):
                return list(value)
            return [value]
        return FilterParser._scalar(value)

    @staticmethod
    def _scalar(value: Any) -> Any:
        if isinstance(value, list | tuple):
            return value[-1] if value else None
        return value

    @staticmethod
    def _text(value: Any) -> str | None:
        value = FilterParser._scalar(value)
        if value is None:
            return None
        text = str(value).strip()
        return text or None

"""QueryStringBuilder — predicates + options -> request params / query string."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any
from urllib.parse import parse_qs, urlencode

from .predicate import Predicate
from .syntax import KeySyntax, SuffixKeySyntax


class QueryStringBuilder:
    """Serialise predicates back into the flat request-param form.

    Equality serialises as the bare field name, every other operator as
    ``<field>_<operator>``. Feeding the result to :class:`FilterParser`
    yields the same predicates. Two predicates that share a key collapse
    to the later one.
    """

    def __init__(self, syntax: KeySyntax | None = None) -> None:
        self._syntax = syntax or SuffixKeySyntax()

    def build_params(
        self,
        predicates: Sequence[Predicate] = (),
        *,
        page: int | None = None,
        limit: int | None = None,
        sort: str | None = None,
        select: str | None = None,
        include_deleted: bool = False,
    ) -> dict[str, Any]:
        params: dict[str, Any] = {}
        for predicate in predicates:
            key = self._syntax.join_key(predicate.field, predicate.operator)
            params[key] = predicate.value
        if page is not None:
            params["page"] = page
        if limit is not None:
            params["limit"] = limit
        if sort:
            params["sort"] = sort
        if select:
            params["select"] = select
        if include_deleted:
            params["deleted"] = "true"
        return params

    def build(self, predicates: Sequence[Predicate] = (), **options: Any) -> str:
        """Produce a url-encoded query string (e.g. for pagination links)."""
        params = self.build_params(predicates, **options)
        return urlencode(params, doseq=True) if params else ""


def parse_query_string(text: str) -> dict[str, Any]:
    """Decode *text* into flat params; repeated keys become lists."""
    parsed = parse_qs(text.lstrip("?"), keep_blank_values=True)
    return {
        key: values[0] if len(values) == 1 else values
        for key, values in parsed.items()
    }

"""KeySyntax — how operators are encoded in request-parameter keys."""

from __future__ import annotations

import re

from ..exceptions import FilterParseError
from ..operators import REQUEST_OPERATORS, FilterOperator

# Most specific suffix first: ``_lte`` must win over ``_lt``.
_SUFFIX_ORDER: tuple[FilterOperator, ...] = (
    FilterOperator.PREFIX,
    FilterOperator.SUFFIX,
    FilterOperator.SUBSTR,
    FilterOperator.LTE,
    FilterOperator.GTE,
    FilterOperator.NE,
    FilterOperator.LT,
    FilterOperator.GT,
    FilterOperator.IN,
)

_LEGACY_PREFIX_RE = re.compile(
    r"^(eq|ne|gte|gt|lte|lt|in|prefix|suffix|substr)_(.+)$"
)


class KeySyntax:
    """Base for request-key syntaxes."""

    def split_key(self, key: str) -> tuple[str, FilterOperator]:
        """Return ``(field, operator)`` encoded by *key*."""
        raise NotImplementedError

    def join_key(self, field: str, operator: FilterOperator) -> str:
        """Return the request key that :meth:`split_key` maps back to *field*."""
        raise NotImplementedError


class SuffixKeySyntax(KeySyntax):
    """Parse ``<field>_<op>`` keys; a bare key means equality."""

    def split_key(self, key: str) -> tuple[str, FilterOperator]:
        for op in _SUFFIX_ORDER:
            suffix = f"_{op.value}"
            if key.endswith(suffix) and len(key) > len(suffix):
                return key[: -len(suffix)], op
        return key, FilterOperator.EQ

    def join_key(self, field: str, operator: FilterOperator) -> str:
        if operator not in REQUEST_OPERATORS:
            raise FilterParseError(
                f"Operator {operator.value!r} has no request-key form"
            )
        if operator is FilterOperator.EQ:
            return field
        return f"{field}_{operator.value}"


class LegacyPrefixKeySyntax(SuffixKeySyntax):
    """
    Also accept the older ``<op>_<field>`` form (``gt_age``).

    The suffix form is tried first and always wins. Keys are still
    serialised in the suffix form.
    """

    def split_key(self, key: str) -> tuple[str, FilterOperator]:
        field, op = super().split_key(key)
        if op is not FilterOperator.EQ:
            return field, op
        match = _LEGACY_PREFIX_RE.match(key)
        if match:
            return match.group(2), FilterOperator(match.group(1))
        return key, FilterOperator.EQ

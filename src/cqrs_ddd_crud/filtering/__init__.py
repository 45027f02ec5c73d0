"""Request-param filtering — predicates, key syntax, pagination."""

from __future__ import annotations

from .pagination import Pagination, PaginationParser
from .parser import RESERVED_KEYS, FilterParser, RequestOptions
from .predicate import Predicate
from .query_string import QueryStringBuilder, parse_query_string
from .syntax import KeySyntax, LegacyPrefixKeySyntax, SuffixKeySyntax

__all__ = [
    "RESERVED_KEYS",
    "FilterParser",
    "KeySyntax",
    "LegacyPrefixKeySyntax",
    "Pagination",
    "PaginationParser",
    "Predicate",
    "QueryStringBuilder",
    "RequestOptions",
    "SuffixKeySyntax",
    "parse_query_string",
]

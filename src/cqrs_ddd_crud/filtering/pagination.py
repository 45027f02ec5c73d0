"""PaginationParser — page/limit from query params, always clamped."""

from __future__ import annotations

from typing import Any, NamedTuple


class Pagination(NamedTuple):
    page: int
    limit: int
    offset: int


class PaginationParser:
    """Parse ``page``/``limit`` into a clamped :class:`Pagination`.

    ``page`` floors to 1 and ``limit`` clamps to ``[1, max_limit]`` for
    every input, including negative, zero, missing and non-numeric ones.
    """

    def __init__(self, *, default_limit: int = 10, max_limit: int = 100) -> None:
        if not 1 <= default_limit <= max_limit:
            raise ValueError("default_limit must be within [1, max_limit]")
        self.default_limit = default_limit
        self.max_limit = max_limit

    def parse(self, page: Any = None, limit: Any = None) -> Pagination:
        page_num = self._int_param(page)
        page_num = 1 if page_num is None else max(1, page_num)
        limit_num = self._int_param(limit)
        if limit_num is None:
            limit_num = self.default_limit
        limit_num = min(self.max_limit, max(1, limit_num))
        return Pagination(
            page=page_num, limit=limit_num, offset=(page_num - 1) * limit_num
        )

    @staticmethod
    def _int_param(v: Any) -> int | None:
        if v is None or isinstance(v, bool):
            return None
        try:
            return int(v)
        except (TypeError, ValueError):
            pass
        try:
            return int(float(v))
        except (TypeError, ValueError, OverflowError):
            return None

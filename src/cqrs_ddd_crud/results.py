"""Result wrappers for read paths."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .models import Entity


@dataclass(frozen=True)
class ListResult:
    """
    Page of entities plus the total matching count.

    A failed read still returns a ``ListResult``: ``success`` is ``False``,
    the page is empty and ``error`` holds the backend exception. Callers
    that only look at ``records``/``record_count`` see an empty result.
    """

    records: list[Entity] = field(default_factory=list)
    record_count: int = 0
    page: int = 1
    limit: int = 10
    success: bool = True
    error: BaseException | None = None

    @property
    def pages(self) -> int:
        if self.limit <= 0:
            return 0
        return math.ceil(self.record_count / self.limit)

    @classmethod
    def failed(
        cls, error: BaseException, *, page: int = 1, limit: int = 10
    ) -> ListResult:
        return cls(page=page, limit=limit, success=False, error=error)

    def to_dict(self) -> dict[str, Any]:
        return {
            "records": [record.to_dict() for record in self.records],
            "record_count": self.record_count,
        }

    def __len__(self) -> int:
        return len(self.records)

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Generic, Sequence, TypeVar

from ..core.constants import DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE
from ..core.exceptions import ValidationError

T = TypeVar("T")


@dataclass(frozen=True)
class PageRequest:
    page: int = 1
    limit: int = DEFAULT_PAGE_SIZE

    @property
    def offset(self) -> int:
        return (self.page - 1) * self.limit

    @classmethod
    def parse(cls, page: Any, limit: Any, *, default_limit: int = DEFAULT_PAGE_SIZE, max_limit: int = MAX_PAGE_SIZE) -> "PageRequest":
        try:
            p = int(page) if page not in (None, "") else 1
            n = int(limit) if limit not in (None, "") else default_limit
        except (TypeError, ValueError):
            raise ValidationError("page and limit must be whole numbers")
        if p < 1 or n < 1:
            raise ValidationError("page and limit must be positive")
        return cls(page=p, limit=min(n, max_limit))


@dataclass(frozen=True)
class Page(Generic[T]):
    items: Sequence[T]
    total: int
    page: int
    limit: int

    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0

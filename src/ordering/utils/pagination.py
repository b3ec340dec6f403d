"""Page slicing for admin lists and dashboard widgets."""

import math
from dataclasses import dataclass, field
from typing import Generic, TypeVar

T = TypeVar("T")


@dataclass(frozen=True)
class Page(Generic[T]):
    items: list[T] = field(default_factory=list)
    page: int = 1
    per_page: int = 10
    total_items: int = 0
    total_pages: int = 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    @property
    def has_previous(self) -> bool:
        return self.page > 1


def paginate(items: list[T], page: int = 1, per_page: int = 10) -> Page[T]:
    """Slice ``items`` into one page. Out-of-range pages are clamped."""
    per_page = max(1, per_page)
    total_pages = max(1, math.ceil(len(items) / per_page))
    page = min(max(1, page), total_pages)
    start = (page - 1) * per_page
    return Page(
        items=list(items[start : start + per_page]),
        page=page,
        per_page=per_page,
        total_items=len(items),
        total_pages=total_pages,
    )

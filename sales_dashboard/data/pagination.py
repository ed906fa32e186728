from __future__ import annotations

import math
from dataclasses import dataclass


@dataclass(frozen=True)
class PageWindow:
    """Slice of the filtered, sorted set to return, plus page metadata."""
    skip: int
    limit: int
    total_pages: int
    has_next_page: bool
    has_previous_page: bool


def page_offset(page: int, page_size: int) -> int:
    return max(0, (page - 1) * page_size)


def paginate(total_items: int, page: int, page_size: int) -> PageWindow:
    """Window for `page` over `total_items` records.

    A page past the end yields a window that slices to nothing.
    """
    if page_size <= 0:
        raise ValueError(f"page_size must be positive, got {page_size}")
    skip = page_offset(page, page_size)
    return PageWindow(
        skip=skip,
        limit=page_size,
        total_pages=math.ceil(total_items / page_size) if total_items > 0 else 0,
        has_next_page=skip + page_size < total_items,
        has_previous_page=page > 1,
    )

"""
Page arithmetic for the book listing, plus the browse state a client keeps
while paging through search results.
"""

from __future__ import annotations

import math
from dataclasses import dataclass


def page_count(total: int, page_size: int) -> int:
    if page_size < 1:
        raise ValueError("page_size must be positive")
    return math.ceil(max(total, 0) / page_size)


def clamp_page(page: int, total_pages: int) -> int:
    """Keep ``page`` inside ``[1, total_pages]``; page 1 always exists."""
    return min(max(page, 1), max(total_pages, 1))


def page_bounds(page: int, page_size: int) -> tuple[int, int]:
    """Return ``(offset, limit)`` for a 1-based page."""
    return (page - 1) * page_size, page_size


@dataclass
class BrowseState:
    """Query and page the listing view is showing.

    Changing the query starts over at page 1. Moving outside the known page
    range does nothing.
    """

    page_size: int
    query: str = ""
    page: int = 1
    total: int = 0

    @property
    def total_pages(self) -> int:
        return page_count(self.total, self.page_size)

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.total_pages

    def search(self, query: str) -> None:
        self.query = query
        self.page = 1

    def update_total(self, total: int) -> None:
        self.total = total
        self.page = clamp_page(self.page, self.total_pages)

    def go_to(self, page: int) -> None:
        self.page = clamp_page(page, self.total_pages)

    def next_page(self) -> None:
        self.go_to(self.page + 1)

    def previous_page(self) -> None:
        self.go_to(self.page - 1)

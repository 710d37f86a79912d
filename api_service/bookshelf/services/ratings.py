"""Rating aggregation — mean star rating and review count, computed on read."""

from __future__ import annotations

from collections import defaultdict
from dataclasses import dataclass
from typing import Iterable


@dataclass(frozen=True)
class RatingSummary:
    average: float
    count: int


EMPTY_SUMMARY = RatingSummary(average=0.0, count=0)


def summarize_ratings(ratings: Iterable[int]) -> RatingSummary:
    """Arithmetic mean of ``ratings``; 0.0 when there are none."""
    values = list(ratings)
    if not values:
        return EMPTY_SUMMARY
    return RatingSummary(average=sum(values) / len(values), count=len(values))


def summarize_by_book(rows: Iterable[tuple[int, int]]) -> dict[int, RatingSummary]:
    """Group ``(book_id, rating)`` rows into one summary per book.

    Books with no rows are absent from the result; callers fall back to
    ``EMPTY_SUMMARY``.
    """
    grouped: dict[int, list[int]] = defaultdict(list)
    for book_id, rating in rows:
        grouped[book_id].append(rating)
    return {book_id: summarize_ratings(values) for book_id, values in grouped.items()}

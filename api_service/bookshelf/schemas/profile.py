"""Profile aggregate schemas."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel

from bookshelf.schemas.book import BookSummary


class ProfileReview(BaseModel):
    id: int
    book_id: int
    book_title: str
    rating: int
    review_text: str
    created_at: datetime


class ProfileStats(BaseModel):
    books_added: int
    reviews_written: int
    average_rating_given: float


class ProfileResponse(BaseModel):
    id: int
    name: str
    stats: ProfileStats
    books: list[BookSummary]
    reviews: list[ProfileReview]

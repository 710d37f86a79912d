"""Query helpers shared by the book, review and profile routers."""

from __future__ import annotations

from typing import Iterable, Optional

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.errors import NotFoundError
from bookshelf.models.book import Book
from bookshelf.models.profile import Profile
from bookshelf.models.review import Review
from bookshelf.schemas.book import BookSummary
from bookshelf.services.ratings import EMPTY_SUMMARY, RatingSummary, summarize_by_book


async def get_book_or_404(db: AsyncSession, book_id: int) -> Book:
    result = await db.execute(select(Book).where(Book.id == book_id))
    book = result.scalar_one_or_none()
    if book is None:
        raise NotFoundError("Book")
    return book


async def get_review_or_404(db: AsyncSession, review_id: int) -> Review:
    result = await db.execute(select(Review).where(Review.id == review_id))
    review = result.scalar_one_or_none()
    if review is None:
        raise NotFoundError("Review")
    return review


async def find_user_review(db: AsyncSession, book_id: int, user_id: int) -> Optional[Review]:
    result = await db.execute(
        select(Review).where(Review.book_id == book_id, Review.user_id == user_id)
    )
    return result.scalar_one_or_none()


async def load_rating_summaries(
    db: AsyncSession, book_ids: Iterable[int]
) -> dict[int, RatingSummary]:
    """Average rating and review count for each of ``book_ids``."""
    ids = list(book_ids)
    if not ids:
        return {}
    result = await db.execute(
        select(Review.book_id, Review.rating).where(Review.book_id.in_(ids))
    )
    return summarize_by_book(result.all())


async def profile_name(db: AsyncSession, user_id: int) -> Optional[str]:
    result = await db.execute(select(Profile.name).where(Profile.id == user_id))
    return result.scalar_one_or_none()


def book_summary(book: Book, summaries: dict[int, RatingSummary]) -> BookSummary:
    summary = summaries.get(book.id, EMPTY_SUMMARY)
    return BookSummary.model_validate(book).model_copy(
        update={"average_rating": summary.average, "review_count": summary.count}
    )

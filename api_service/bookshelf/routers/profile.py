"""Profile routes — a user's books, reviews and rating stats."""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.auth.dependencies import SessionContext, get_session
from bookshelf.database import get_db
from bookshelf.errors import NotFoundError
from bookshelf.models.book import Book
from bookshelf.models.profile import Profile
from bookshelf.models.review import Review
from bookshelf.schemas.profile import ProfileResponse, ProfileReview, ProfileStats
from bookshelf.services.catalog import book_summary, load_rating_summaries
from bookshelf.services.ratings import summarize_ratings

router = APIRouter(tags=["Profile"])


async def build_profile(db: AsyncSession, user_id: int) -> ProfileResponse:
    result = await db.execute(select(Profile).where(Profile.id == user_id))
    profile = result.scalar_one_or_none()
    if profile is None:
        raise NotFoundError("Profile")

    books = (
        await db.execute(
            select(Book)
            .where(Book.added_by == user_id)
            .order_by(Book.created_at.desc(), Book.id.desc())
        )
    ).scalars().all()
    summaries = await load_rating_summaries(db, [b.id for b in books])

    review_rows = (
        await db.execute(
            select(Review, Book.title)
            .join(Book, Book.id == Review.book_id)
            .where(Review.user_id == user_id)
            .order_by(Review.created_at.desc(), Review.id.desc())
        )
    ).all()

    given = summarize_ratings(review.rating for review, _ in review_rows)

    return ProfileResponse(
        id=profile.id,
        name=profile.name,
        stats=ProfileStats(
            books_added=len(books),
            reviews_written=given.count,
            average_rating_given=given.average,
        ),
        books=[book_summary(b, summaries) for b in books],
        reviews=[
            ProfileReview(
                id=review.id,
                book_id=review.book_id,
                book_title=title,
                rating=review.rating,
                review_text=review.review_text,
                created_at=review.created_at,
            )
            for review, title in review_rows
        ],
    )


@router.get("/profile", response_model=ProfileResponse)
async def my_profile(
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """The signed-in user's profile."""
    return await build_profile(db, session.user_id)


@router.get("/profiles/{user_id}", response_model=ProfileResponse)
async def user_profile(user_id: int, db: AsyncSession = Depends(get_db)):
    return await build_profile(db, user_id)

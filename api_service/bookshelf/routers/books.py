"""Book routes — public listing and detail, owner-only edit and delete."""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.auth.dependencies import SessionContext, get_optional_session, get_session
from bookshelf.config import get_settings
from bookshelf.database import get_db
from bookshelf.errors import ConfirmationRequired, NotOwnerError
from bookshelf.models.book import Book
from bookshelf.models.profile import Profile
from bookshelf.models.review import Review
from bookshelf.schemas.book import (
    BookCreate,
    BookDetailResponse,
    BookListResponse,
    BookResponse,
    BookUpdate,
)
from bookshelf.schemas.review import ReviewResponse
from bookshelf.services.catalog import (
    book_summary,
    get_book_or_404,
    load_rating_summaries,
    profile_name,
)
from bookshelf.services.pagination import clamp_page, page_bounds, page_count
from bookshelf.services.ratings import summarize_ratings

logger = structlog.get_logger()
router = APIRouter(prefix="/books", tags=["Books"])

EMPTY_CATALOG_MESSAGE = "No books found. Add some books to get started!"
DELETE_BOOK_PROMPT = "This will permanently delete this book and all its reviews."


def escape_like(text: str) -> str:
    """Make LIKE wildcards in user input match literally."""
    return text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")


@router.get("", response_model=BookListResponse)
async def list_books(
    q: Optional[str] = Query(None, max_length=200, description="Matches title or author"),
    page: int = Query(1, ge=1),
    db: AsyncSession = Depends(get_db),
):
    """Newest-first book listing, six per page, with title/author search.

    Pages past the end are clamped to the last page.
    """
    page_size = get_settings().books_per_page
    query = select(Book)

    search = (q or "").strip()
    if search:
        pattern = f"%{escape_like(search)}%"
        query = query.where(
            or_(
                Book.title.ilike(pattern, escape="\\"),
                Book.author.ilike(pattern, escape="\\"),
            )
        )

    count_query = select(func.count()).select_from(query.subquery())
    total = (await db.execute(count_query)).scalar() or 0

    total_pages = page_count(total, page_size)
    page = clamp_page(page, total_pages)
    offset, limit = page_bounds(page, page_size)

    query = query.order_by(Book.created_at.desc(), Book.id.desc()).offset(offset).limit(limit)
    books = (await db.execute(query)).scalars().all()
    summaries = await load_rating_summaries(db, [b.id for b in books])

    return BookListResponse(
        books=[book_summary(b, summaries) for b in books],
        total=total,
        page=page,
        page_size=page_size,
        total_pages=total_pages,
        query=search or None,
        message=None if books else EMPTY_CATALOG_MESSAGE,
    )


@router.get("/{book_id}", response_model=BookDetailResponse)
async def get_book(
    book_id: int,
    db: AsyncSession = Depends(get_db),
    session: Optional[SessionContext] = Depends(get_optional_session),
):
    """A book with its owner's name, rating summary and all reviews."""
    book = await get_book_or_404(db, book_id)

    result = await db.execute(
        select(Review, Profile.name)
        .outerjoin(Profile, Profile.id == Review.user_id)
        .where(Review.book_id == book_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    rows = result.all()
    summary = summarize_ratings(review.rating for review, _ in rows)

    reviews = [
        ReviewResponse.model_validate(review).model_copy(
            update={
                "user_name": name or "Anonymous",
                "is_owner": session is not None and session.owns(review.user_id),
            }
        )
        for review, name in rows
    ]

    return BookDetailResponse(
        **BookResponse.model_validate(book).model_dump(),
        average_rating=summary.average,
        review_count=summary.count,
        added_by_name=await profile_name(db, book.added_by),
        is_owner=session is not None and session.owns(book.added_by),
        reviews=reviews,
    )


@router.post("", response_model=BookResponse, status_code=status.HTTP_201_CREATED)
async def create_book(
    data: BookCreate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Add a book; the caller becomes its owner."""
    book = Book(**data.model_dump(), added_by=session.user_id)
    db.add(book)
    await db.flush()
    await db.refresh(book)

    logger.info("book_created", book_id=book.id, user_id=session.user_id)
    return BookResponse.model_validate(book)


@router.put("/{book_id}", response_model=BookResponse)
async def update_book(
    book_id: int,
    data: BookUpdate,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Update a book (owner only)."""
    book = await get_book_or_404(db, book_id)
    if not session.owns(book.added_by):
        raise NotOwnerError("You can only edit your own books")

    update_data = data.model_dump(exclude_unset=True)
    for field, value in update_data.items():
        setattr(book, field, value)

    await db.flush()
    await db.refresh(book)

    logger.info("book_updated", book_id=book.id, fields=sorted(update_data))
    return BookResponse.model_validate(book)


@router.delete("/{book_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_book(
    book_id: int,
    confirm: bool = Query(False, description="Must be true to delete"),
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Delete a book and its reviews (owner only, confirmed)."""
    book = await get_book_or_404(db, book_id)
    if not session.owns(book.added_by):
        raise NotOwnerError("You can only delete your own books")
    if not confirm:
        raise ConfirmationRequired(DELETE_BOOK_PROMPT)

    await db.delete(book)
    await db.flush()

    logger.info("book_deleted", book_id=book_id, user_id=session.user_id)

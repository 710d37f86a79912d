"""Review routes — one review per user per book, editable only by its author."""

from __future__ import annotations

from typing import Optional

import structlog
from fastapi import APIRouter, Depends, Query, status
from prometheus_client import Counter
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from bookshelf.auth.dependencies import SessionContext, get_optional_session, get_session
from bookshelf.database import get_db
from bookshelf.errors import ConfirmationRequired, ConflictError, NotOwnerError
from bookshelf.models.profile import Profile
from bookshelf.models.review import Review
from bookshelf.schemas.review import MyReviewResponse, ReviewResponse, ReviewSubmit
from bookshelf.services.catalog import (
    find_user_review,
    get_book_or_404,
    get_review_or_404,
    profile_name,
)
from bookshelf.services.review_state import ReviewAction, ReviewEditor, ReviewState

logger = structlog.get_logger()
router = APIRouter(tags=["Reviews"])

REVIEWS_SUBMITTED = Counter(
    "reviews_submitted_total",
    "Reviews written or rewritten",
    ["action"],
)

DUPLICATE_REVIEW = "You have already reviewed this book"
DELETE_REVIEW_PROMPT = "This will permanently delete your review."


async def _review_response(db: AsyncSession, review: Review, session: SessionContext) -> ReviewResponse:
    name = await profile_name(db, review.user_id)
    return ReviewResponse.model_validate(review).model_copy(
        update={"user_name": name or "Anonymous", "is_owner": session.owns(review.user_id)}
    )


async def _write(
    db: AsyncSession,
    editor: ReviewEditor,
    action: ReviewAction,
    book_id: int,
    session: SessionContext,
    data: ReviewSubmit,
) -> Review:
    """Run the write path chosen by the editor and record the outcome."""
    if action is ReviewAction.CREATE:
        review = Review(
            book_id=book_id,
            user_id=session.user_id,
            rating=data.rating,
            review_text=data.review_text,
        )
        db.add(review)
    else:
        review = editor.review
        review.rating = data.rating
        review.review_text = data.review_text

    try:
        await db.flush()
    except IntegrityError:
        # A concurrent request created the review first
        raise ConflictError(DUPLICATE_REVIEW)
    await db.refresh(review)

    editor.saved(review)
    REVIEWS_SUBMITTED.labels(action=action.value).inc()
    logger.info(
        "review_saved",
        action=action.value,
        review_id=review.id,
        book_id=book_id,
        user_id=session.user_id,
    )
    return review


@router.get("/books/{book_id}/reviews", response_model=list[ReviewResponse])
async def list_book_reviews(
    book_id: int,
    db: AsyncSession = Depends(get_db),
    session: Optional[SessionContext] = Depends(get_optional_session),
):
    """All reviews of a book, newest first."""
    await get_book_or_404(db, book_id)
    result = await db.execute(
        select(Review, Profile.name)
        .outerjoin(Profile, Profile.id == Review.user_id)
        .where(Review.book_id == book_id)
        .order_by(Review.created_at.desc(), Review.id.desc())
    )
    return [
        ReviewResponse.model_validate(review).model_copy(
            update={
                "user_name": name or "Anonymous",
                "is_owner": session is not None and session.owns(review.user_id),
            }
        )
        for review, name in result.all()
    ]


@router.get("/books/{book_id}/reviews/me", response_model=MyReviewResponse)
async def my_review(
    book_id: int,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """The caller's review of this book, if any, and the authoring state."""
    await get_book_or_404(db, book_id)
    editor = ReviewEditor(await find_user_review(db, book_id, session.user_id))
    review = None
    if editor.review is not None:
        review = await _review_response(db, editor.review, session)
    return MyReviewResponse(state=editor.state.value, review=review)


@router.post(
    "/books/{book_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
)
async def create_review(
    book_id: int,
    data: ReviewSubmit,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Write a first review; rejected if the caller already reviewed the book."""
    await get_book_or_404(db, book_id)
    editor = ReviewEditor(await find_user_review(db, book_id, session.user_id))
    if editor.state is not ReviewState.NO_REVIEW:
        raise ConflictError(DUPLICATE_REVIEW)

    action = editor.submit(data.rating, data.review_text)
    review = await _write(db, editor, action, book_id, session, data)
    return await _review_response(db, review, session)


@router.put("/books/{book_id}/reviews/me", response_model=ReviewResponse)
async def submit_review(
    book_id: int,
    data: ReviewSubmit,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Submit the review form: creates the caller's review or rewrites it."""
    await get_book_or_404(db, book_id)
    editor = ReviewEditor(await find_user_review(db, book_id, session.user_id))
    if editor.state is ReviewState.VIEWING:
        editor.start_editing()

    action = editor.submit(data.rating, data.review_text)
    review = await _write(db, editor, action, book_id, session, data)
    return await _review_response(db, review, session)


@router.put("/reviews/{review_id}", response_model=ReviewResponse)
async def update_review(
    review_id: int,
    data: ReviewSubmit,
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Update a review (author only)."""
    review = await get_review_or_404(db, review_id)
    if not session.owns(review.user_id):
        raise NotOwnerError("You can only edit your own reviews", redirect_to=f"/books/{review.book_id}")

    editor = ReviewEditor(review)
    editor.start_editing()
    action = editor.submit(data.rating, data.review_text)
    review = await _write(db, editor, action, review.book_id, session, data)
    return await _review_response(db, review, session)


@router.delete("/reviews/{review_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_review(
    review_id: int,
    confirm: bool = Query(False, description="Must be true to delete"),
    db: AsyncSession = Depends(get_db),
    session: SessionContext = Depends(get_session),
):
    """Delete a review (author only, confirmed)."""
    review = await get_review_or_404(db, review_id)
    if not session.owns(review.user_id):
        raise NotOwnerError("You can only delete your own reviews", redirect_to=f"/books/{review.book_id}")
    if not confirm:
        raise ConfirmationRequired(DELETE_REVIEW_PROMPT)

    book_id = review.book_id
    await db.delete(review)
    await db.flush()

    logger.info("review_deleted", review_id=review_id, book_id=book_id, user_id=session.user_id)

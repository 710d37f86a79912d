"""
Review authoring state machine.

    no_review  --submit-->         viewing
    viewing    --start_editing-->  editing
    editing    --submit, cancel--> viewing
    viewing    --deleted-->        no_review

A user holds at most one review per book, so whether ``submit`` creates or
updates is decided by the state, never by the caller.
"""

from __future__ import annotations

import enum
from typing import Any, Optional

from bookshelf.errors import ReviewValidationError

MIN_RATING = 1
MAX_RATING = 5


class ReviewState(str, enum.Enum):
    NO_REVIEW = "no_review"
    VIEWING = "viewing"
    EDITING = "editing"


class ReviewAction(str, enum.Enum):
    CREATE = "create"
    UPDATE = "update"


class InvalidTransition(Exception):
    pass


def validate_submission(rating: Optional[int], text: Optional[str]) -> dict[str, str]:
    """Field-level problems with a submission; empty when it is acceptable."""
    errors: dict[str, str] = {}
    if rating is None or not MIN_RATING <= rating <= MAX_RATING:
        errors["rating"] = f"Rating must be between {MIN_RATING} and {MAX_RATING} stars"
    if text is None or not text.strip():
        errors["review_text"] = "Review text is required"
    return errors


class ReviewEditor:
    """Tracks one user's review of one book."""

    def __init__(self, existing: Any = None):
        self.review = existing
        self._editing = False

    @property
    def state(self) -> ReviewState:
        if self.review is None:
            return ReviewState.NO_REVIEW
        return ReviewState.EDITING if self._editing else ReviewState.VIEWING

    def start_editing(self) -> None:
        if self.state is not ReviewState.VIEWING:
            raise InvalidTransition(f"cannot edit from {self.state.value}")
        self._editing = True

    def cancel(self) -> None:
        self._editing = False

    def submit(self, rating: Optional[int], text: Optional[str]) -> ReviewAction:
        """Validate locally and pick the write path; raises before any I/O."""
        if self.state is ReviewState.VIEWING:
            raise InvalidTransition("start editing before resubmitting a review")
        errors = validate_submission(rating, text)
        if errors:
            raise ReviewValidationError(errors)
        return ReviewAction.CREATE if self.review is None else ReviewAction.UPDATE

    def saved(self, review: Any) -> None:
        self.review = review
        self._editing = False

    def deleted(self) -> None:
        if self.review is None:
            raise InvalidTransition("no review to delete")
        self.review = None
        self._editing = False

"""Review schemas.

Submissions are deliberately loose: rating and text are checked by the
review editor so a missing star rating and empty text come back together
as field errors.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, StrictInt


class ReviewSubmit(BaseModel):
    rating: Optional[StrictInt] = None
    review_text: Optional[str] = None


class ReviewResponse(BaseModel):
    id: int
    book_id: int
    user_id: int
    rating: int
    review_text: str
    created_at: datetime
    user_name: str = "Anonymous"
    is_owner: bool = False

    model_config = {"from_attributes": True}


class MyReviewResponse(BaseModel):
    state: str
    review: Optional[ReviewResponse] = None

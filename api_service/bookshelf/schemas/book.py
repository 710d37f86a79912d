"""Book schemas."""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, HttpUrl, TypeAdapter, field_validator

from bookshelf.schemas.review import ReviewResponse

_http_url = TypeAdapter(HttpUrl)

MIN_PUBLISHED_YEAR = 1000


def _check_cover_url(value: Optional[str]) -> Optional[str]:
    if value is None or value == "":
        return None
    try:
        _http_url.validate_python(value)
    except ValueError:
        raise ValueError("Invalid URL")
    return value


def _check_published_year(value: Optional[int]) -> Optional[int]:
    if value is not None and value > date.today().year:
        raise ValueError("Published year cannot be in the future")
    return value


class BookCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    author: str = Field(..., min_length=1, max_length=100)
    genre: str = Field(..., min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=2000)
    published_year: int = Field(..., ge=MIN_PUBLISHED_YEAR)
    cover_url: Optional[str] = None

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("published_year")
    @classmethod
    def not_in_future(cls, v: int) -> int:
        return _check_published_year(v)

    @field_validator("cover_url")
    @classmethod
    def cover_url_is_http(cls, v: Optional[str]) -> Optional[str]:
        return _check_cover_url(v)


class BookUpdate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    author: Optional[str] = Field(None, min_length=1, max_length=100)
    genre: Optional[str] = Field(None, min_length=1, max_length=50)
    description: Optional[str] = Field(None, max_length=2000)
    published_year: Optional[int] = Field(None, ge=MIN_PUBLISHED_YEAR)
    cover_url: Optional[str] = None

    @field_validator("title", "author", "genre", "published_year")
    @classmethod
    def required_when_given(cls, v, info):
        if v is None:
            raise ValueError(f"{info.field_name.replace('_', ' ').capitalize()} is required")
        return v

    @field_validator("description")
    @classmethod
    def blank_description_is_none(cls, v: Optional[str]) -> Optional[str]:
        return v or None

    @field_validator("published_year")
    @classmethod
    def not_in_future(cls, v: Optional[int]) -> Optional[int]:
        return _check_published_year(v)

    @field_validator("cover_url")
    @classmethod
    def cover_url_is_http(cls, v: Optional[str]) -> Optional[str]:
        return _check_cover_url(v)


class BookResponse(BaseModel):
    id: int
    title: str
    author: str
    genre: str
    description: Optional[str]
    published_year: int
    cover_url: Optional[str]
    added_by: int
    created_at: datetime

    model_config = {"from_attributes": True}


class BookSummary(BookResponse):
    """A book as shown on listing cards, with its derived rating."""

    average_rating: float = 0.0
    review_count: int = 0


class BookListResponse(BaseModel):
    books: list[BookSummary]
    total: int
    page: int
    page_size: int
    total_pages: int
    query: Optional[str] = None
    message: Optional[str] = None


class BookDetailResponse(BookSummary):
    added_by_name: Optional[str] = None
    is_owner: bool = False
    reviews: list[ReviewResponse] = []

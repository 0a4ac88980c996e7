from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import Field

from ..shops.models import CamelModel


class ReviewSort(str, Enum):
    newest = "newest"
    oldest = "oldest"
    highest = "highest"
    lowest = "lowest"


class ReviewReply(CamelModel):
    text: str
    date: datetime
    author_id: str


class Review(CamelModel):
    id: str
    shop_id: str
    user_id: str
    user_name: str
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=500)
    photos: list[str] = Field(default_factory=list)
    helpful: list[str] = Field(default_factory=list)
    reply: ReviewReply | None = None
    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)


class ReviewCreate(CamelModel):
    shop_id: str = Field(..., min_length=1)
    rating: int = Field(..., ge=1, le=5)
    comment: str = Field(..., min_length=1, max_length=500)
    photos: list[str] = Field(default_factory=list)


class ReviewUpdate(CamelModel):
    rating: int | None = Field(default=None, ge=1, le=5)
    comment: str | None = Field(default=None, min_length=1, max_length=500)
    photos: list[str] | None = None


class ReplyRequest(CamelModel):
    text: str = Field(..., min_length=1, max_length=500)


class ReviewStats(CamelModel):
    avg_rating: float
    count: int


class Pagination(CamelModel):
    current: int
    pages: int
    total: int


class ReviewPage(CamelModel):
    reviews: list[Review]
    pagination: Pagination
    stats: ReviewStats


class HelpfulToggle(CamelModel):
    message: str
    helpful_count: int
    is_helpful: bool

"""
Admin Pydantic Schemas

Responses for the development-only maintenance endpoints.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class RecordCounts(BaseModel):
    users: int = Field(..., ge=0)
    books: int = Field(..., ge=0)
    reviews: int = Field(..., ge=0)


class AggregateDrift(BaseModel):
    """A book whose stored aggregate disagrees with its reviews."""

    book_id: int
    stored_average_rating: float
    stored_total_reviews: int
    expected_average_rating: float
    expected_total_reviews: int


class DatabaseStats(BaseModel):
    """Record counts and rating-aggregate integrity report."""

    statistics: RecordCounts
    inconsistent_books: list[AggregateDrift] = Field(default_factory=list)
    health_score: float = Field(
        ...,
        ge=0,
        le=100,
        description="Percentage of books whose aggregate matches their reviews",
    )
    timestamp: datetime


class RecalculateResult(BaseModel):
    books_updated: int = Field(..., ge=0)


class ResetResult(BaseModel):
    reviews_deleted: int = Field(..., ge=0)
    books_deleted: int = Field(..., ge=0)
    users_deleted: int = Field(..., ge=0)

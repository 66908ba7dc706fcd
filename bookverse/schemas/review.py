"""
Review Pydantic Schemas

Schemas:
- ReviewCreate: Create a new review
- ReviewUpdate: Update an existing review (rating and/or text)
- ReviewResponse: Review with nested author and book info
- ReviewListResponse: Paginated list of reviews
- BookRatingStats: Live rating statistics for one book

Business Rules:
- Rating must be 1-5 (validated at schema level and again in the service)
- Text is 1-500 characters after whitespace is collapsed
- One review per user per book (enforced in the service and the database)
"""
# ruff: noqa: I001
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookverse.models.review import REVIEW_TEXT_MAX_LENGTH
from bookverse.schemas.user import UserPublicResponse
from bookverse.services.reviews import normalize_review_text


# =============================================================================
# Embedded Schemas
# =============================================================================


class BookMinimal(BaseModel):
    """Just enough book info to identify it inside a review."""

    id: int = Field(..., description="Book ID")
    title: str = Field(..., description="Book title")
    author: str = Field(..., description="Author name")

    model_config = ConfigDict(from_attributes=True)


# =============================================================================
# Review Schemas
# =============================================================================


class ReviewBase(BaseModel):
    """Base schema with shared review fields."""

    rating: int = Field(
        ...,
        ge=1,
        le=5,
        strict=True,
        description="Rating from 1 to 5 stars",
        examples=[4, 5],
    )

    text: str = Field(
        ...,
        min_length=1,
        description="Review text (length checked after whitespace is collapsed)",
        examples=["This book changed my perspective on..."],
    )

    @field_validator("text")
    @classmethod
    def text_must_have_content(cls, v: str) -> str:
        """Collapse whitespace and reject blank text."""
        v = normalize_review_text(v)
        if not v:
            raise ValueError("Review text is required")
        if len(v) > REVIEW_TEXT_MAX_LENGTH:
            raise ValueError(f"Review text must be at most {REVIEW_TEXT_MAX_LENGTH} characters")
        return v


class ReviewCreate(ReviewBase):
    """
    Schema for creating a new review.

    Example request body:
    {
        "rating": 5,
        "text": "One of the best books I've ever read..."
    }
    """

    pass


class ReviewUpdate(BaseModel):
    """
    Schema for updating an existing review.

    Only the fields that are sent are changed.
    """

    rating: int | None = Field(
        default=None,
        ge=1,
        le=5,
        strict=True,
        description="Rating from 1 to 5 stars",
    )

    text: str | None = Field(
        default=None,
        min_length=1,
        description="Review text (length checked after whitespace is collapsed)",
    )

    @field_validator("text")
    @classmethod
    def text_must_have_content(cls, v: str | None) -> str | None:
        """Validate text if provided."""
        if v is None:
            return v
        v = normalize_review_text(v)
        if not v:
            raise ValueError("Review text cannot be empty")
        if len(v) > REVIEW_TEXT_MAX_LENGTH:
            raise ValueError(f"Review text must be at most {REVIEW_TEXT_MAX_LENGTH} characters")
        return v


class ReviewResponse(ReviewBase):
    """Review with its author and book embedded."""

    id: int = Field(..., description="Unique review identifier")
    book_id: int = Field(..., description="ID of the reviewed book")
    user_id: int = Field(..., description="ID of the user who wrote the review")

    created_at: datetime = Field(..., description="When the review was created")
    updated_at: datetime = Field(..., description="When the review was last updated")

    user: UserPublicResponse = Field(..., description="User who wrote the review")
    book: BookMinimal = Field(..., description="Book being reviewed")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "book_id": 42,
                "user_id": 7,
                "rating": 5,
                "text": "This book completely changed my perspective on...",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
                "user": {"id": 7, "full_name": "Jane Reader"},
                "book": {"id": 42, "title": "1984", "author": "George Orwell"},
            }
        },
    )


class ReviewListResponse(BaseModel):
    """Paginated list of reviews."""

    items: list[ReviewResponse] = Field(..., description="Reviews on this page")
    total: int = Field(..., ge=0, description="Total number of reviews")
    page: int = Field(..., ge=1, description="Current page number")
    per_page: int = Field(..., ge=1, le=100, description="Items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")


# =============================================================================
# Aggregation Schemas
# =============================================================================


class BookRatingStats(BaseModel):
    """
    Rating statistics computed live from a book's reviews.

    average_rating and total_reviews match the values stored on the book
    once the last review write has been processed.
    """

    book_id: int = Field(..., description="Book ID")
    average_rating: float = Field(
        ...,
        ge=0,
        le=5,
        description="Average rating (0-5, 0 means no reviews)"
    )
    total_reviews: int = Field(..., ge=0, description="Total number of reviews")
    rating_distribution: dict[int, int] = Field(
        default_factory=lambda: {1: 0, 2: 0, 3: 0, 4: 0, 5: 0},
        description="Count of each rating (1-5)"
    )

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "book_id": 42,
                "average_rating": 4.2,
                "total_reviews": 125,
                "rating_distribution": {"1": 5, "2": 10, "3": 20, "4": 40, "5": 50},
            }
        },
    )

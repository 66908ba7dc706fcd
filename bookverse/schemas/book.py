"""
Book Pydantic Schemas

Schemas:
- BookBase / BookCreate: Fields a reader provides when sharing a book
- BookUpdate: Partial update, every field optional
- BookResponse: Book plus owner, rating aggregate and display labels
- BookListResponse: Paginated catalogue page

average_rating and total_reviews appear ONLY on BookResponse. The input
schemas don't declare them, so any value a client sends for them is
dropped before it reaches the service layer.
"""

from datetime import UTC, datetime

from pydantic import BaseModel, ConfigDict, Field, field_validator

from bookverse.models.book import Genre
from bookverse.schemas.user import UserPublicResponse


def _check_publication_year(v: int | None) -> int | None:
    if v is not None and v > datetime.now(UTC).year + 1:
        raise ValueError("Publication year cannot be in the future")
    return v


def _strip_required(v: str | None, name: str) -> str | None:
    if v is None:
        return v
    v = v.strip()
    if not v:
        raise ValueError(f"{name} cannot be empty or whitespace")
    return v


class BookBase(BaseModel):
    """
    Base schema with shared book fields.

    Length limits follow what the catalogue page can display.
    """

    title: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Book title",
        examples=["1984", "Pride and Prejudice"],
    )

    author: str = Field(
        ...,
        min_length=2,
        max_length=100,
        description="Author name",
        examples=["George Orwell"],
    )

    description: str = Field(
        ...,
        min_length=10,
        max_length=1000,
        description="What the book is about",
        examples=["A dystopian novel set in a totalitarian society..."],
    )

    genre: Genre = Field(
        ...,
        description="Literary genre",
        examples=["Fiction"],
    )

    publication_year: int = Field(
        ...,
        ge=1000,
        description="Year of publication",
        examples=[1949],
    )

    @field_validator("title", "author", "description")
    @classmethod
    def text_must_not_be_blank(cls, v: str, info) -> str:
        """Trim and reject whitespace-only values."""
        return _strip_required(v, info.field_name.capitalize())

    @field_validator("publication_year")
    @classmethod
    def year_not_in_future(cls, v: int) -> int:
        """Allow at most one year ahead (pre-release listings)."""
        return _check_publication_year(v)


class BookCreate(BookBase):
    """
    Schema for sharing a new book.

    Example request body:
    {
        "title": "1984",
        "author": "George Orwell",
        "description": "A dystopian novel set in a totalitarian society.",
        "genre": "Fiction",
        "publication_year": 1949
    }
    """

    pass


class BookUpdate(BaseModel):
    """
    Schema for updating an existing book.

    All fields are optional for PATCH-style updates.
    """

    title: str | None = Field(default=None, min_length=1, max_length=200)
    author: str | None = Field(default=None, min_length=2, max_length=100)
    description: str | None = Field(default=None, min_length=10, max_length=1000)
    genre: Genre | None = Field(default=None)
    publication_year: int | None = Field(default=None, ge=1000)

    @field_validator("title", "author", "description")
    @classmethod
    def text_must_not_be_blank(cls, v: str | None, info) -> str | None:
        """Validate text fields if provided."""
        return _strip_required(v, info.field_name.capitalize())

    @field_validator("publication_year")
    @classmethod
    def year_not_in_future(cls, v: int | None) -> int | None:
        return _check_publication_year(v)


class BookResponse(BookBase):
    """
    Schema for book responses.

    Includes the owner, the rating aggregate maintained by the ratings
    service, and two display labels derived from it.
    """

    id: int = Field(..., description="Unique identifier")
    owner_id: int = Field(..., description="ID of the user who shared the book")
    owner: UserPublicResponse = Field(..., description="User who shared the book")

    average_rating: float = Field(
        default=0.0,
        ge=0,
        le=5,
        description="Average review rating, one decimal place, 0 if no reviews",
    )
    total_reviews: int = Field(
        default=0,
        ge=0,
        description="Number of reviews for this book",
    )
    popularity_level: str = Field(..., description="Label based on review count")
    quality_indicator: str = Field(..., description="Label based on average rating")

    created_at: datetime = Field(..., description="When the book was shared")
    updated_at: datetime = Field(..., description="When the book was last updated")

    model_config = ConfigDict(
        from_attributes=True,
        json_schema_extra={
            "example": {
                "id": 1,
                "title": "1984",
                "author": "George Orwell",
                "description": "A dystopian novel about totalitarianism",
                "genre": "Fiction",
                "publication_year": 1949,
                "owner_id": 7,
                "owner": {"id": 7, "full_name": "Jane Reader"},
                "average_rating": 4.3,
                "total_reviews": 12,
                "popularity_level": "Getting Attention",
                "quality_indicator": "Excellent",
                "created_at": "2024-01-15T10:30:00Z",
                "updated_at": "2024-01-15T10:30:00Z",
            }
        },
    )


class BookListResponse(BaseModel):
    """
    Schema for paginated book list responses.

    - total: Total number of books matching the query
    - page / per_page / pages: Pagination position
    - has_next / has_prev: Convenience flags for pager controls
    """

    items: list[BookResponse] = Field(..., description="Books on this page")
    total: int = Field(..., ge=0, description="Total number of books")
    page: int = Field(..., ge=1, description="Current page number")
    per_page: int = Field(..., ge=1, le=100, description="Items per page")
    pages: int = Field(..., ge=0, description="Total number of pages")
    has_next: bool = Field(..., description="Whether a next page exists")
    has_prev: bool = Field(..., description="Whether a previous page exists")

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "items": [],
                "total": 100,
                "page": 1,
                "per_page": 10,
                "pages": 10,
                "has_next": True,
                "has_prev": False,
            }
        },
    )

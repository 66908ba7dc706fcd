"""
Pydantic Schemas Package

Pydantic models for request/response validation, kept separate from the
SQLAlchemy models so the API controls exactly what it accepts and exposes.

Schema Naming Convention:
- XxxBase: Shared fields between create/update
- XxxCreate: Fields required when creating a new record
- XxxUpdate: Fields allowed when updating (all optional)
- XxxResponse: Fields returned in API responses
"""

from bookverse.schemas.admin import (
    AggregateDrift,
    DatabaseStats,
    RecalculateResult,
    RecordCounts,
    ResetResult,
)
from bookverse.schemas.book import (
    BookBase,
    BookCreate,
    BookListResponse,
    BookResponse,
    BookUpdate,
)
from bookverse.schemas.user import (
    RefreshTokenRequest,
    TokenResponse,
    UserCreate,
    UserProfileResponse,
    UserPublicResponse,
    UserResponse,
)
from bookverse.schemas.review import (
    BookRatingStats,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)

__all__ = [
    # Admin schemas
    "AggregateDrift",
    "DatabaseStats",
    "RecalculateResult",
    "RecordCounts",
    "ResetResult",
    # Book schemas
    "BookBase",
    "BookCreate",
    "BookUpdate",
    "BookResponse",
    "BookListResponse",
    # User schemas
    "UserCreate",
    "UserResponse",
    "UserPublicResponse",
    "UserProfileResponse",
    # Auth/Token schemas
    "TokenResponse",
    "RefreshTokenRequest",
    # Review schemas
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewListResponse",
    "BookRatingStats",
]

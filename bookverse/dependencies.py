"""
FastAPI Dependencies Module

Dependencies are reusable components injected into route handlers.
FastAPI's Depends() function manages their lifecycle.

Common Dependency Patterns used here:
- Database sessions (per-request)
- Authentication (resolve the bearer token to a User)
- Pagination and book listing parameters
"""

import math
from typing import Annotated, Literal

from fastapi import Depends, HTTPException, Query, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from bookverse.config import get_settings
from bookverse.database import get_db
from bookverse.exceptions import NotFoundError
from bookverse.models.book import Genre
from bookverse.models.user import User
from bookverse.services.security import verify_token_type

settings = get_settings()

# =============================================================================
# Type Aliases with Annotated
# =============================================================================
# Instead of writing:
#   def list_books(db: Session = Depends(get_db)):
#
# You can write:
#   def list_books(db: DbSession):

DbSession = Annotated[Session, Depends(get_db)]


# =============================================================================
# Pagination Parameters
# =============================================================================
class PaginationParams:
    """
    Common pagination parameters for list endpoints.

    - page: Which page to return (1-indexed)
    - per_page: How many items per page
    - skip: Calculated offset for database query
    """

    def __init__(
        self,
        page: int = Query(
            default=1,
            ge=1,
            description="Page number (1-indexed)",
            examples=[1, 2, 3],
        ),
        per_page: int = Query(
            default=10,
            ge=1,
            le=100,
            description="Number of items per page (max 100)",
            examples=[5, 10, 25],
        ),
    ) -> None:
        self.page = page
        self.per_page = per_page

    @property
    def skip(self) -> int:
        """
        Number of records to skip.

        Page 1 → skip 0 items, page 2 → skip per_page items, and so on.
        """
        return (self.page - 1) * self.per_page

    def pages_for(self, total: int) -> int:
        """Total number of pages for a result count."""
        return math.ceil(total / self.per_page) if total > 0 else 0


Pagination = Annotated[PaginationParams, Depends()]


# =============================================================================
# Book Listing Parameters
# =============================================================================
BookSortField = Literal[
    "created_at",
    "title",
    "author",
    "publication_year",
    "average_rating",
    "total_reviews",
]


class BookQueryParams:
    """
    Search, filter and sort parameters for the book catalogue.

    Usage:
        GET /api/v1/books?q=orwell&genre=Fiction&sort_by=average_rating&sort_order=desc
    """

    def __init__(
        self,
        q: str | None = Query(
            default=None,
            min_length=1,
            max_length=100,
            description="Search title and author (case-insensitive)",
            examples=["orwell"],
        ),
        genre: Genre | Literal["All"] | None = Query(
            default=None,
            description="Only books of this genre ('All' for any)",
        ),
        sort_by: BookSortField = Query(
            default="created_at",
            description="Field to sort by",
        ),
        sort_order: Literal["asc", "desc"] = Query(
            default="desc",
            description="Sort direction",
        ),
    ) -> None:
        self.q = q
        self.genre = genre.value if isinstance(genre, Genre) else genre
        self.sort_by = sort_by
        self.sort_order = sort_order


BookQuery = Annotated[BookQueryParams, Depends()]


# =============================================================================
# JWT Authentication
# =============================================================================
# OAuth2PasswordBearer extracts the token from "Authorization: Bearer <token>"
# and answers 401 itself when the header is missing.

oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl=f"/api/{settings.api_version}/auth/login",
    auto_error=True,
)


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> User:
    """
    Extract and validate the current user from JWT token.

    Raises:
        HTTPException: 401 if token is invalid or user not found
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    payload = verify_token_type(token, "access")
    if payload is None:
        raise credentials_exception

    user_id = payload.get("sub")
    if user_id is None:
        raise credentials_exception

    try:
        user = db.get(User, int(user_id))
    except ValueError:
        raise credentials_exception from None

    if user is None:
        raise credentials_exception

    return user


def get_current_active_user(
    current_user: User = Depends(get_current_user),
) -> User:
    """
    Verify the current user is active.

    Raises:
        HTTPException: 403 if user is inactive
    """
    if not current_user.is_active:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Account is inactive",
        )
    return current_user


def get_current_superuser(
    current_user: User = Depends(get_current_active_user),
) -> User:
    """
    Verify the current user has superuser (admin) privileges.

    Raises:
        HTTPException: 403 if user is not a superuser
    """
    if not current_user.is_superuser:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Superuser privileges required",
        )
    return current_user


CurrentUser = Annotated[User, Depends(get_current_user)]
ActiveUser = Annotated[User, Depends(get_current_active_user)]
SuperUser = Annotated[User, Depends(get_current_superuser)]


# =============================================================================
# Shared Lookups
# =============================================================================
def get_user_or_404(db: Session, user_id: int) -> User:
    """
    Get a user by ID.

    Raises:
        NotFoundError: If the user doesn't exist
    """
    user = db.get(User, user_id)
    if user is None:
        raise NotFoundError("User", user_id)
    return user

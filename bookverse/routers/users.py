"""
Users Router

Public reader profiles.

Endpoints:
- GET /users/{user_id}          - Public user profile with engagement counts
- GET /users/{user_id}/reviews  - Reviews the user wrote
- GET /users/{user_id}/books    - Books the user shared

Public profiles show limited information; inactive accounts are
reported as not found.
"""

from fastapi import APIRouter, Request
from sqlalchemy import func, select

from bookverse.config import get_settings
from bookverse.dependencies import DbSession, Pagination, get_user_or_404
from bookverse.exceptions import NotFoundError
from bookverse.models import Book, Review, User
from bookverse.schemas.book import BookListResponse, BookResponse
from bookverse.schemas.review import ReviewListResponse, ReviewResponse
from bookverse.schemas.user import UserProfileResponse
from bookverse.services import books as book_service
from bookverse.services import reviews as review_service
from bookverse.services.rate_limiter import limiter

settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================

router = APIRouter(
    prefix="/users",
    tags=["Users"],
    responses={
        404: {"description": "User not found"},
    },
)


def get_active_user_or_404(db: DbSession, user_id: int) -> User:
    """Like get_user_or_404, but hides inactive accounts."""
    user = get_user_or_404(db, user_id)
    if not user.is_active:
        raise NotFoundError("User", user_id)
    return user


# =============================================================================
# Public User Endpoints (/users/{user_id})
# =============================================================================


@router.get(
    "/{user_id}",
    response_model=UserProfileResponse,
    summary="Get public user profile",
    description="Get a user's public profile by ID, with how many books and reviews they contributed.",
)
@limiter.limit(settings.rate_limit_default)
def get_public_user_profile(
    request: Request,
    user_id: int,
    db: DbSession,
) -> UserProfileResponse:
    """
    Get a user's public profile.

    Does NOT expose email or account status. The counts are taken live
    from the books and reviews tables.
    """
    user = get_active_user_or_404(db, user_id)

    books_added = db.execute(
        select(func.count(Book.id)).where(Book.owner_id == user.id)
    ).scalar()
    reviews_written = db.execute(
        select(func.count(Review.id)).where(Review.user_id == user.id)
    ).scalar()

    return UserProfileResponse(
        id=user.id,
        full_name=user.full_name,
        total_books_added=books_added,
        total_reviews_written=reviews_written,
        reader_level=User.reader_level(books_added, reviews_written),
    )


@router.get(
    "/{user_id}/reviews",
    response_model=ReviewListResponse,
    summary="Get a user's reviews",
    description="Get a paginated list of reviews written by a user, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def get_user_reviews(
    request: Request,
    user_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    """List reviews written by a user."""
    get_active_user_or_404(db, user_id)

    reviews, total = review_service.list_user_reviews(
        db,
        user_id,
        skip=pagination.skip,
        limit=pagination.per_page,
    )

    return ReviewListResponse(
        items=[ReviewResponse.model_validate(r) for r in reviews],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pagination.pages_for(total),
    )


@router.get(
    "/{user_id}/books",
    response_model=BookListResponse,
    summary="Get a user's books",
    description="Get a paginated list of books shared by a user, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def get_user_books(
    request: Request,
    user_id: int,
    db: DbSession,
    pagination: Pagination,
) -> BookListResponse:
    """List books shared by a user."""
    get_active_user_or_404(db, user_id)

    books, total = book_service.list_books(
        db,
        skip=pagination.skip,
        limit=pagination.per_page,
        owner_id=user_id,
    )
    pages = pagination.pages_for(total)

    return BookListResponse(
        items=[BookResponse.model_validate(book) for book in books],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pages,
        has_next=pagination.page < pages,
        has_prev=pagination.page > 1,
    )

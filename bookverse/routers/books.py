"""
Books Router

CRUD endpoints for books, plus the book-scoped review endpoints:
- GET    /books                 paginated, searchable, sortable catalogue
- GET    /books/{id}            one book with its rating aggregate
- POST   /books                 share a book (authenticated)
- PUT    /books/{id}            update a book (owner only)
- DELETE /books/{id}            delete a book and its reviews (owner only)
- GET    /books/{id}/reviews    the book's reviews, newest first
- POST   /books/{id}/reviews    review the book (authenticated)
- GET    /books/{id}/rating     live rating statistics

Business logic lives in bookverse.services; routes translate between HTTP
and service calls. Domain errors raised by the services are rendered by
the handler registered in main.py.
"""

from fastapi import APIRouter, Request, status

from bookverse.config import get_settings
from bookverse.dependencies import ActiveUser, BookQuery, DbSession, Pagination
from bookverse.schemas import (
    BookCreate,
    BookListResponse,
    BookRatingStats,
    BookResponse,
    BookUpdate,
    ReviewCreate,
    ReviewListResponse,
    ReviewResponse,
)
from bookverse.services import books as book_service
from bookverse.services import ratings as rating_service
from bookverse.services import reviews as review_service
from bookverse.services.rate_limiter import limiter

settings = get_settings()

# =============================================================================
# Router Configuration
# =============================================================================
router = APIRouter(
    prefix="/books",
    tags=["Books"],
    responses={
        404: {"description": "Book not found"},
    },
)


# =============================================================================
# CRUD Endpoints
# =============================================================================


@router.get(
    "/",
    response_model=BookListResponse,
    summary="List books",
    description="Get a paginated list of books with optional search, genre filter and sorting.",
)
@limiter.limit(settings.rate_limit_default)
def list_books(
    request: Request,
    db: DbSession,
    pagination: Pagination,
    query: BookQuery,
) -> BookListResponse:
    """
    List books with pagination, search and sorting.

    Examples:
        GET /api/v1/books?q=orwell
        GET /api/v1/books?genre=Fantasy&sort_by=average_rating&sort_order=desc
    """
    books, total = book_service.list_books(
        db,
        skip=pagination.skip,
        limit=pagination.per_page,
        q=query.q,
        genre=query.genre,
        sort_by=query.sort_by,
        sort_order=query.sort_order,
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


@router.get(
    "/{book_id}",
    response_model=BookResponse,
    summary="Get a book by ID",
    description="Retrieve a book with its owner, rating aggregate and display labels.",
)
@limiter.limit(settings.rate_limit_default)
def get_book(
    request: Request,
    book_id: int,
    db: DbSession,
) -> BookResponse:
    """Get a single book by its ID."""
    return BookResponse.model_validate(book_service.get_book(db, book_id))


@router.post(
    "/",
    response_model=BookResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Share a new book",
    description="Add a book to the catalogue. The current user becomes its owner.",
)
@limiter.limit(settings.rate_limit_write)
def create_book(
    request: Request,
    book_data: BookCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> BookResponse:
    """
    Create a new book.

    Rating aggregate fields are not part of BookCreate, so a new book
    always starts at 0 reviews / 0.0 average.
    """
    book = book_service.create_book(
        db,
        owner_id=current_user.id,
        data=book_data.model_dump(mode="json"),
    )
    return BookResponse.model_validate(book)


@router.put(
    "/{book_id}",
    response_model=BookResponse,
    summary="Update a book",
    description="Update a book you shared. Only the fields sent are changed.",
    responses={403: {"description": "Not the owner of this book"}},
)
@limiter.limit(settings.rate_limit_write)
def update_book(
    request: Request,
    book_id: int,
    book_data: BookUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> BookResponse:
    """
    Update an existing book.

    Uses PUT with optional fields (PATCH-like behavior):
    model_dump(exclude_unset=True) returns only fields that were sent.
    """
    book = book_service.update_book(
        db,
        book_id=book_id,
        requester_id=current_user.id,
        patch=book_data.model_dump(mode="json", exclude_unset=True),
    )
    return BookResponse.model_validate(book)


@router.delete(
    "/{book_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a book",
    description="Delete a book you shared, together with all of its reviews.",
    responses={403: {"description": "Not the owner of this book"}},
)
@limiter.limit(settings.rate_limit_write)
def delete_book(
    request: Request,
    book_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    """Delete a book and its reviews."""
    book_service.delete_book(db, book_id=book_id, requester_id=current_user.id)


# =============================================================================
# Book Reviews
# =============================================================================


@router.get(
    "/{book_id}/reviews",
    response_model=ReviewListResponse,
    summary="List a book's reviews",
    description="Get a paginated list of reviews for a book, newest first.",
)
@limiter.limit(settings.rate_limit_default)
def list_book_reviews(
    request: Request,
    book_id: int,
    db: DbSession,
    pagination: Pagination,
) -> ReviewListResponse:
    """List reviews for a specific book."""
    reviews, total = review_service.list_book_reviews(
        db,
        book_id,
        skip=pagination.skip,
        limit=pagination.per_page,
    )

    return ReviewListResponse(
        items=[ReviewResponse.model_validate(review) for review in reviews],
        total=total,
        page=pagination.page,
        per_page=pagination.per_page,
        pages=pagination.pages_for(total),
    )


@router.post(
    "/{book_id}/reviews",
    response_model=ReviewResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Review a book",
    description="""
    Write a review for a book.

    **Rules:**
    - Rating must be 1-5 stars
    - Text is 1-500 characters
    - One review per user per book (update your existing review instead)
    """,
    responses={400: {"description": "Invalid review or already reviewed"}},
)
@limiter.limit(settings.rate_limit_write)
def create_book_review(
    request: Request,
    book_id: int,
    review_data: ReviewCreate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Create a review.

    The book's average_rating and total_reviews are recomputed before
    this returns.
    """
    review = review_service.create_review(
        db,
        book_id=book_id,
        user_id=current_user.id,
        rating=review_data.rating,
        text=review_data.text,
    )
    return ReviewResponse.model_validate(review_service.get_review(db, review.id))


@router.get(
    "/{book_id}/rating",
    response_model=BookRatingStats,
    summary="Get rating statistics",
    description="Average rating, review count and 1-5 distribution computed from the book's reviews.",
)
@limiter.limit(settings.rate_limit_default)
def get_book_rating(
    request: Request,
    book_id: int,
    db: DbSession,
) -> BookRatingStats:
    """Live rating statistics for a book."""
    return BookRatingStats(**rating_service.get_rating_stats(db, book_id))

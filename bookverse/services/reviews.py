"""
Reviews Service

Review write operations and the queries the routers need.

Every write follows the same shape:
1. validate and check ownership (nothing is written on failure)
2. mutate the reviews table and commit
3. call ratings.refresh_book_aggregate() for the affected book

One review per user per book is checked with a lookup before insert.
The UNIQUE(book_id, user_id) constraint is the backstop when two
requests race past the lookup: the loser's IntegrityError is turned into
DuplicateReviewError.
"""

import logging
import re
from collections.abc import Mapping
from typing import Any

from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload

from bookverse.exceptions import (
    DuplicateReviewError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from bookverse.models import Book, Review
from bookverse.models.review import REVIEW_TEXT_MAX_LENGTH
from bookverse.services.ratings import refresh_book_aggregate

logger = logging.getLogger(__name__)

MIN_RATING = 1
MAX_RATING = 5
REVIEW_TEXT_MIN_LENGTH = 1

UPDATABLE_FIELDS = frozenset({"rating", "text"})

_WHITESPACE = re.compile(r"\s+")


# =============================================================================
# Validation
# =============================================================================


def normalize_review_text(text: str) -> str:
    """Collapse runs of whitespace into single spaces and trim."""
    return _WHITESPACE.sub(" ", text).strip()


def validate_rating(rating: Any) -> int:
    """
    Check a rating is an integer star value.

    Raises:
        ValidationError: Not an int (bools rejected) or outside 1-5
    """
    if isinstance(rating, bool) or not isinstance(rating, int):
        raise ValidationError("Rating must be a whole number", field="rating")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(
            f"Rating must be between {MIN_RATING} and {MAX_RATING}",
            field="rating",
        )
    return rating


def validate_review_text(text: Any) -> str:
    """
    Normalize review text and check its length.

    Returns:
        The normalized text

    Raises:
        ValidationError: Not a string, empty, or too long
    """
    if not isinstance(text, str):
        raise ValidationError("Review text must be a string", field="text")
    cleaned = normalize_review_text(text)
    if len(cleaned) < REVIEW_TEXT_MIN_LENGTH:
        raise ValidationError("Review text is required", field="text")
    if len(cleaned) > REVIEW_TEXT_MAX_LENGTH:
        raise ValidationError(
            f"Review text must be at most {REVIEW_TEXT_MAX_LENGTH} characters",
            field="text",
        )
    return cleaned


# =============================================================================
# Queries
# =============================================================================


def get_review(db: Session, review_id: int) -> Review:
    """
    Get a review by ID with user and book loaded.

    Raises:
        NotFoundError: If the review doesn't exist
    """
    stmt = (
        select(Review)
        .options(selectinload(Review.user), selectinload(Review.book))
        .where(Review.id == review_id)
    )
    review = db.execute(stmt).scalar_one_or_none()

    if review is None:
        raise NotFoundError("Review", review_id)
    return review


def find_user_review(db: Session, book_id: int, user_id: int) -> Review | None:
    """Return the user's review of a book, if they wrote one."""
    stmt = select(Review).where(
        Review.book_id == book_id,
        Review.user_id == user_id,
    )
    return db.execute(stmt).scalar_one_or_none()


def _paginate(db: Session, condition, skip: int, limit: int) -> tuple[list[Review], int]:
    total = db.execute(select(func.count(Review.id)).where(condition)).scalar() or 0
    stmt = (
        select(Review)
        .options(selectinload(Review.user), selectinload(Review.book))
        .where(condition)
        .order_by(Review.created_at.desc(), Review.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all()), total


def list_book_reviews(
    db: Session, book_id: int, skip: int = 0, limit: int = 10
) -> tuple[list[Review], int]:
    """
    Page through a book's reviews, newest first.

    Returns:
        (reviews for this page, total number of reviews)

    Raises:
        NotFoundError: If the book doesn't exist
    """
    if db.get(Book, book_id) is None:
        raise NotFoundError("Book", book_id)
    return _paginate(db, Review.book_id == book_id, skip, limit)


def list_user_reviews(
    db: Session, user_id: int, skip: int = 0, limit: int = 10
) -> tuple[list[Review], int]:
    """Page through the reviews a user wrote, newest first."""
    return _paginate(db, Review.user_id == user_id, skip, limit)


# =============================================================================
# Write Operations
# =============================================================================


def create_review(
    db: Session,
    book_id: int,
    user_id: int,
    rating: int,
    text: str,
) -> Review:
    """
    Create a review and refresh the book's rating aggregate.

    Args:
        db: Database session
        book_id: Book being reviewed
        user_id: Author of the review
        rating: 1-5 stars
        text: Review text

    Returns:
        The created review

    Raises:
        ValidationError: Bad rating or text
        NotFoundError: The book doesn't exist
        DuplicateReviewError: The user already reviewed this book
    """
    rating = validate_rating(rating)
    text = validate_review_text(text)

    if db.get(Book, book_id) is None:
        raise NotFoundError("Book", book_id)

    if find_user_review(db, book_id, user_id) is not None:
        raise DuplicateReviewError(book_id, user_id)

    review = Review(book_id=book_id, user_id=user_id, rating=rating, text=text)
    db.add(review)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        # Lost the race against a concurrent insert for the same pair.
        if find_user_review(db, book_id, user_id) is not None:
            logger.warning(
                f"Duplicate review rejected by constraint: book={book_id} user={user_id}"
            )
            raise DuplicateReviewError(book_id, user_id) from None
        raise
    db.refresh(review)

    logger.info(f"Review {review.id} created: book={book_id} user={user_id} rating={rating}")

    refresh_book_aggregate(db, book_id)
    return review


def update_review(
    db: Session,
    review_id: int,
    requester_id: int,
    patch: Mapping[str, Any],
) -> Review:
    """
    Apply a partial update to a review and refresh the book's aggregate.

    Only the keys present in patch are changed.

    Raises:
        NotFoundError: The review doesn't exist
        ForbiddenError: The requester didn't write the review
        ValidationError: Unknown field or bad rating/text
    """
    review = get_review(db, review_id)

    if review.user_id != requester_id:
        raise ForbiddenError("You can only update your own reviews")

    unknown = set(patch) - UPDATABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Cannot update field(s): {', '.join(sorted(unknown))}",
            field=sorted(unknown)[0],
        )

    changes: dict[str, Any] = {}
    if "rating" in patch:
        changes["rating"] = validate_rating(patch["rating"])
    if "text" in patch:
        changes["text"] = validate_review_text(patch["text"])

    for field, value in changes.items():
        setattr(review, field, value)

    db.commit()
    db.refresh(review)

    logger.info(f"Review {review.id} updated: fields={sorted(changes)}")

    refresh_book_aggregate(db, review.book_id)
    return review


def delete_review(db: Session, review_id: int, requester_id: int) -> None:
    """
    Delete a review and refresh the book's aggregate.

    Raises:
        NotFoundError: The review doesn't exist
        ForbiddenError: The requester didn't write the review
    """
    review = get_review(db, review_id)

    if review.user_id != requester_id:
        raise ForbiddenError("You can only delete your own reviews")

    book_id = review.book_id

    db.delete(review)
    db.commit()

    logger.info(f"Review {review_id} deleted from book {book_id}")

    refresh_book_aggregate(db, book_id)

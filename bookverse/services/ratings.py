"""
Ratings Service

Owns the denormalized rating fields on the Book model:
- average_rating: mean of all review ratings, one decimal place, 0 if none
- total_reviews: number of reviews for the book

These fields are recomputed from scratch, never incremented, every time a
review is created, updated or deleted. The review write operations in
services/reviews.py call recompute_book_aggregate() explicitly as their
last step, so the data flow is visible at the call site rather than
hidden in ORM event hooks.

Concurrency:
    The recompute is read-then-write and is not isolated from concurrent
    review writes on the same book. The last recompute wins; because
    every mutation triggers another recompute the stored value converges
    on the next write.
"""

import logging
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from bookverse.exceptions import AggregateRecomputeError, NotFoundError
from bookverse.models import Book
from bookverse.models.review import Review

logger = logging.getLogger(__name__)

RATING_VALUES = (1, 2, 3, 4, 5)


@dataclass(frozen=True)
class BookAggregate:
    """Result of a recompute: what was written onto the book."""

    book_id: int
    average_rating: float
    total_reviews: int


def round_average(rating_sum: int, count: int) -> float:
    """
    Mean rating rounded half-up to one decimal place.

    Python's round() rounds half to even (round(4.25, 1) == 4.2), so the
    division and rounding are done in Decimal.

    Args:
        rating_sum: Sum of the ratings
        count: Number of ratings

    Returns:
        The rounded mean, or 0.0 when count is 0

    Example:
        >>> round_average(12, 3)
        4.0
        >>> round_average(17, 4)
        4.3
    """
    if count == 0:
        return 0.0
    mean = Decimal(rating_sum) / Decimal(count)
    return float(mean.quantize(Decimal("0.1"), rounding=ROUND_HALF_UP))


def recompute_book_aggregate(db: Session, book_id: int) -> BookAggregate:
    """
    Recalculate and store a book's rating aggregate.

    Reads every review of the book, overwrites average_rating and
    total_reviews, and commits. No other Book column is touched.

    Args:
        db: Database session
        book_id: ID of the book to update

    Returns:
        The aggregate that was written

    Raises:
        AggregateRecomputeError: The book no longer exists (deleted
            concurrently). Callers treat this as a no-op.
    """
    stmt = select(
        func.coalesce(func.sum(Review.rating), 0),
        func.count(Review.id),
    ).where(Review.book_id == book_id)
    rating_sum, review_count = db.execute(stmt).one()

    book = db.get(Book, book_id)
    if book is None:
        raise AggregateRecomputeError(book_id)

    book.average_rating = round_average(int(rating_sum), review_count)
    book.total_reviews = review_count
    db.commit()

    logger.debug(
        f"Book {book_id} aggregate: average={book.average_rating} "
        f"total={book.total_reviews}"
    )

    return BookAggregate(
        book_id=book_id,
        average_rating=book.average_rating,
        total_reviews=book.total_reviews,
    )


def refresh_book_aggregate(db: Session, book_id: int) -> BookAggregate | None:
    """
    Run recompute_book_aggregate() after a review write.

    The review mutation has already been committed when this runs, so a
    missing book is logged and swallowed instead of failing the request.

    Returns:
        The written aggregate, or None if the book was gone
    """
    try:
        return recompute_book_aggregate(db, book_id)
    except AggregateRecomputeError as e:
        logger.warning(f"Skipping rating recompute: {e.message}")
        return None


def recalculate_all_book_aggregates(db: Session) -> int:
    """
    Recalculate rating aggregations for all books.

    Useful after imports, seeding, or to repair drift left by the
    last-write-wins race.

    Args:
        db: Database session

    Returns:
        Number of books updated
    """
    book_ids = db.execute(select(Book.id)).scalars().all()

    updated = 0
    for book_id in book_ids:
        if refresh_book_aggregate(db, book_id) is not None:
            updated += 1

    logger.info(f"Recalculated rating aggregates for {updated} books")
    return updated


def get_rating_stats(db: Session, book_id: int) -> dict:
    """
    Compute live rating statistics for a book straight from its reviews.

    Unlike the stored aggregate this also returns the 1-5 distribution.

    Raises:
        NotFoundError: If the book doesn't exist
    """
    if db.get(Book, book_id) is None:
        raise NotFoundError("Book", book_id)

    distribution = {rating: 0 for rating in RATING_VALUES}
    stmt = (
        select(Review.rating, func.count(Review.id))
        .where(Review.book_id == book_id)
        .group_by(Review.rating)
    )
    for rating, count in db.execute(stmt).all():
        distribution[rating] = count

    total = sum(distribution.values())
    rating_sum = sum(rating * count for rating, count in distribution.items())

    return {
        "book_id": book_id,
        "average_rating": round_average(rating_sum, total),
        "total_reviews": total,
        "rating_distribution": distribution,
    }


def find_inconsistent_books(db: Session) -> list[BookAggregate]:
    """
    List books whose stored aggregate disagrees with their reviews.

    Returns the EXPECTED aggregate for each mismatching book.
    """
    stats_stmt = (
        select(
            Review.book_id,
            func.sum(Review.rating),
            func.count(Review.id),
        )
        .group_by(Review.book_id)
    )
    live = {
        book_id: (int(rating_sum), count)
        for book_id, rating_sum, count in db.execute(stats_stmt).all()
    }

    mismatched = []
    books = db.execute(
        select(Book.id, Book.average_rating, Book.total_reviews)
    ).all()
    for book_id, stored_average, stored_total in books:
        rating_sum, count = live.get(book_id, (0, 0))
        expected_average = round_average(rating_sum, count)
        if stored_total != count or abs(stored_average - expected_average) > 1e-9:
            mismatched.append(
                BookAggregate(
                    book_id=book_id,
                    average_rating=expected_average,
                    total_reviews=count,
                )
            )

    return mismatched

"""
Admin Router

Database maintenance endpoints for development and staging:
- GET    /admin/database-stats       record counts and aggregate drift
- POST   /admin/recalculate-ratings  rebuild every book's rating aggregate
- DELETE /admin/reset-database       delete all reviews, books and users

This router is only mounted when settings.environment is not
"production" (see main.create_app), and every endpoint requires a
superuser.
"""

import logging
from datetime import UTC, datetime

from fastapi import APIRouter, Request
from sqlalchemy import delete, func, select

from bookverse.config import get_settings
from bookverse.dependencies import DbSession, SuperUser
from bookverse.models import Book, Review, User
from bookverse.schemas.admin import (
    AggregateDrift,
    DatabaseStats,
    RecalculateResult,
    RecordCounts,
    ResetResult,
)
from bookverse.services.rate_limiter import limiter
from bookverse.services.ratings import (
    find_inconsistent_books,
    recalculate_all_book_aggregates,
)

logger = logging.getLogger(__name__)
settings = get_settings()

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    responses={
        401: {"description": "Not authenticated"},
        403: {"description": "Superuser privileges required"},
    },
)


def _count(db: DbSession, model) -> int:
    return db.execute(select(func.count(model.id))).scalar() or 0


@router.get(
    "/database-stats",
    response_model=DatabaseStats,
    summary="Database statistics",
    description="""
    Record counts plus every book whose stored average_rating /
    total_reviews disagrees with its reviews.

    health_score is the percentage of books whose aggregate is correct.
    """,
)
@limiter.limit(settings.rate_limit_default)
def database_stats(
    request: Request,
    db: DbSession,
    _: SuperUser,
) -> DatabaseStats:
    """Report record counts and rating-aggregate drift."""
    books = _count(db, Book)

    stored = {
        book_id: (average_rating, total_reviews)
        for book_id, average_rating, total_reviews in db.execute(
            select(Book.id, Book.average_rating, Book.total_reviews)
        ).all()
    }
    drift = [
        AggregateDrift(
            book_id=expected.book_id,
            stored_average_rating=stored[expected.book_id][0],
            stored_total_reviews=stored[expected.book_id][1],
            expected_average_rating=expected.average_rating,
            expected_total_reviews=expected.total_reviews,
        )
        for expected in find_inconsistent_books(db)
    ]

    health_score = 100.0
    if books:
        health_score = round((books - len(drift)) / books * 100, 1)

    return DatabaseStats(
        statistics=RecordCounts(
            users=_count(db, User),
            books=books,
            reviews=_count(db, Review),
        ),
        inconsistent_books=drift,
        health_score=health_score,
        timestamp=datetime.now(UTC),
    )


@router.post(
    "/recalculate-ratings",
    response_model=RecalculateResult,
    summary="Recalculate all rating aggregates",
    description="Recompute average_rating and total_reviews for every book.",
)
@limiter.limit(settings.rate_limit_write)
def recalculate_ratings(
    request: Request,
    db: DbSession,
    current_user: SuperUser,
) -> RecalculateResult:
    """Rebuild every book's aggregate from its reviews."""
    updated = recalculate_all_book_aggregates(db)
    logger.info(f"Rating aggregates recalculated by user {current_user.id}")
    return RecalculateResult(books_updated=updated)


@router.delete(
    "/reset-database",
    response_model=ResetResult,
    summary="Reset database",
    description="Delete every review, book and user. Not available in production.",
)
@limiter.limit(settings.rate_limit_write)
def reset_database(
    request: Request,
    db: DbSession,
    current_user: SuperUser,
) -> ResetResult:
    """Delete all data, children first."""
    reviews = db.execute(delete(Review)).rowcount
    books = db.execute(delete(Book)).rowcount
    users = db.execute(delete(User)).rowcount
    db.commit()

    logger.warning(
        f"Database reset by user {current_user.id}: "
        f"{reviews} reviews, {books} books, {users} users deleted"
    )

    return ResetResult(
        reviews_deleted=reviews,
        books_deleted=books,
        users_deleted=users,
    )

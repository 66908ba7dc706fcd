"""
Books Service

Book CRUD plus the listing query used by the catalogue page.

Ownership: only the user who shared a book may update or delete it.
Deleting a book removes all of its reviews first; there is nothing to
recompute afterwards because the aggregate lived on the book itself.

The rating aggregate columns are not in EDITABLE_FIELDS, so nothing a
client sends can overwrite them.
"""

import logging
from collections.abc import Mapping
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session, selectinload

from bookverse.exceptions import ForbiddenError, NotFoundError, ValidationError
from bookverse.models import Book, Genre, Review

logger = logging.getLogger(__name__)

EDITABLE_FIELDS = frozenset(
    {"title", "author", "description", "genre", "publication_year"}
)

SORTABLE_FIELDS = {
    "created_at": Book.created_at,
    "title": Book.title,
    "author": Book.author,
    "publication_year": Book.publication_year,
    "average_rating": Book.average_rating,
    "total_reviews": Book.total_reviews,
}

MIN_PUBLICATION_YEAR = 1000


def max_publication_year() -> int:
    """Books may be listed up to one year ahead of publication."""
    return datetime.now(UTC).year + 1


def _clean_fields(data: Mapping[str, Any]) -> dict[str, Any]:
    unknown = set(data) - EDITABLE_FIELDS
    if unknown:
        raise ValidationError(
            f"Cannot set field(s): {', '.join(sorted(unknown))}",
            field=sorted(unknown)[0],
        )

    cleaned = dict(data)
    if "genre" in cleaned:
        genre = cleaned["genre"]
        try:
            cleaned["genre"] = Genre(genre).value
        except ValueError:
            raise ValidationError(f"Invalid genre: {genre}", field="genre") from None

    if "publication_year" in cleaned:
        year = cleaned["publication_year"]
        if (
            isinstance(year, bool)
            or not isinstance(year, int)
            or not MIN_PUBLICATION_YEAR <= year <= max_publication_year()
        ):
            raise ValidationError(
                "Invalid publication year", field="publication_year"
            )

    for field in ("title", "author", "description"):
        if field in cleaned:
            value = cleaned[field]
            if not isinstance(value, str) or not value.strip():
                raise ValidationError(f"{field.capitalize()} cannot be empty", field=field)
            cleaned[field] = value.strip()

    return cleaned


# =============================================================================
# Queries
# =============================================================================


def get_book(db: Session, book_id: int) -> Book:
    """
    Get a book by ID with its owner loaded.

    Raises:
        NotFoundError: If the book doesn't exist
    """
    stmt = select(Book).options(selectinload(Book.owner)).where(Book.id == book_id)
    book = db.execute(stmt).scalar_one_or_none()

    if book is None:
        raise NotFoundError("Book", book_id)
    return book


def list_books(
    db: Session,
    skip: int = 0,
    limit: int = 10,
    q: str | None = None,
    genre: str | None = None,
    owner_id: int | None = None,
    sort_by: str = "created_at",
    sort_order: str = "desc",
) -> tuple[list[Book], int]:
    """
    Filter, sort and page through books.

    Args:
        q: Case-insensitive substring match on title or author
        genre: Exact genre; None or "All" means any
        owner_id: Only books shared by this user
        sort_by: One of SORTABLE_FIELDS
        sort_order: "asc" or "desc"

    Returns:
        (books for this page, total matching books)
    """
    if sort_by not in SORTABLE_FIELDS:
        raise ValidationError(f"Cannot sort by {sort_by}", field="sort_by")

    conditions = []
    if q:
        term = f"%{q.lower()}%"
        conditions.append(
            or_(func.lower(Book.title).like(term), func.lower(Book.author).like(term))
        )
    if genre and genre != "All":
        conditions.append(Book.genre == genre)
    if owner_id is not None:
        conditions.append(Book.owner_id == owner_id)

    total = db.execute(select(func.count(Book.id)).where(*conditions)).scalar() or 0

    column = SORTABLE_FIELDS[sort_by]
    order = column.asc() if sort_order == "asc" else column.desc()
    stmt = (
        select(Book)
        .options(selectinload(Book.owner))
        .where(*conditions)
        .order_by(order, Book.id.desc())
        .offset(skip)
        .limit(limit)
    )
    return list(db.execute(stmt).scalars().all()), total


# =============================================================================
# Write Operations
# =============================================================================


def create_book(db: Session, owner_id: int, data: Mapping[str, Any]) -> Book:
    """
    Share a new book. Aggregates start at 0.

    Raises:
        ValidationError: Unknown or invalid field
    """
    fields = _clean_fields(data)
    missing = EDITABLE_FIELDS - set(fields)
    if missing:
        raise ValidationError(
            f"Missing field(s): {', '.join(sorted(missing))}",
            field=sorted(missing)[0],
        )

    book = Book(owner_id=owner_id, **fields)
    db.add(book)
    db.commit()
    db.refresh(book)

    logger.info(f"Book {book.id} shared by user {owner_id}: {book.title!r}")
    return get_book(db, book.id)


def update_book(
    db: Session,
    book_id: int,
    requester_id: int,
    patch: Mapping[str, Any],
) -> Book:
    """
    Apply a partial update to a book.

    Raises:
        NotFoundError: The book doesn't exist
        ForbiddenError: The requester didn't share the book
        ValidationError: Unknown or invalid field
    """
    book = get_book(db, book_id)

    if book.owner_id != requester_id:
        raise ForbiddenError("Not authorized to update this book")

    for field, value in _clean_fields(patch).items():
        setattr(book, field, value)

    db.commit()
    db.refresh(book)
    return book


def delete_book(db: Session, book_id: int, requester_id: int) -> int:
    """
    Delete a book and every review of it.

    Returns:
        Number of reviews removed

    Raises:
        NotFoundError: The book doesn't exist
        ForbiddenError: The requester didn't share the book
    """
    book = get_book(db, book_id)

    if book.owner_id != requester_id:
        raise ForbiddenError("Not authorized to delete this book")

    reviews = db.execute(select(Review).where(Review.book_id == book_id)).scalars().all()
    for review in reviews:
        db.delete(review)
    db.delete(book)
    db.commit()

    logger.info(f"Book {book_id} deleted with {len(reviews)} review(s)")
    return len(reviews)

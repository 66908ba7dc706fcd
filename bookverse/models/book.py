"""
Book Model

The central model of the BookVerse API: a book shared by a reader.

Rating Aggregates
=================
average_rating and total_reviews are DERIVED columns. They are kept in
the books table so listings can sort and filter on them without an
AVG/COUNT subquery per row, but only services/ratings.py writes them.
Create/update schemas don't declare them and the book service applies a
whitelist of editable fields.
"""

from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Float,
    ForeignKey,
    Integer,
    String,
    Text,
    func,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from bookverse.database import Base

if TYPE_CHECKING:
    from bookverse.models.review import Review
    from bookverse.models.user import User


class Genre(str, Enum):
    """Literary genres a book can be filed under."""

    FICTION = "Fiction"
    NON_FICTION = "Non-Fiction"
    MYSTERY = "Mystery"
    ROMANCE = "Romance"
    SCI_FI = "Sci-Fi"
    FANTASY = "Fantasy"
    BIOGRAPHY = "Biography"
    HISTORY = "History"
    SELF_HELP = "Self-Help"
    TECHNOLOGY = "Technology"
    POETRY = "Poetry"
    DRAMA = "Drama"
    OTHER = "Other"


class Book(Base):
    """
    Book model representing books shared with the community.

    Table: books

    Fields:
    - title: Book title (required)
    - author: Author name as free text
    - description: Summary shown on the detail page
    - genre: One of the Genre values
    - publication_year: Year of publication
    - owner_id: The user who shared the book (only they may edit/delete it)
    - average_rating / total_reviews: Derived review aggregates

    Relationships:
    - owner: Many-to-One to User
    - reviews: One-to-Many, deleted together with the book

    Example:
        book = Book(
            title="1984",
            author="George Orwell",
            description="A dystopian novel set in a totalitarian society.",
            genre=Genre.FICTION.value,
            publication_year=1949,
            owner_id=user.id,
        )
    """

    __tablename__ = "books"

    # -------------------------------------------------------------------------
    # Primary Key
    # -------------------------------------------------------------------------
    id: Mapped[int] = mapped_column(primary_key=True)

    # -------------------------------------------------------------------------
    # Basic Fields
    # -------------------------------------------------------------------------
    title: Mapped[str] = mapped_column(
        String(200),
        index=True,
        nullable=False,
        comment="Book title"
    )

    author: Mapped[str] = mapped_column(
        String(100),
        index=True,
        nullable=False,
        comment="Author name"
    )

    description: Mapped[str] = mapped_column(
        Text,
        nullable=False,
        comment="Book description or summary"
    )

    genre: Mapped[str] = mapped_column(
        String(30),
        index=True,
        nullable=False,
        comment="Literary genre (see Genre enum)"
    )

    publication_year: Mapped[int] = mapped_column(
        Integer,
        index=True,
        nullable=False,
        comment="Year of publication"
    )

    owner_id: Mapped[int] = mapped_column(
        Integer,
        ForeignKey("users.id", ondelete="CASCADE"),
        index=True,
        nullable=False,
        comment="User who shared the book"
    )

    # -------------------------------------------------------------------------
    # Derived Rating Aggregates (written only by services.ratings)
    # -------------------------------------------------------------------------
    average_rating: Mapped[float] = mapped_column(
        Float,
        default=0.0,
        server_default="0",
        index=True,
        nullable=False,
        comment="Mean review rating rounded to one decimal, 0 if no reviews"
    )

    total_reviews: Mapped[int] = mapped_column(
        Integer,
        default=0,
        server_default="0",
        index=True,
        nullable=False,
        comment="Number of reviews for this book"
    )

    # -------------------------------------------------------------------------
    # Timestamps
    # -------------------------------------------------------------------------
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        index=True,
        nullable=False,
    )

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        onupdate=func.now(),
        nullable=False,
    )

    # -------------------------------------------------------------------------
    # Relationships
    # -------------------------------------------------------------------------
    owner: Mapped["User"] = relationship(
        "User",
        back_populates="books",
    )

    reviews: Mapped[list["Review"]] = relationship(
        "Review",
        back_populates="book",
        cascade="all, delete-orphan",
    )

    __table_args__ = (
        CheckConstraint(
            "average_rating >= 0 AND average_rating <= 5",
            name="ck_book_average_rating_range",
        ),
        CheckConstraint("total_reviews >= 0", name="ck_book_total_reviews_positive"),
    )

    # -------------------------------------------------------------------------
    # Display Labels
    # -------------------------------------------------------------------------
    @property
    def popularity_level(self) -> str:
        """Label derived from how many reviews the book has."""
        count = self.total_reviews or 0
        if count >= 100:
            return "Community Favorite"
        if count >= 50:
            return "Highly Discussed"
        if count >= 20:
            return "Well-Reviewed"
        if count >= 5:
            return "Getting Attention"
        return "Newly Discovered"

    @property
    def quality_indicator(self) -> str:
        """Label derived from the average rating."""
        rating = self.average_rating or 0.0
        if rating >= 4.5:
            return "Exceptional"
        if rating >= 4.0:
            return "Excellent"
        if rating >= 3.5:
            return "Very Good"
        if rating >= 3.0:
            return "Good"
        if rating >= 2.0:
            return "Fair"
        if rating > 0:
            return "Needs More Reviews"
        return "Awaiting First Review"

    def __repr__(self) -> str:
        return f"Book(id={self.id}, title='{self.title}', author='{self.author}')"

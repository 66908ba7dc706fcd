"""
SQLAlchemy Models Package

Model Relationships:
- User -> Book: One-to-Many (the user who shared the book owns it)
- User -> Review: One-to-Many (a user writes many reviews)
- Book -> Review: One-to-Many (a book has many reviews, one per user)

Import all models here to:
1. Make them available as: from bookverse.models import Book, Review, User
2. Ensure Alembic discovers them for migrations
"""

from bookverse.models.user import User
from bookverse.models.book import Book, Genre
from bookverse.models.review import Review

__all__ = [
    "User",
    "Book",
    "Genre",
    "Review",
]

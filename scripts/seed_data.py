#!/usr/bin/env python3
"""
Database Seed Script

Populates the database with demo readers, books and reviews for local
development.

USAGE:
    # From the project root with the virtualenv active
    python scripts/seed_data.py

Everything is created through the service layer, so reviews go through
the same validation and aggregate refresh as API requests. A final
recalculation pass rebuilds every book's average_rating/total_reviews.
"""

import sys
from pathlib import Path

# Add project root to Python path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from sqlalchemy import delete
from sqlalchemy.orm import Session

from bookverse.database import SessionLocal, create_tables
from bookverse.models import Book, Genre, Review, User
from bookverse.services.books import create_book
from bookverse.services.ratings import recalculate_all_book_aggregates
from bookverse.services.reviews import create_review
from bookverse.services.security import hash_password

DEMO_PASSWORD = "bookverse123"


def clear_data(db: Session) -> None:
    """Clear all existing data from the database, children first."""
    print("Clearing existing data...")
    db.execute(delete(Review))
    db.execute(delete(Book))
    db.execute(delete(User))
    db.commit()
    print("Data cleared.")


def create_users(db: Session) -> dict[str, User]:
    """Create demo readers plus one superuser."""
    print("Creating users...")
    users_data = [
        {"email": "admin@bookverse.dev", "full_name": "BookVerse Admin", "is_superuser": True},
        {"email": "alice@bookverse.dev", "full_name": "Alice Reader"},
        {"email": "bob@bookverse.dev", "full_name": "Bob Bookworm"},
        {"email": "carol@bookverse.dev", "full_name": "Carol Critic"},
    ]

    users = {}
    for data in users_data:
        user = User(hashed_password=hash_password(DEMO_PASSWORD), **data)
        db.add(user)
        users[data["email"]] = user

    db.commit()
    for user in users.values():
        db.refresh(user)

    print(f"Created {len(users)} users (password: {DEMO_PASSWORD}).")
    return users


def create_books(db: Session, users: dict[str, User]) -> list[Book]:
    """Create demo books shared by the readers."""
    print("Creating books...")
    books_data = [
        ("alice@bookverse.dev", {
            "title": "1984",
            "author": "George Orwell",
            "description": "A dystopian novel about surveillance, propaganda and "
                           "a man who dares to think for himself.",
            "genre": Genre.FICTION,
            "publication_year": 1949,
        }),
        ("alice@bookverse.dev", {
            "title": "Pride and Prejudice",
            "author": "Jane Austen",
            "description": "Elizabeth Bennet navigates manners, marriage and "
                           "misjudgement in Regency England.",
            "genre": Genre.ROMANCE,
            "publication_year": 1813,
        }),
        ("bob@bookverse.dev", {
            "title": "The Hobbit",
            "author": "J.R.R. Tolkien",
            "description": "Bilbo Baggins is swept into a quest to reclaim a "
                           "dwarf kingdom from a dragon.",
            "genre": Genre.FANTASY,
            "publication_year": 1937,
        }),
        ("bob@bookverse.dev", {
            "title": "Foundation",
            "author": "Isaac Asimov",
            "description": "A mathematician predicts the fall of a galactic empire "
                           "and plans to shorten the dark age that follows.",
            "genre": Genre.SCI_FI,
            "publication_year": 1951,
        }),
        ("carol@bookverse.dev", {
            "title": "Murder on the Orient Express",
            "author": "Agatha Christie",
            "description": "Hercule Poirot investigates a murder aboard a train "
                           "stranded in the snow.",
            "genre": Genre.MYSTERY,
            "publication_year": 1934,
        }),
        ("carol@bookverse.dev", {
            "title": "A Brief History of Time",
            "author": "Stephen Hawking",
            "description": "Black holes, the big bang and the nature of time, "
                           "explained for the general reader.",
            "genre": Genre.NON_FICTION,
            "publication_year": 1988,
        }),
    ]

    books = [
        create_book(db, owner_id=users[email].id, data=data)
        for email, data in books_data
    ]

    print(f"Created {len(books)} books.")
    return books


def create_reviews(db: Session, users: dict[str, User], books: list[Book]) -> int:
    """Have every reader except the owner review each book."""
    print("Creating reviews...")
    ratings = [5, 4, 3, 4, 5, 2, 4, 5, 3]
    texts = {
        5: "An absolute favourite. I would recommend it to anyone.",
        4: "Really enjoyed it, a few slow chapters aside.",
        3: "Solid, but it didn't quite live up to the hype for me.",
        2: "Hard going. Some good ideas buried in there.",
    }

    readers = [u for u in users.values() if not u.is_superuser]
    count = 0
    for book in books:
        for reader in readers:
            if reader.id == book.owner_id:
                continue
            rating = ratings[count % len(ratings)]
            create_review(db, book.id, reader.id, rating, texts[rating])
            count += 1

    print(f"Created {count} reviews.")
    return count


def seed_database(clear_existing: bool = True) -> None:
    """
    Main function to seed the database.

    Args:
        clear_existing: If True, clears existing data before seeding.
    """
    print("=" * 60)
    print("Starting database seed...")
    print("=" * 60)

    # Create tables if they don't exist
    create_tables()

    db = SessionLocal()

    try:
        if clear_existing:
            clear_data(db)

        users = create_users(db)
        books = create_books(db, users)
        review_count = create_reviews(db, users, books)
        updated = recalculate_all_book_aggregates(db)

        print("=" * 60)
        print("Database seeding completed successfully!")
        print("=" * 60)
        print("\nSummary:")
        print(f"  - Users: {len(users)}")
        print(f"  - Books: {len(books)}")
        print(f"  - Reviews: {review_count}")
        print(f"  - Aggregates recalculated: {updated}")
        print("\nAPI documentation at http://localhost:5000/docs")

    except Exception as e:
        print(f"Error seeding database: {e}")
        db.rollback()
        raise
    finally:
        db.close()


if __name__ == "__main__":
    seed_database()

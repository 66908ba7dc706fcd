"""
pytest Fixtures for BookVerse API Tests

Shared fixtures used across all test files.

FIXTURE SCOPES:
- session scope for the engine (created once)
- function scope for sessions and sample data (isolation between tests)

ISOLATION:
Each test runs inside one outer transaction that is rolled back at the
end. The Session joins it with join_transaction_mode="create_savepoint",
so service-level commit() releases a SAVEPOINT and rollback() (used by
the duplicate-review path) only undoes work since the last SAVEPOINT.
"""

# =============================================================================
# TEST ENVIRONMENT SETUP
# =============================================================================
# IMPORTANT: Set environment variables BEFORE importing the app
import os

os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["SECRET_KEY"] = "test-secret-key-for-unit-tests-at-least-32-characters-long"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "development"

from collections.abc import Generator

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from bookverse.database import Base, get_db
from bookverse.main import app
from bookverse.models import Book, Genre, Review, User
from bookverse.services import reviews as review_service
from bookverse.services.security import create_access_token, hash_password

# =============================================================================
# DATABASE FIXTURES
# =============================================================================
# SQLite in-memory: fast, isolated, no external database needed.


@pytest.fixture(scope="session")
def engine():
    """
    Create a SQLite in-memory database engine.

    StaticPool keeps the single connection alive for the whole session;
    without it the in-memory database would disappear between connections.
    """
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    # pysqlite's own transaction handling breaks SAVEPOINT; let SQLAlchemy
    # emit BEGIN itself.
    @event.listens_for(engine, "connect")
    def do_connect(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def do_begin(conn):
        conn.exec_driver_sql("BEGIN")

    Base.metadata.create_all(bind=engine)

    yield engine

    Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def db_session(engine) -> Generator[Session, None, None]:
    """
    Create a fresh database session for each test.

    Everything the test (and the app) commits is rolled back afterwards.
    """
    connection = engine.connect()
    transaction = connection.begin()

    TestSessionLocal = sessionmaker(
        autocommit=False,
        autoflush=False,
        bind=connection,
        join_transaction_mode="create_savepoint",
    )
    session = TestSessionLocal()

    yield session

    session.close()
    transaction.rollback()
    connection.close()


@pytest.fixture(scope="function")
def client(db_session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client that uses the test session.

    We override the get_db dependency so every request shares db_session.
    """

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


# =============================================================================
# AUTH HELPERS
# =============================================================================


def get_auth_header(user: User) -> dict:
    """Create an Authorization header carrying an access token for user."""
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


# =============================================================================
# SAMPLE DATA FIXTURES
# =============================================================================


def make_user(db: Session, email: str, full_name: str, **extra) -> User:
    user = User(
        email=email,
        hashed_password=hash_password("secret123"),
        full_name=full_name,
        is_active=True,
        **extra,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_book(db: Session, owner: User, **overrides) -> Book:
    fields = {
        "title": "1984",
        "author": "George Orwell",
        "description": "A dystopian novel set in a totalitarian society.",
        "genre": Genre.FICTION.value,
        "publication_year": 1949,
    }
    fields.update(overrides)
    book = Book(owner_id=owner.id, **fields)
    db.add(book)
    db.commit()
    db.refresh(book)
    return book


@pytest.fixture
def sample_user(db_session: Session) -> User:
    """Create a sample user; owns sample_book."""
    return make_user(db_session, "reader@example.com", "Test Reader")


@pytest.fixture
def second_user(db_session: Session) -> User:
    """Create a second user for ownership scenarios."""
    return make_user(db_session, "second@example.com", "Second Reader")


@pytest.fixture
def third_user(db_session: Session) -> User:
    return make_user(db_session, "third@example.com", "Third Reader")


@pytest.fixture
def superuser(db_session: Session) -> User:
    """Create a superuser for admin scenarios."""
    return make_user(db_session, "admin@example.com", "Admin User", is_superuser=True)


@pytest.fixture
def sample_book(db_session: Session, sample_user: User) -> Book:
    """Create a sample book shared by sample_user."""
    return make_book(db_session, sample_user)


@pytest.fixture
def multiple_books(db_session: Session, sample_user: User, second_user: User) -> list[Book]:
    """Create books across genres and owners for listing tests."""
    specs = [
        (sample_user, {"title": "Dune", "author": "Frank Herbert",
                       "genre": Genre.SCI_FI.value, "publication_year": 1965}),
        (sample_user, {"title": "Emma", "author": "Jane Austen",
                       "genre": Genre.ROMANCE.value, "publication_year": 1815}),
        (second_user, {"title": "The Hobbit", "author": "J.R.R. Tolkien",
                       "genre": Genre.FANTASY.value, "publication_year": 1937}),
        (second_user, {"title": "Animal Farm", "author": "George Orwell",
                       "genre": Genre.FICTION.value, "publication_year": 1945}),
        (second_user, {"title": "Foundation", "author": "Isaac Asimov",
                       "genre": Genre.SCI_FI.value, "publication_year": 1951}),
    ]
    return [make_book(db_session, owner, **fields) for owner, fields in specs]


@pytest.fixture
def sample_review(db_session: Session, sample_book: Book, second_user: User) -> Review:
    """A 4-star review of sample_book by second_user, created through the service."""
    return review_service.create_review(
        db_session,
        book_id=sample_book.id,
        user_id=second_user.id,
        rating=4,
        text="I really enjoyed reading this book.",
    )

"""
Tests for the book rating aggregate

The stored average_rating / total_reviews must always equal what the
book's reviews say, after every create, update and delete.
"""

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from bookverse.exceptions import AggregateRecomputeError, ForbiddenError, NotFoundError
from bookverse.models import Book, User
from bookverse.services import ratings as rating_service
from bookverse.services import reviews as review_service
from tests.conftest import make_user


def reload(db: Session, book: Book) -> Book:
    db.expire_all()
    return db.get(Book, book.id)


# =============================================================================
# Rounding
# =============================================================================


class TestRoundAverage:
    """Tests for round_average()"""

    @pytest.mark.parametrize(
        "rating_sum,count,expected",
        [
            (12, 3, 4.0),
            (9, 2, 4.5),
            (10, 3, 3.3),
            (11, 3, 3.7),
            (17, 4, 4.3),  # 4.25 rounds up, not to even
            (5, 1, 5.0),
        ],
    )
    def test_rounds_half_up_to_one_decimal(self, rating_sum, count, expected):
        assert rating_service.round_average(rating_sum, count) == expected

    def test_no_reviews_is_zero(self):
        assert rating_service.round_average(0, 0) == 0.0


# =============================================================================
# Recompute
# =============================================================================


class TestRecomputeBookAggregate:
    """Tests for recompute_book_aggregate() and refresh_book_aggregate()"""

    def test_new_book_starts_at_zero(self, db_session: Session, sample_book: Book):
        book = reload(db_session, sample_book)
        assert book.average_rating == 0
        assert book.total_reviews == 0

    def test_recompute_fixes_stale_values(self, db_session: Session, sample_review):
        book = db_session.get(Book, sample_review.book_id)
        book.average_rating = 1.0
        book.total_reviews = 9
        db_session.commit()

        result = rating_service.recompute_book_aggregate(db_session, book.id)

        assert result.average_rating == 4.0
        assert result.total_reviews == 1
        book = reload(db_session, book)
        assert book.average_rating == 4.0
        assert book.total_reviews == 1

    def test_recompute_touches_only_aggregate_fields(
        self, db_session: Session, sample_review
    ):
        book = db_session.get(Book, sample_review.book_id)
        before = (book.title, book.author, book.description, book.genre, book.owner_id)

        rating_service.recompute_book_aggregate(db_session, book.id)

        book = reload(db_session, book)
        assert (book.title, book.author, book.description, book.genre, book.owner_id) == before

    def test_recompute_missing_book_raises(self, db_session: Session):
        with pytest.raises(AggregateRecomputeError) as exc_info:
            rating_service.recompute_book_aggregate(db_session, 99999)

        assert exc_info.value.book_id == 99999

    def test_refresh_missing_book_is_a_no_op(self, db_session: Session):
        assert rating_service.refresh_book_aggregate(db_session, 99999) is None


class TestAggregateLifecycle:
    """The stored aggregate follows every review mutation."""

    def test_create_update_delete_sequence(
        self,
        db_session: Session,
        sample_book: Book,
        sample_user: User,
        second_user: User,
        third_user: User,
    ):
        r5 = review_service.create_review(db_session, sample_book.id, sample_user.id, 5, "Loved it")
        r4 = review_service.create_review(db_session, sample_book.id, second_user.id, 4, "Pretty good")
        r3 = review_service.create_review(db_session, sample_book.id, third_user.id, 3, "It was fine")

        book = reload(db_session, sample_book)
        assert (book.average_rating, book.total_reviews) == (4.0, 3)

        review_service.delete_review(db_session, r3.id, third_user.id)
        book = reload(db_session, sample_book)
        assert (book.average_rating, book.total_reviews) == (4.5, 2)

        review_service.update_review(db_session, r4.id, second_user.id, {"rating": 2})
        book = reload(db_session, sample_book)
        assert (book.average_rating, book.total_reviews) == (3.5, 2)

        review_service.delete_review(db_session, r5.id, sample_user.id)
        review_service.delete_review(db_session, r4.id, second_user.id)
        book = reload(db_session, sample_book)
        assert (book.average_rating, book.total_reviews) == (0, 0)

    def test_text_only_update_keeps_aggregate(
        self, db_session: Session, sample_review
    ):
        review_service.update_review(
            db_session, sample_review.id, sample_review.user_id, {"text": "Changed my mind, still good"}
        )

        book = db_session.get(Book, sample_review.book_id)
        assert (book.average_rating, book.total_reviews) == (4.0, 1)

    def test_failed_write_leaves_aggregate(
        self, db_session: Session, sample_review, sample_user: User
    ):
        with pytest.raises(ForbiddenError):
            review_service.update_review(db_session, sample_review.id, sample_user.id, {"rating": 1})

        book = db_session.get(Book, sample_review.book_id)
        assert (book.average_rating, book.total_reviews) == (4.0, 1)


# =============================================================================
# Maintenance helpers
# =============================================================================


class TestRecalculateAll:
    """Tests for recalculate_all_book_aggregates() and find_inconsistent_books()"""

    def test_consistent_database_has_no_drift(self, db_session: Session, sample_review):
        assert rating_service.find_inconsistent_books(db_session) == []

    def test_drift_is_reported_with_expected_values(
        self, db_session: Session, sample_review
    ):
        book = db_session.get(Book, sample_review.book_id)
        book.total_reviews = 7
        db_session.commit()

        drift = rating_service.find_inconsistent_books(db_session)

        assert len(drift) == 1
        assert drift[0].book_id == book.id
        assert drift[0].total_reviews == 1
        assert drift[0].average_rating == 4.0

    def test_recalculate_repairs_every_book(
        self, db_session: Session, multiple_books: list[Book]
    ):
        for book in multiple_books:
            book.average_rating = 5.0
            book.total_reviews = 3
        db_session.commit()

        updated = rating_service.recalculate_all_book_aggregates(db_session)

        assert updated == len(multiple_books)
        assert rating_service.find_inconsistent_books(db_session) == []


class TestRatingStats:
    """Tests for get_rating_stats() and GET /api/v1/books/{book_id}/rating"""

    def test_distribution(
        self, db_session: Session, sample_book: Book, sample_user: User, second_user: User
    ):
        review_service.create_review(db_session, sample_book.id, sample_user.id, 5, "Great")
        review_service.create_review(db_session, sample_book.id, second_user.id, 2, "Meh")

        stats = rating_service.get_rating_stats(db_session, sample_book.id)

        assert stats["average_rating"] == 3.5
        assert stats["total_reviews"] == 2
        assert stats["rating_distribution"] == {1: 0, 2: 1, 3: 0, 4: 0, 5: 1}

    def test_stats_missing_book(self, db_session: Session):
        with pytest.raises(NotFoundError):
            rating_service.get_rating_stats(db_session, 99999)

    def test_rating_endpoint(self, client: TestClient, sample_review):
        response = client.get(f"/api/v1/books/{sample_review.book_id}/rating")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["average_rating"] == 4.0
        assert data["total_reviews"] == 1
        assert data["rating_distribution"]["4"] == 1

    def test_rating_endpoint_matches_stored_aggregate(
        self, client: TestClient, db_session: Session, sample_book: Book
    ):
        for i, rating in enumerate([5, 4, 4, 2]):
            user = make_user(db_session, f"rater{i}@example.com", f"Rater {i}")
            review_service.create_review(db_session, sample_book.id, user.id, rating, "Some thoughts")

        stats = client.get(f"/api/v1/books/{sample_book.id}/rating").json()
        book = client.get(f"/api/v1/books/{sample_book.id}").json()

        assert stats["average_rating"] == book["average_rating"] == 3.8
        assert stats["total_reviews"] == book["total_reviews"] == 4

    def test_rating_endpoint_not_found(self, client: TestClient):
        response = client.get("/api/v1/books/99999/rating")

        assert response.status_code == status.HTTP_404_NOT_FOUND

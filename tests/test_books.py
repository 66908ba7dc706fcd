"""
Tests for Books API Endpoints

This module tests the /api/v1/books endpoints and the books service.

TEST NAMING CONVENTION:
- test_<action>_<scenario>
- Examples: test_create_book_success, test_get_book_not_found
"""

from datetime import UTC, datetime

import pytest
from fastapi import status
from sqlalchemy import func, select

from bookverse.exceptions import ForbiddenError, ValidationError
from bookverse.models import Book, Review
from bookverse.services import books as book_service
from bookverse.services import reviews as review_service
from tests.conftest import get_auth_header

BOOK_DATA = {
    "title": "Brave New World",
    "author": "Aldous Huxley",
    "description": "A genetically engineered society trades freedom for comfort.",
    "genre": "Fiction",
    "publication_year": 1932,
}


class TestListBooks:
    """Tests for GET /api/v1/books/ endpoint."""

    def test_list_books_empty(self, client):
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["items"] == []
        assert data["total"] == 0
        assert data["page"] == 1
        assert data["pages"] == 0
        assert data["has_next"] is False
        assert data["has_prev"] is False

    def test_list_books_with_data(self, client, sample_book):
        response = client.get("/api/v1/books/")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["total"] == 1
        item = data["items"][0]
        assert item["title"] == "1984"
        assert item["owner"]["full_name"] == "Test Reader"
        assert item["average_rating"] == 0
        assert item["total_reviews"] == 0
        assert item["popularity_level"] == "Newly Discovered"
        assert item["quality_indicator"] == "Awaiting First Review"

    def test_list_books_pagination(self, client, multiple_books):
        response = client.get("/api/v1/books/?page=1&per_page=2")
        data = response.json()
        assert len(data["items"]) == 2
        assert data["total"] == 5
        assert data["pages"] == 3
        assert data["has_next"] is True
        assert data["has_prev"] is False

        response = client.get("/api/v1/books/?page=3&per_page=2")
        data = response.json()
        assert len(data["items"]) == 1
        assert data["has_next"] is False
        assert data["has_prev"] is True

    def test_list_books_invalid_pagination(self, client):
        assert client.get("/api/v1/books/?page=0").status_code == 422
        assert client.get("/api/v1/books/?per_page=101").status_code == 422

    def test_search_matches_title_and_author(self, client, multiple_books):
        data = client.get("/api/v1/books/?q=ORWELL").json()
        assert [b["title"] for b in data["items"]] == ["Animal Farm"]

        data = client.get("/api/v1/books/?q=hobb").json()
        assert [b["title"] for b in data["items"]] == ["The Hobbit"]

    def test_filter_by_genre(self, client, multiple_books):
        data = client.get("/api/v1/books/?genre=Sci-Fi&sort_by=title&sort_order=asc").json()
        assert [b["title"] for b in data["items"]] == ["Dune", "Foundation"]

    def test_genre_all_means_any(self, client, multiple_books):
        data = client.get("/api/v1/books/?genre=All").json()
        assert data["total"] == 5

    def test_unknown_genre_rejected(self, client):
        assert client.get("/api/v1/books/?genre=Cookbooks").status_code == 422

    def test_sort_by_publication_year(self, client, multiple_books):
        data = client.get("/api/v1/books/?sort_by=publication_year&sort_order=asc").json()
        years = [b["publication_year"] for b in data["items"]]
        assert years == sorted(years)

    def test_sort_by_average_rating(
        self, client, db_session, multiple_books, sample_user, second_user
    ):
        dune, emma = multiple_books[0], multiple_books[1]
        review_service.create_review(db_session, dune.id, second_user.id, 5, "Spice!")
        review_service.create_review(db_session, emma.id, second_user.id, 2, "Not for me")

        data = client.get("/api/v1/books/?sort_by=average_rating&sort_order=desc").json()
        titles = [b["title"] for b in data["items"]]
        assert titles[:2] == ["Dune", "Emma"]

    def test_invalid_sort_field_rejected(self, client):
        assert client.get("/api/v1/books/?sort_by=owner_id").status_code == 422


class TestGetBook:
    """Tests for GET /api/v1/books/{book_id} endpoint."""

    def test_get_book_success(self, client, sample_book):
        response = client.get(f"/api/v1/books/{sample_book.id}")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["id"] == sample_book.id
        assert data["genre"] == "Fiction"
        assert data["owner_id"] == sample_book.owner_id

    def test_get_book_not_found(self, client):
        response = client.get("/api/v1/books/99999")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json() == {
            "detail": "Book with id 99999 not found",
            "error": "not_found",
            "details": {"resource": "Book", "resource_id": 99999},
        }

    def test_get_book_labels_follow_aggregate(self, client, db_session, sample_review):
        book = db_session.get(Book, sample_review.book_id)
        data = client.get(f"/api/v1/books/{book.id}").json()

        assert data["average_rating"] == 4.0
        assert data["quality_indicator"] == "Excellent"
        assert data["popularity_level"] == "Newly Discovered"


class TestCreateBook:
    """Tests for POST /api/v1/books/ endpoint."""

    def test_create_book_success(self, client, sample_user):
        response = client.post(
            "/api/v1/books/", json=BOOK_DATA, headers=get_auth_header(sample_user)
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["title"] == "Brave New World"
        assert data["owner_id"] == sample_user.id
        assert data["average_rating"] == 0
        assert data["total_reviews"] == 0

    def test_create_book_unauthenticated(self, client):
        response = client.post("/api/v1/books/", json=BOOK_DATA)

        assert response.status_code == status.HTTP_401_UNAUTHORIZED

    def test_create_book_ignores_aggregate_fields(self, client, sample_user):
        payload = {**BOOK_DATA, "average_rating": 5.0, "total_reviews": 999}

        response = client.post(
            "/api/v1/books/", json=payload, headers=get_auth_header(sample_user)
        )

        assert response.status_code == status.HTTP_201_CREATED
        data = response.json()
        assert data["average_rating"] == 0
        assert data["total_reviews"] == 0

    @pytest.mark.parametrize(
        "field,value",
        [
            ("title", ""),
            ("title", "   "),
            ("author", "A"),
            ("description", "Too short"),
            ("genre", "Cookbooks"),
            ("publication_year", 999),
            ("publication_year", datetime.now(UTC).year + 2),
        ],
    )
    def test_create_book_invalid_field(self, client, sample_user, field, value):
        payload = {**BOOK_DATA, field: value}

        response = client.post(
            "/api/v1/books/", json=payload, headers=get_auth_header(sample_user)
        )

        assert response.status_code == status.HTTP_422_UNPROCESSABLE_ENTITY

    def test_create_book_next_year_allowed(self, client, sample_user):
        payload = {**BOOK_DATA, "publication_year": datetime.now(UTC).year + 1}

        response = client.post(
            "/api/v1/books/", json=payload, headers=get_auth_header(sample_user)
        )

        assert response.status_code == status.HTTP_201_CREATED


class TestUpdateBook:
    """Tests for PUT /api/v1/books/{book_id} endpoint."""

    def test_update_book_title(self, client, sample_book, sample_user):
        response = client.put(
            f"/api/v1/books/{sample_book.id}",
            json={"title": "Nineteen Eighty-Four"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["title"] == "Nineteen Eighty-Four"
        assert data["author"] == "George Orwell"

    def test_update_book_not_owner(self, client, sample_book, second_user):
        response = client.put(
            f"/api/v1/books/{sample_book.id}",
            json={"title": "Mine Now"},
            headers=get_auth_header(second_user),
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert response.json()["detail"] == "Not authorized to update this book"

    def test_update_book_cannot_touch_aggregate(
        self, client, db_session, sample_review, sample_user
    ):
        response = client.put(
            f"/api/v1/books/{sample_review.book_id}",
            json={"average_rating": 1.0, "total_reviews": 50, "genre": "Drama"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()
        assert data["genre"] == "Drama"
        assert data["average_rating"] == 4.0
        assert data["total_reviews"] == 1

    def test_update_book_not_found(self, client, sample_user):
        response = client.put(
            "/api/v1/books/99999",
            json={"title": "Ghost"},
            headers=get_auth_header(sample_user),
        )

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestDeleteBook:
    """Tests for DELETE /api/v1/books/{book_id} endpoint."""

    def test_delete_book_success(self, client, sample_book, sample_user):
        response = client.delete(
            f"/api/v1/books/{sample_book.id}", headers=get_auth_header(sample_user)
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        assert client.get(f"/api/v1/books/{sample_book.id}").status_code == 404

    def test_delete_book_removes_reviews(
        self, client, db_session, sample_review, sample_user, third_user
    ):
        book_id = sample_review.book_id
        review_service.create_review(db_session, book_id, third_user.id, 2, "Not my thing")

        response = client.delete(
            f"/api/v1/books/{book_id}", headers=get_auth_header(sample_user)
        )

        assert response.status_code == status.HTTP_204_NO_CONTENT
        orphans = db_session.execute(
            select(func.count(Review.id)).where(Review.book_id == book_id)
        ).scalar()
        assert orphans == 0

    def test_delete_book_not_owner(self, client, sample_review, second_user):
        response = client.delete(
            f"/api/v1/books/{sample_review.book_id}", headers=get_auth_header(second_user)
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN
        assert client.get(f"/api/v1/reviews/{sample_review.id}").status_code == 200

    def test_delete_book_not_found(self, client, sample_user):
        response = client.delete("/api/v1/books/99999", headers=get_auth_header(sample_user))

        assert response.status_code == status.HTTP_404_NOT_FOUND


class TestBookService:
    """Tests for the books service called directly."""

    def test_create_rejects_aggregate_fields(self, db_session, sample_user):
        with pytest.raises(ValidationError) as exc_info:
            book_service.create_book(
                db_session, sample_user.id, {**BOOK_DATA, "average_rating": 5.0}
            )

        assert exc_info.value.field == "average_rating"

    def test_create_requires_every_field(self, db_session, sample_user):
        data = {k: v for k, v in BOOK_DATA.items() if k != "genre"}

        with pytest.raises(ValidationError) as exc_info:
            book_service.create_book(db_session, sample_user.id, data)

        assert exc_info.value.field == "genre"

    def test_update_rejects_aggregate_fields(self, db_session, sample_book, sample_user):
        with pytest.raises(ValidationError):
            book_service.update_book(
                db_session, sample_book.id, sample_user.id, {"total_reviews": 3}
            )

    def test_delete_returns_review_count(
        self, db_session, sample_review, sample_user
    ):
        removed = book_service.delete_book(db_session, sample_review.book_id, sample_user.id)

        assert removed == 1
        assert db_session.execute(select(func.count(Review.id))).scalar() == 0

    def test_delete_forbidden_keeps_everything(
        self, db_session, sample_review, second_user
    ):
        with pytest.raises(ForbiddenError):
            book_service.delete_book(db_session, sample_review.book_id, second_user.id)

        assert db_session.get(Book, sample_review.book_id) is not None
        assert db_session.execute(select(func.count(Review.id))).scalar() == 1

    def test_list_by_owner(self, db_session, multiple_books, second_user):
        books, total = book_service.list_books(db_session, owner_id=second_user.id)

        assert total == 3
        assert {b.owner_id for b in books} == {second_user.id}

    def test_list_unknown_sort_field(self, db_session):
        with pytest.raises(ValidationError):
            book_service.list_books(db_session, sort_by="hashed_password")

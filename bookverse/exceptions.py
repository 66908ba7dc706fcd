"""
Domain Exceptions

Errors raised by the service layer. Services know nothing about HTTP;
each exception carries the status code the API should answer with, and
a single handler registered in main.py renders them.

Taxonomy:
- ValidationError: bad rating/text/field values (400, nothing written)
- NotFoundError: missing book/review/user (404, nothing written)
- ForbiddenError: requester does not own the record (403, nothing written)
- DuplicateReviewError: second review for the same (book, user) (400)
- AggregateRecomputeError: book vanished before its aggregate was
  recomputed; caught and logged by the review write operations, never
  returned to a client
"""

from typing import Any

from fastapi import status


class BookVerseError(Exception):
    """Base class for all domain errors."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    code: str = "internal_error"

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(BookVerseError):
    """A field value failed a business rule."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "validation_error"

    def __init__(self, message: str, field: str | None = None):
        super().__init__(message, {"field": field} if field else None)
        self.field = field


class NotFoundError(BookVerseError):
    """Resource not found."""

    status_code = status.HTTP_404_NOT_FOUND
    code = "not_found"

    def __init__(self, resource: str, resource_id: Any = None):
        message = f"{resource} not found"
        if resource_id is not None:
            message = f"{resource} with id {resource_id} not found"
        super().__init__(
            message,
            {"resource": resource, "resource_id": resource_id},
        )
        self.resource = resource
        self.resource_id = resource_id


class ForbiddenError(BookVerseError):
    """The requester is not allowed to mutate this resource."""

    status_code = status.HTTP_403_FORBIDDEN
    code = "forbidden"


class DuplicateReviewError(BookVerseError):
    """The user has already reviewed this book."""

    status_code = status.HTTP_400_BAD_REQUEST
    code = "duplicate_review"

    def __init__(self, book_id: int, user_id: int):
        super().__init__(
            "You have already reviewed this book. "
            "You can update your existing review.",
            {"book_id": book_id},
        )
        self.book_id = book_id
        self.user_id = user_id


class AggregateRecomputeError(BookVerseError):
    """The book disappeared before its rating aggregate could be written."""

    code = "aggregate_recompute_failed"

    def __init__(self, book_id: int):
        super().__init__(
            f"Book {book_id} no longer exists; rating aggregate not updated",
            {"book_id": book_id},
        )
        self.book_id = book_id

"""
Reviews Router

Endpoints for a single review:
- GET    /reviews/{review_id}  - Get a specific review
- PUT    /reviews/{review_id}  - Update a review (author only)
- DELETE /reviews/{review_id}  - Delete a review (author only)

Listing and creating reviews are book-scoped and live in the books router.

Business Rules:
- Only the review author can update or delete their review
- Every change refreshes the book's average_rating and total_reviews
"""

from fastapi import APIRouter, Request, status

from bookverse.config import get_settings
from bookverse.dependencies import ActiveUser, DbSession
from bookverse.schemas.review import ReviewResponse, ReviewUpdate
from bookverse.services import reviews as review_service
from bookverse.services.rate_limiter import limiter

settings = get_settings()

router = APIRouter(
    prefix="/reviews",
    tags=["Reviews"],
    responses={
        404: {"description": "Review not found"},
    },
)


@router.get(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Get a review",
    description="Get a specific review by ID.",
)
@limiter.limit(settings.rate_limit_default)
def get_review(
    request: Request,
    review_id: int,
    db: DbSession,
) -> ReviewResponse:
    """Get a single review with its author and book."""
    return ReviewResponse.model_validate(review_service.get_review(db, review_id))


@router.put(
    "/{review_id}",
    response_model=ReviewResponse,
    summary="Update a review",
    description="Update your own review. Only the fields sent are changed.",
    responses={403: {"description": "Not the author of this review"}},
)
@limiter.limit(settings.rate_limit_write)
def update_review(
    request: Request,
    review_id: int,
    review_data: ReviewUpdate,
    db: DbSession,
    current_user: ActiveUser,
) -> ReviewResponse:
    """
    Update a review.

    Only the author can update. The book's rating aggregate is
    recomputed afterwards.
    """
    review = review_service.update_review(
        db,
        review_id=review_id,
        requester_id=current_user.id,
        patch=review_data.model_dump(exclude_unset=True, exclude_none=True),
    )
    return ReviewResponse.model_validate(review_service.get_review(db, review.id))


@router.delete(
    "/{review_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete a review",
    description="Delete your own review.",
    responses={403: {"description": "Not the author of this review"}},
)
@limiter.limit(settings.rate_limit_write)
def delete_review(
    request: Request,
    review_id: int,
    db: DbSession,
    current_user: ActiveUser,
) -> None:
    """Delete a review and refresh the book's rating aggregate."""
    review_service.delete_review(db, review_id=review_id, requester_id=current_user.id)

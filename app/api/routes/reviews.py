from fastapi import APIRouter, Depends, Request

from app.core.auth import Caller, resolve_caller
from app.core.dependencies import get_review_service
from app.core.payload import parse_json_body
from app.schemas.review import ReviewRequest, ReviewSubmissionResponse
from app.services.review_service import ReviewService

router = APIRouter(tags=["Reviews"])


@router.post(
    "/reviews",
    response_model=ReviewSubmissionResponse,
    response_model_exclude_unset=True,
)
async def submit_review(
    request: Request,
    caller: Caller = Depends(resolve_caller),
    service: ReviewService = Depends(get_review_service),
) -> ReviewSubmissionResponse:
    """Create or update the caller's review of a cafe.

    Body: ``{"cafe_id": str, "rating": int 1-5, "blurb"?: str, "photo_url"?: str}``.
    The first submission for a cafe returns ``created: true``; later ones
    update the same row and return ``updated: true``.

    Raises:
        AuthenticationAppError: 401 when the bearer credential is missing/invalid.
        ValidationAppError: 400 for missing or invalid fields.
        RateLimitAppError: 429 after too many new reviews in the trailing hour.
        ConflictAppError: 409 if a concurrent submission could not be reconciled.
    """
    body = await parse_json_body(
        request,
        ReviewRequest,
        missing_message="Missing cafe_id or rating",
    )
    return await service.submit(caller.user_id, body)

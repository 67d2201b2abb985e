from fastapi import APIRouter, Depends, Request

from app.core.dependencies import get_profile_service
from app.core.payload import parse_query_params
from app.schemas.profile import ProfileQuery, ProfileResponse
from app.services.profile_service import ProfileService

router = APIRouter(tags=["Profiles"])


@router.get("/profile", response_model=ProfileResponse)
async def get_profile(
    request: Request,
    service: ProfileService = Depends(get_profile_service),
) -> ProfileResponse:
    """Public profile: user, stats (zeros by default) and 5 latest reviews.

    Raises:
        ValidationAppError: 400 when ``id`` is missing.
        NotFoundAppError: 404 when the user does not exist.
    """
    query = parse_query_params(request, ProfileQuery, missing_message="Missing id")
    return await service.get(query.id)

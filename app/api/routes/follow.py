from fastapi import APIRouter, Depends, Request

from app.core.auth import Caller, resolve_caller
from app.core.dependencies import get_follow_service
from app.core.payload import parse_json_body
from app.schemas.follow import FollowRequest, FollowResponse
from app.services.follow_service import FollowService

router = APIRouter(tags=["Social"])


@router.post("/follow", response_model=FollowResponse)
async def mutate_follow(
    request: Request,
    caller: Caller = Depends(resolve_caller),
    service: FollowService = Depends(get_follow_service),
) -> FollowResponse:
    """Follow or unfollow another user.

    Body: ``{"action": "follow" | "unfollow", "followee_id": "<user id>"}``.
    Both actions are idempotent: following twice or unfollowing an account
    that is not followed still returns ``{"ok": true}``.

    Raises:
        AuthenticationAppError: 401 when the bearer credential is missing/invalid.
        ValidationAppError: 400 for missing fields or self-follow.
    """
    body = await parse_json_body(
        request,
        FollowRequest,
        missing_message="Missing action or followee_id",
    )
    return await service.mutate(caller.user_id, body)

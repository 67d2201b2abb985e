from fastapi import APIRouter, Depends, Request

from app.core.auth import Caller, resolve_optional_caller
from app.core.dependencies import get_leaderboard_service
from app.core.payload import parse_query_params
from app.schemas.leaderboard import LeaderboardPage, LeaderboardQuery
from app.services.leaderboard_service import LeaderboardService

router = APIRouter(tags=["Leaderboard"])


@router.get("/leaderboard", response_model=LeaderboardPage)
async def get_leaderboard(
    request: Request,
    caller: Caller | None = Depends(resolve_optional_caller),
    service: LeaderboardService = Depends(get_leaderboard_service),
) -> LeaderboardPage:
    """Ranked reviewers or cafes, optionally per campus or among friends.

    Query: ``type`` (reviewers|cafes), ``scope`` (global|friends), ``campus``,
    ``page`` (1-based) and ``pageSize`` (capped at 100). The ``friends``
    scope needs a bearer token; ``global`` works anonymously.
    """
    query = parse_query_params(request, LeaderboardQuery, missing_message="Invalid leaderboard query")
    return await service.rank(query, caller.user_id if caller else None)

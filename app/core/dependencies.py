"""Per-request wiring of stores and services.

Collaborators (store provider, identity resolver) are created once by the app
factory and kept on ``app.state``; everything below is rebuilt for each
request so no domain state outlives it.
"""

from __future__ import annotations

from fastapi import Depends, Request

from app.adapters.rate_limit.review_window import ReviewWindowRateLimiter
from app.adapters.store.base import AbstractStore, AbstractStoreProvider
from app.core.auth import Caller, resolve_caller, resolve_optional_caller
from app.core.config import settings
from app.services.follow_service import FollowService
from app.services.leaderboard_service import LeaderboardService
from app.services.profile_service import ProfileService
from app.services.review_service import ReviewService


def get_store_provider(request: Request) -> AbstractStoreProvider:
    return request.app.state.store_provider


def get_store(
    caller: Caller = Depends(resolve_caller),
    provider: AbstractStoreProvider = Depends(get_store_provider),
) -> AbstractStore:
    """Store bound to the authenticated caller's credential."""
    return provider.for_credential(caller.access_token)


def get_follow_service(store: AbstractStore = Depends(get_store)) -> FollowService:
    return FollowService(store)


def get_review_service(store: AbstractStore = Depends(get_store)) -> ReviewService:
    limiter = None
    if settings.app.review_rate_limit_enabled:
        limiter = ReviewWindowRateLimiter(
            store,
            limit=settings.app.review_rate_limit_requests,
            window_seconds=settings.app.review_rate_limit_window_seconds,
        )
    return ReviewService(store, limiter)


def get_read_store(
    caller: Caller | None = Depends(resolve_optional_caller),
    provider: AbstractStoreProvider = Depends(get_store_provider),
) -> AbstractStore:
    """Store bound to the caller when a credential was sent, else anonymous."""
    return provider.for_credential(caller.access_token if caller else None)


def get_leaderboard_service(store: AbstractStore = Depends(get_read_store)) -> LeaderboardService:
    return LeaderboardService(store)


def get_profile_service(store: AbstractStore = Depends(get_read_store)) -> ProfileService:
    return ProfileService(store)

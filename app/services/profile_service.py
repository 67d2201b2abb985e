"""Public profile reads: the user row, activity counters and latest reviews."""

import logging

from app.adapters.store.base import AbstractStore
from app.core.errors import NotFoundAppError
from app.schemas.profile import ProfileResponse, ProfileStats, RecentReview, UserProfile

logger = logging.getLogger(__name__)

RECENT_REVIEWS_LIMIT = 5


class ProfileService:
    """Assembles a user's public profile from the store."""

    def __init__(self, store: AbstractStore) -> None:
        self.store = store

    async def get(self, user_id: str) -> ProfileResponse:
        """Return the profile of ``user_id``.

        Raises:
            NotFoundAppError: If no such user exists.
        """
        user = await self.store.find_user(user_id)
        if user is None:
            raise NotFoundAppError(code="not_found", message="Not found")

        stats = await self.store.user_stats(user_id)
        recent = await self.store.recent_reviews(user_id, limit=RECENT_REVIEWS_LIMIT)

        logger.info("profile.served", extra={"profile_id": user_id, "recent_count": len(recent)})
        return ProfileResponse(
            user=UserProfile.model_validate(user),
            stats=ProfileStats.model_validate(
                {key: value for key, value in (stats or {}).items() if value is not None}
            ),
            recent=[RecentReview.model_validate(row) for row in recent],
        )

"""Follow-edge mutations.

A follow edge is a directed pair (follower_id, followee_id). Each mutation
issues exactly one store command:
- follow   → insert; an already existing edge counts as success
- unfollow → delete; a missing edge counts as success
"""

import logging

from app.adapters.store.base import AbstractStore
from app.core.errors import ConflictAppError, ValidationAppError
from app.schemas.follow import FollowRequest, FollowResponse

logger = logging.getLogger(__name__)


class FollowService:
    """Idempotent insert/delete of follow edges for the calling user.

    Attributes:
        store: Store bound to the caller's credential.
    """

    def __init__(self, store: AbstractStore) -> None:
        self.store = store

    async def mutate(self, caller_id: str, request: FollowRequest) -> FollowResponse:
        """Apply a follow or unfollow for ``caller_id``.

        Args:
            caller_id: Authenticated user performing the action.
            request: Validated action and target.

        Returns:
            FollowResponse with ``ok=True``.

        Raises:
            ValidationAppError: If the caller targets themselves.
            StoreAppError: If the store rejects the mutation.
            InternalAppError: If the store cannot be reached.
        """
        if request.followee_id == caller_id:
            raise ValidationAppError(
                code="self_follow",
                message="Cannot follow yourself",
            )

        if request.action == "follow":
            try:
                await self.store.insert_follow(caller_id, request.followee_id)
            except ConflictAppError:
                # Edge already present; the desired state holds
                logger.info(
                    "follow.already_exists",
                    extra={"follower_id": caller_id, "followee_id": request.followee_id},
                )
            else:
                logger.info(
                    "follow.created",
                    extra={"follower_id": caller_id, "followee_id": request.followee_id},
                )
            return FollowResponse(ok=True)

        removed = await self.store.delete_follow(caller_id, request.followee_id)
        logger.info(
            "follow.removed" if removed else "follow.absent",
            extra={"follower_id": caller_id, "followee_id": request.followee_id},
        )
        return FollowResponse(ok=True)

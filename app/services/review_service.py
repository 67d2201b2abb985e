"""Review ingestion: rate limiting plus create-or-update per (user, cafe).

Submission pipeline:
1. Rolling-window rate limit check (no write when blocked)
2. Look up the caller's review for the cafe
3. Update it in place, or insert a new row
4. If the insert loses a race to a concurrent submission (unique violation),
   re-read once and update the winner's row instead
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any, Callable

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.adapters.store.base import AbstractStore, ReviewRow
from app.core.errors import ConflictAppError, RateLimitAppError
from app.schemas.review import Review, ReviewRequest, ReviewSubmissionResponse

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _changed_fields(request: ReviewRequest) -> dict[str, Any]:
    """Fields to write on update: rating always, optional fields only if sent."""
    fields: dict[str, Any] = {"rating": request.rating}
    sent = request.model_fields_set
    for name in ("blurb", "photo_url"):
        if name in sent:
            fields[name] = getattr(request, name)
    return fields


class ReviewService:
    """Create-or-update of one review per (user, cafe).

    Attributes:
        store: Store bound to the caller's credential.
        limiter: Optional limiter; None disables rate limiting.
    """

    def __init__(
        self,
        store: AbstractStore,
        limiter: AbstractRateLimiter | None = None,
        *,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        self.store = store
        self.limiter = limiter
        self._clock = clock

    async def _enforce_rate_limit(self, caller_id: str) -> None:
        """Raise RateLimitAppError when the caller's budget is exhausted."""
        if self.limiter is None:
            return

        result = await self.limiter.check(caller_id)
        if result.allowed:
            logger.debug(
                "rate_limit.allowed",
                extra={"user_id": caller_id, "limit": result.limit, "remaining": result.remaining},
            )
            return

        logger.warning(
            "rate_limit.exceeded",
            extra={
                "user_id": caller_id,
                "limit": result.limit,
                "retry_after_s": result.retry_after_seconds,
            },
        )
        raise RateLimitAppError(
            code="rate_limit_exceeded",
            message="Rate limit exceeded",
            details={
                "limit": result.limit,
                "remaining": result.remaining,
                "reset_at": result.reset_at,
                "retry_after": result.retry_after_seconds or 0,
            },
        )

    async def _update(self, row: ReviewRow, request: ReviewRequest) -> ReviewSubmissionResponse:
        updated = await self.store.update_review(str(row["id"]), _changed_fields(request))
        logger.info(
            "review.updated",
            extra={"review_id": str(row["id"]), "cafe_id": request.cafe_id, "rating": request.rating},
        )
        return ReviewSubmissionResponse(data=Review.model_validate(updated), updated=True)

    async def submit(self, caller_id: str, request: ReviewRequest) -> ReviewSubmissionResponse:
        """Submit the caller's review for a cafe.

        Args:
            caller_id: Authenticated reviewer.
            request: Validated review payload.

        Returns:
            ReviewSubmissionResponse with ``created=True`` for a new row or
            ``updated=True`` when the existing row was changed.

        Raises:
            RateLimitAppError: If the caller exceeded the rolling-window budget.
            ConflictAppError: If a concurrent insert could not be reconciled.
            StoreAppError: If the store rejects a command.
            InternalAppError: If the store cannot be reached.
        """
        await self._enforce_rate_limit(caller_id)

        existing = await self.store.find_review(caller_id, request.cafe_id)
        if existing is not None:
            return await self._update(existing, request)

        fields: dict[str, Any] = {
            "user_id": caller_id,
            "cafe_id": request.cafe_id,
            "rating": request.rating,
            "blurb": request.blurb,
            "photo_url": request.photo_url,
            "created_at": self._clock(),
        }
        try:
            created = await self.store.insert_review(fields)
        except ConflictAppError:
            logger.info(
                "review.insert_conflict",
                extra={"user_id": caller_id, "cafe_id": request.cafe_id},
            )
            winner = await self.store.find_review(caller_id, request.cafe_id)
            if winner is None:
                raise
            return await self._update(winner, request)

        logger.info(
            "review.created",
            extra={"review_id": str(created["id"]), "cafe_id": request.cafe_id, "rating": request.rating},
        )
        return ReviewSubmissionResponse(data=Review.model_validate(created), created=True)

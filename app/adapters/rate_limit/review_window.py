"""Rolling-window review rate limiter backed by the store.

The decision is recomputed from stored ``created_at`` timestamps on every
check, so no counter state lives in the process:
- Any number of workers/instances share one budget per user.
- Soft limit: two concurrent submissions can both pass the same count.
"""

from __future__ import annotations

import math
from datetime import datetime, timedelta, timezone
from typing import Callable

from app.adapters.rate_limit.base import AbstractRateLimiter, RateLimitResult
from app.adapters.store.base import AbstractStore


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ReviewWindowRateLimiter(AbstractRateLimiter):
    """Limit reviews created per user within a trailing window.

    A user is blocked when ``limit`` or more of their reviews were created at
    or after ``now - window``. Only ``limit`` timestamps are read, oldest
    first, which is enough both to decide and to compute when the oldest one
    leaves the window.
    """

    def __init__(
        self,
        store: AbstractStore,
        *,
        limit: int,
        window_seconds: int,
        clock: Callable[[], datetime] = _utcnow,
    ) -> None:
        """Initialize the limiter.

        Args:
            store: Store bound to the current caller.
            limit: Maximum reviews per window.
            window_seconds: Trailing window length in seconds.
            clock: Time source returning an aware datetime.

        Raises:
            ValueError: If limit or window_seconds are invalid.
        """
        if limit < 1:
            raise ValueError("limit must be >= 1")
        if window_seconds < 1:
            raise ValueError("window_seconds must be >= 1")

        self._store = store
        self._limit = limit
        self._window = timedelta(seconds=window_seconds)
        self._clock = clock

    async def check(self, key: str) -> RateLimitResult:
        """Check the user's remaining review budget.

        Args:
            key: User id of the caller.

        Returns:
            RateLimitResult with allowance decision and metadata.

        Raises:
            ValueError: If key is empty.
        """
        if not key:
            raise ValueError("key must be a non-empty string")

        now = self._clock()
        stamps = await self._store.review_timestamps_since(
            key, now - self._window, limit=self._limit
        )
        count = len(stamps)

        # One more review becomes possible once the oldest counted one expires
        frees_at = stamps[0] + self._window if stamps else now
        reset_at = int(math.ceil(frees_at.timestamp()))

        if count < self._limit:
            return RateLimitResult(
                allowed=True,
                limit=self._limit,
                remaining=self._limit - count,
                reset_at=reset_at,
                retry_after_seconds=None,
            )

        retry_after = max(1, int(math.ceil((frees_at - now).total_seconds())))
        return RateLimitResult(
            allowed=False,
            limit=self._limit,
            remaining=0,
            reset_at=reset_at,
            retry_after_seconds=retry_after,
        )

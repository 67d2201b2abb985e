"""Rate limiter interfaces.

Services depend on this abstraction (not the concrete implementation) so the
counting source can change without touching the review path.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass


@dataclass(frozen=True)
class RateLimitResult:
    """Result of a rate limit check.

    Attributes:
        allowed: Whether the request is allowed to proceed.
        limit: Max events per window.
        remaining: Events still allowed in the trailing window (0 when blocked).
        reset_at: UNIX epoch seconds when one more event becomes allowed.
        retry_after_seconds: Suggested wait time in seconds when blocked.
    """

    allowed: bool
    limit: int
    remaining: int
    reset_at: int
    retry_after_seconds: int | None


class AbstractRateLimiter(ABC):
    """Interface for rate limiters."""

    @abstractmethod
    async def check(self, key: str) -> RateLimitResult:
        """Check the remaining budget for a key without consuming it.

        The budget is consumed by the guarded write itself.

        Args:
            key: Unique identifier (e.g., user id).

        Returns:
            RateLimitResult describing whether the next event is allowed.
        """
        raise NotImplementedError

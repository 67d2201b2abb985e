"""Reviewer and cafe leaderboards.

Ranking happens in the service over rows read from the store:
- reviewers: ``score = reviews_count + 0.5 * photos_count``, highest first
- cafes: most reviews first, ties broken by the higher average rating
- ``friends`` scope restricts both to accounts the caller follows
Ranks are 1-based and continue across pages.
"""

from __future__ import annotations

import logging
from collections import defaultdict
from typing import Sequence, TypeVar

from app.adapters.store.base import AbstractStore, Row
from app.core.errors import AuthenticationAppError
from app.schemas.leaderboard import CafeEntry, LeaderboardPage, LeaderboardQuery, ReviewerEntry

logger = logging.getLogger(__name__)

PHOTO_WEIGHT = 0.5

RowT = TypeVar("RowT")


def _paginate(rows: Sequence[RowT], query: LeaderboardQuery) -> tuple[int, list[RowT]]:
    start = (query.page - 1) * query.page_size
    return start, list(rows[start : start + query.page_size])


def _rank_reviewers(rows: list[Row]) -> list[dict]:
    ranked = []
    for row in rows:
        reviews = row.get("reviews_count") or 0
        photos = row.get("photos_count") or 0
        ranked.append(
            {
                "user_id": row["user_id"],
                "reviews_count": reviews,
                "photos_count": photos,
                "score": reviews + PHOTO_WEIGHT * photos,
                "user": row.get("user"),
            }
        )
    ranked.sort(key=lambda entry: entry["score"], reverse=True)
    return ranked


def _rank_cafes(rows: list[Row]) -> list[dict]:
    ratings: dict[str, list[int]] = defaultdict(list)
    cafes: dict[str, Row] = {}
    for row in rows:
        ratings[row["cafe_id"]].append(row["rating"])
        cafes.setdefault(row["cafe_id"], row.get("cafe") or {})

    ranked = []
    for cafe_id, values in ratings.items():
        cafe = cafes[cafe_id]
        ranked.append(
            {
                "id": cafe.get("id") or cafe_id,
                "name": cafe.get("name"),
                "campus": cafe.get("campus"),
                "google_place_id": cafe.get("google_place_id"),
                "avg_rating": round(sum(values) / len(values), 1),
                "reviews_count": len(values),
            }
        )
    ranked.sort(key=lambda entry: (entry["reviews_count"], entry["avg_rating"]), reverse=True)
    return ranked


class LeaderboardService:
    """Builds ranked, paginated leaderboards from store reads.

    Attributes:
        store: Store bound to the caller (or anonymous).
    """

    def __init__(self, store: AbstractStore) -> None:
        self.store = store

    async def rank(self, query: LeaderboardQuery, caller_id: str | None) -> LeaderboardPage:
        """Return one page of the requested leaderboard.

        Args:
            query: Validated leaderboard parameters.
            caller_id: Authenticated user, or None for anonymous callers.

        Returns:
            LeaderboardPage with 1-based ranks and the unpaginated total.

        Raises:
            AuthenticationAppError: If ``friends`` scope is requested anonymously.
            StoreAppError: If the store rejects a read.
            InternalAppError: If the store cannot be reached.
        """
        user_ids: list[str] | None = None
        if query.scope == "friends":
            if caller_id is None:
                raise AuthenticationAppError(
                    code="unauthorized",
                    message="Unauthorized",
                    details={"hint": "The friends leaderboard requires a bearer token"},
                )
            user_ids = await self.store.followee_ids(caller_id)
            if not user_ids:
                return LeaderboardPage(data=[], page=query.page, page_size=query.page_size, total=0)

        if query.kind == "reviewers":
            rows = await self.store.reviewer_stats(campus=query.campus, user_ids=user_ids)
            ranked = _rank_reviewers(rows)
            entry_model: type[ReviewerEntry] | type[CafeEntry] = ReviewerEntry
        else:
            rows = await self.store.cafe_ratings(campus=query.campus, user_ids=user_ids)
            ranked = _rank_cafes(rows)
            entry_model = CafeEntry

        start, page_rows = _paginate(ranked, query)
        data = [
            entry_model(rank=start + offset + 1, **entry)
            for offset, entry in enumerate(page_rows)
        ]

        logger.info(
            "leaderboard.served",
            extra={
                "kind": query.kind,
                "scope": query.scope,
                "campus": query.campus,
                "page": query.page,
                "total": len(ranked),
            },
        )
        return LeaderboardPage(
            data=data,
            page=query.page,
            page_size=query.page_size,
            total=len(ranked),
        )

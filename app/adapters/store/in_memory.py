"""In-memory store for local development and tests.

Notes:
- Per-process only: state is lost on restart and not shared across workers.
- Thread-safe: uses a lock around shared state.
- Enforces the same uniqueness rules as the real tables.
- Profiles and cafes are optional: reads fall back to ``{"id": ...}`` when a
  row was never seeded, and campus filters only match seeded rows.
"""

from __future__ import annotations

import threading
import uuid
from datetime import datetime, timezone
from typing import Any, Callable

from app.adapters.store.base import AbstractStore, AbstractStoreProvider, ReviewRow, Row
from app.core.errors import ConflictAppError, StoreAppError


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class InMemoryStore(AbstractStore):
    """Dict-backed implementation of the follow and review tables."""

    def __init__(self, *, clock: Callable[[], datetime] = _utcnow) -> None:
        """Initialize empty tables.

        Args:
            clock: Time source used for default ``created_at`` values.
        """
        self._clock = clock
        self._lock = threading.RLock()
        self._follows: set[tuple[str, str]] = set()
        self._reviews: dict[str, ReviewRow] = {}
        self._users: dict[str, Row] = {}
        self._cafes: dict[str, Row] = {}

    def add_user(self, user_id: str, **profile: Any) -> None:
        """Seed a public profile (username, avatar_url, college, ...)."""
        with self._lock:
            self._users[user_id] = {"id": user_id, **profile}

    def add_cafe(self, cafe_id: str, **fields: Any) -> None:
        """Seed a cafe (name, campus, google_place_id)."""
        with self._lock:
            self._cafes[cafe_id] = {"id": cafe_id, **fields}

    def edges(self) -> set[tuple[str, str]]:
        """Snapshot of all (follower_id, followee_id) pairs."""
        with self._lock:
            return set(self._follows)

    def reviews(self) -> list[ReviewRow]:
        """Snapshot of all review rows."""
        with self._lock:
            return [dict(row) for row in self._reviews.values()]

    async def insert_follow(self, follower_id: str, followee_id: str) -> None:
        edge = (follower_id, followee_id)
        with self._lock:
            if edge in self._follows:
                raise ConflictAppError(
                    code="follow_exists",
                    message="duplicate key value violates unique constraint on follows",
                    details={"store_code": "23505"},
                )
            self._follows.add(edge)

    async def delete_follow(self, follower_id: str, followee_id: str) -> int:
        edge = (follower_id, followee_id)
        with self._lock:
            if edge not in self._follows:
                return 0
            self._follows.discard(edge)
            return 1

    def _find_locked(self, user_id: str, cafe_id: str) -> ReviewRow | None:
        for row in self._reviews.values():
            if row["user_id"] == user_id and row["cafe_id"] == cafe_id:
                return row
        return None

    async def find_review(self, user_id: str, cafe_id: str) -> ReviewRow | None:
        with self._lock:
            row = self._find_locked(user_id, cafe_id)
            return dict(row) if row else None

    async def insert_review(self, fields: dict[str, Any]) -> ReviewRow:
        with self._lock:
            if self._find_locked(fields["user_id"], fields["cafe_id"]) is not None:
                raise ConflictAppError(
                    code="review_exists",
                    message="duplicate key value violates unique constraint on reviews",
                    details={"store_code": "23505"},
                )
            row: ReviewRow = {
                "id": str(uuid.uuid4()),
                "blurb": None,
                "photo_url": None,
                "created_at": self._clock(),
                **fields,
            }
            self._reviews[row["id"]] = row
            return dict(row)

    async def update_review(self, review_id: str, fields: dict[str, Any]) -> ReviewRow:
        with self._lock:
            row = self._reviews.get(review_id)
            if row is None:
                raise StoreAppError(
                    code="review_not_found",
                    message="No review matched the update",
                    details={"store_code": "PGRST116"},
                )
            row.update(fields)
            return dict(row)

    async def review_timestamps_since(
        self,
        user_id: str,
        since: datetime,
        *,
        limit: int,
    ) -> list[datetime]:
        with self._lock:
            stamps = sorted(
                row["created_at"]
                for row in self._reviews.values()
                if row["user_id"] == user_id and row["created_at"] >= since
            )
        return stamps[:limit]

    async def followee_ids(self, follower_id: str) -> list[str]:
        with self._lock:
            return sorted(followee for follower, followee in self._follows if follower == follower_id)

    def _user_locked(self, user_id: str) -> Row:
        return dict(self._users.get(user_id) or {"id": user_id})

    def _cafe_locked(self, cafe_id: str) -> Row:
        return dict(self._cafes.get(cafe_id) or {"id": cafe_id})

    def _stats_locked(self) -> dict[str, Row]:
        stats: dict[str, Row] = {}
        for row in self._reviews.values():
            entry = stats.setdefault(row["user_id"], {"reviews_count": 0, "photos_count": 0})
            entry["reviews_count"] += 1
            if row.get("photo_url"):
                entry["photos_count"] += 1
        return stats

    async def reviewer_stats(
        self,
        *,
        campus: str | None = None,
        user_ids: list[str] | None = None,
    ) -> list[Row]:
        with self._lock:
            rows = []
            for user_id, counts in self._stats_locked().items():
                user = self._user_locked(user_id)
                if campus and user.get("college") != campus:
                    continue
                if user_ids is not None and user_id not in user_ids:
                    continue
                rows.append({"user_id": user_id, **counts, "user": user})
            return rows

    async def cafe_ratings(
        self,
        *,
        campus: str | None = None,
        user_ids: list[str] | None = None,
    ) -> list[Row]:
        with self._lock:
            rows = []
            for review in self._reviews.values():
                cafe = self._cafe_locked(review["cafe_id"])
                if campus and cafe.get("campus") != campus:
                    continue
                if user_ids is not None and review["user_id"] not in user_ids:
                    continue
                rows.append({"cafe_id": review["cafe_id"], "rating": review["rating"], "cafe": cafe})
            return rows

    async def find_user(self, user_id: str) -> Row | None:
        with self._lock:
            user = self._users.get(user_id)
            return dict(user) if user else None

    async def user_stats(self, user_id: str) -> Row | None:
        with self._lock:
            counts = self._stats_locked().get(user_id)
        if counts is None:
            return None
        return {**counts, "rank_position": None}

    async def recent_reviews(self, user_id: str, *, limit: int) -> list[Row]:
        with self._lock:
            own = sorted(
                (row for row in self._reviews.values() if row["user_id"] == user_id),
                key=lambda row: row["created_at"],
                reverse=True,
            )
            return [
                {
                    "id": row["id"],
                    "rating": row["rating"],
                    "blurb": row.get("blurb"),
                    "created_at": row["created_at"],
                    "cafe": self._cafe_locked(row["cafe_id"]),
                }
                for row in own[:limit]
            ]


class InMemoryStoreProvider(AbstractStoreProvider):
    """Serves one shared InMemoryStore regardless of credential."""

    def __init__(self, store: InMemoryStore | None = None) -> None:
        self.store = store or InMemoryStore()

    def for_credential(self, access_token: str | None) -> AbstractStore:
        return self.store

"""Store interfaces.

Handlers never reach the database ambiently: a provider hands out a store bound
to the caller's credential for the duration of one request, so row-level
authorization in the backend sees the real caller.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from datetime import datetime
from typing import Any

Row = dict[str, Any]
ReviewRow = Row


class AbstractStore(ABC):
	"""Row-level access to follows, reviews and the public profile views.

	Implementations translate backend failures into application errors:
	uniqueness violations raise ConflictAppError, other rejections raise
	StoreAppError, transport failures raise InternalAppError.
	"""

	@abstractmethod
	async def insert_follow(self, follower_id: str, followee_id: str) -> None:
		"""Insert the edge (follower_id, followee_id).

		Raises:
			ConflictAppError: If the edge already exists.
		"""
		...

	@abstractmethod
	async def delete_follow(self, follower_id: str, followee_id: str) -> int:
		"""Delete the edge if present and return the number of rows removed."""
		...

	@abstractmethod
	async def find_review(self, user_id: str, cafe_id: str) -> ReviewRow | None:
		"""Return the review for (user_id, cafe_id), or None."""
		...

	@abstractmethod
	async def insert_review(self, fields: dict[str, Any]) -> ReviewRow:
		"""Insert a review row and return it as stored.

		Raises:
			ConflictAppError: If a review for (user_id, cafe_id) already exists.
		"""
		...

	@abstractmethod
	async def update_review(self, review_id: str, fields: dict[str, Any]) -> ReviewRow:
		"""Apply ``fields`` to the review with ``review_id`` and return the row."""
		...

	@abstractmethod
	async def review_timestamps_since(
		self,
		user_id: str,
		since: datetime,
		*,
		limit: int,
	) -> list[datetime]:
		"""Return creation times of the user's reviews at or after ``since``.

		Oldest first, at most ``limit`` entries.
		"""
		...

	@abstractmethod
	async def followee_ids(self, follower_id: str) -> list[str]:
		"""Return ids of every account ``follower_id`` follows."""
		...

	@abstractmethod
	async def reviewer_stats(
		self,
		*,
		campus: str | None = None,
		user_ids: list[str] | None = None,
	) -> list[Row]:
		"""Per-user review and photo counts joined with the user's profile.

		Rows look like ``{"user_id", "reviews_count", "photos_count", "user"}``.

		Args:
			campus: Keep only users whose ``college`` matches.
			user_ids: Keep only these users (None means no restriction).
		"""
		...

	@abstractmethod
	async def cafe_ratings(
		self,
		*,
		campus: str | None = None,
		user_ids: list[str] | None = None,
	) -> list[Row]:
		"""Rating of every review joined with its cafe.

		Rows look like ``{"cafe_id", "rating", "cafe"}``.

		Args:
			campus: Keep only cafes on this campus.
			user_ids: Keep only reviews written by these users.
		"""
		...

	@abstractmethod
	async def find_user(self, user_id: str) -> Row | None:
		"""Return the public profile of ``user_id``, or None."""
		...

	@abstractmethod
	async def user_stats(self, user_id: str) -> Row | None:
		"""Return ``{"reviews_count", "photos_count", "rank_position"}`` or None."""
		...

	@abstractmethod
	async def recent_reviews(self, user_id: str, *, limit: int) -> list[Row]:
		"""Newest reviews by ``user_id`` with their cafe, at most ``limit``."""
		...


class AbstractStoreProvider(ABC):
	"""Hands out per-request stores bound to a caller credential."""

	@abstractmethod
	def for_credential(self, access_token: str | None) -> AbstractStore:
		"""Return a store whose calls are authorized as ``access_token``.

		None yields an anonymous store limited to publicly readable rows.
		"""
		...

	async def aclose(self) -> None:
		"""Release pooled connections (no-op by default)."""
		return None

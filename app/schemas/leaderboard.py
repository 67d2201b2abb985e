"""Pydantic schemas for leaderboards."""

from __future__ import annotations

from typing import Any, Literal, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

DEFAULT_PAGE_SIZE = 20
MAX_PAGE_SIZE = 100


class LeaderboardQuery(BaseModel):
    """Query string of ``GET /leaderboard``.

    ``pageSize`` above the maximum is capped rather than rejected.
    """

    model_config = ConfigDict(extra="ignore", populate_by_name=True)

    kind: Literal["reviewers", "cafes"] = Field(
        default="reviewers",
        alias="type",
        description="Rank reviewers by activity or cafes by reviews.",
    )
    scope: Literal["global", "friends"] = Field(
        default="global",
        description="'friends' restricts to accounts the caller follows.",
    )
    campus: str | None = Field(default=None, description="Campus / college filter.")
    page: int = Field(default=1, ge=1, description="1-based page number.")
    page_size: int = Field(
        default=DEFAULT_PAGE_SIZE,
        ge=1,
        alias="pageSize",
        description=f"Entries per page (at most {MAX_PAGE_SIZE}).",
    )

    @field_validator("campus")
    @classmethod
    def _blank_campus_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return value.strip() or None

    @field_validator("page_size")
    @classmethod
    def _cap_page_size(cls, value: int) -> int:
        return min(value, MAX_PAGE_SIZE)


class ReviewerEntry(BaseModel):
    """One ranked reviewer. ``score = reviews_count + 0.5 * photos_count``."""

    rank: int
    user_id: str
    reviews_count: int
    photos_count: int
    score: float
    user: dict[str, Any] | None = None


class CafeEntry(BaseModel):
    """One ranked cafe, ordered by review count then average rating."""

    rank: int
    id: str
    name: str | None = None
    campus: str | None = None
    google_place_id: str | None = None
    avg_rating: float
    reviews_count: int


class LeaderboardPage(BaseModel):
    """A page of ranked entries plus the total before pagination."""

    model_config = ConfigDict(populate_by_name=True)

    data: list[Union[ReviewerEntry, CafeEntry]]
    page: int
    page_size: int = Field(alias="pageSize")
    total: int

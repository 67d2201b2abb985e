"""Pydantic schemas for public profiles."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated, Any

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

ProfileId = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1)]


class ProfileQuery(BaseModel):
    """Query string of ``GET /profile``."""

    model_config = ConfigDict(extra="ignore")

    id: ProfileId = Field(..., description="User id of the profile to show.")


class UserProfile(BaseModel):
    """Public part of a user row. Unknown columns are passed through."""

    model_config = ConfigDict(extra="allow")

    id: str
    username: str | None = None
    full_name: str | None = None
    avatar_url: str | None = None
    college: str | None = None
    created_at: datetime | None = None


class ProfileStats(BaseModel):
    """Activity counters; zeros when the user has no stats row yet."""

    reviews_count: int = 0
    photos_count: int = 0
    rank_position: int | None = None


class RecentReview(BaseModel):
    id: str
    rating: int
    blurb: str | None = None
    created_at: datetime | None = None
    cafe: dict[str, Any] | None = None


class ProfileResponse(BaseModel):
    user: UserProfile
    stats: ProfileStats
    recent: list[RecentReview]

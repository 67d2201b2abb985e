"""Pydantic schemas for follow mutations."""

from __future__ import annotations

from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, StringConstraints

UserId = Annotated[str, StringConstraints(strict=True, strip_whitespace=True, min_length=1)]


class FollowRequest(BaseModel):
    """Body of ``POST /follow``."""

    model_config = ConfigDict(extra="ignore")

    action: Literal["follow", "unfollow"] = Field(
        ...,
        description="'follow' creates the edge, 'unfollow' removes it.",
    )
    followee_id: UserId = Field(
        ...,
        description="User id of the account to follow or unfollow.",
    )


class FollowResponse(BaseModel):
    """Successful follow/unfollow result."""

    ok: bool = Field(default=True, description="Always true on success.")

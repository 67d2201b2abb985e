"""Pydantic schemas for review submission."""

from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import BaseModel, ConfigDict, Field, StrictInt, StrictStr, StringConstraints

RATING_MIN = 1
RATING_MAX = 5

CafeId = Annotated[str, StringConstraints(strict=True, strip_whitespace=True, min_length=1)]


class ReviewRequest(BaseModel):
    """Body of ``POST /reviews``.

    ``blurb`` and ``photo_url`` are optional; on resubmission only the fields
    present in the body are replaced (an explicit null clears them).
    """

    model_config = ConfigDict(extra="ignore")

    cafe_id: CafeId = Field(..., description="Cafe being reviewed.")
    rating: StrictInt = Field(
        ...,
        ge=RATING_MIN,
        le=RATING_MAX,
        description=f"Whole-number rating from {RATING_MIN} to {RATING_MAX}.",
    )
    blurb: StrictStr | None = Field(default=None, description="Short free-text review.")
    photo_url: StrictStr | None = Field(
        default=None,
        description="URL of an already uploaded photo.",
    )


class Review(BaseModel):
    """A review row as stored. Unknown columns are passed through."""

    model_config = ConfigDict(extra="allow")

    id: str
    user_id: str
    cafe_id: str
    rating: int
    blurb: str | None = None
    photo_url: str | None = None
    created_at: datetime | None = None


class ReviewSubmissionResponse(BaseModel):
    """Result of a submission: exactly one of ``created``/``updated`` is set."""

    data: Review
    created: bool | None = Field(default=None, description="True when a new row was written.")
    updated: bool | None = Field(default=None, description="True when the existing row was changed.")

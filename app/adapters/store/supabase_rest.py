"""Supabase (PostgREST) store adapter over httpx.

Every call carries the project's anon key as ``apikey`` and the caller's own
bearer token, so row-level security policies apply exactly as they would for
the client application.
"""

from __future__ import annotations

import logging
from datetime import datetime, timezone
from typing import Any

import httpx

from app.adapters.store.base import AbstractStore, AbstractStoreProvider, ReviewRow, Row
from app.core.errors import (
    AuthenticationAppError,
    ConflictAppError,
    InternalAppError,
    StoreAppError,
)

logger = logging.getLogger(__name__)

# Postgres unique_violation; foreign-key and check violations also arrive as 409
UNIQUE_VIOLATION = "23505"

FOLLOWS_TABLE = "/follows"
REVIEWS_TABLE = "/reviews"
USERS_TABLE = "/users"
USER_STATS_VIEW = "/user_stats"


def _jsonable(fields: dict[str, Any]) -> dict[str, Any]:
    return {
        key: value.isoformat() if isinstance(value, datetime) else value
        for key, value in fields.items()
    }


def _parse_timestamp(value: str) -> datetime:
    """Parse a PostgREST timestamp; columns without a zone hold UTC."""
    parsed = datetime.fromisoformat(value)
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _in_filter(values: list[str]) -> str:
    """PostgREST ``in.(...)`` filter with every value double-quoted."""
    quoted = ",".join('"' + value.replace('"', '\\"') + '"' for value in values)
    return f"in.({quoted})"


def _error_payload(response: httpx.Response) -> dict[str, Any]:
    try:
        payload = response.json()
    except ValueError:
        return {"message": response.text or response.reason_phrase}
    return payload if isinstance(payload, dict) else {"message": str(payload)}


class SupabaseRestStore(AbstractStore):
    """Store bound to one caller credential (or anonymous when None).

    Attributes:
        http: Shared AsyncClient rooted at ``{SUPABASE_URL}/rest/v1``.
    """

    def __init__(self, http: httpx.AsyncClient, access_token: str | None) -> None:
        self.http = http
        self._access_token = access_token

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, str] | None = None,
        json: dict[str, Any] | None = None,
        prefer: str | None = None,
    ) -> httpx.Response:
        """Send one PostgREST request and translate failures.

        Raises:
            InternalAppError: Transport failure or 5xx.
            AuthenticationAppError: The backend rejected the caller's token.
            ConflictAppError: Unique constraint violation.
            StoreAppError: Any other rejection (policy, constraint, bad filter).
        """
        headers: dict[str, str] = {}
        if self._access_token:
            headers["Authorization"] = f"Bearer {self._access_token}"
        if prefer:
            headers["Prefer"] = prefer

        try:
            response = await self.http.request(
                method, path, params=params, json=json, headers=headers
            )
        except httpx.HTTPError as exc:
            logger.error(
                "store.transport_error",
                extra={"method": method, "path": path, "error_type": type(exc).__name__},
            )
            raise InternalAppError(
                code="store_unavailable",
                message="Data store request failed",
            ) from exc

        if response.is_success:
            return response

        payload = _error_payload(response)
        message = payload.get("message") or "Data store rejected the request"
        store_code = str(payload.get("code") or "")

        logger.warning(
            "store.request_rejected",
            extra={
                "method": method,
                "path": path,
                "status_code": response.status_code,
                "store_code": store_code,
            },
        )

        if response.status_code >= 500:
            raise InternalAppError(
                code="store_error",
                message="Data store request failed",
                details={"http_status": response.status_code, "store_code": store_code},
            )
        if response.status_code == 401:
            raise AuthenticationAppError(code="unauthorized", message="Unauthorized")
        if store_code == UNIQUE_VIOLATION or (response.status_code == 409 and not store_code):
            raise ConflictAppError(
                code="conflict",
                message=message,
                details={"store_code": store_code or UNIQUE_VIOLATION},
            )
        raise StoreAppError(
            code="store_rejected",
            message=message,
            details={"http_status": response.status_code, "store_code": store_code},
        )

    async def insert_follow(self, follower_id: str, followee_id: str) -> None:
        await self._request(
            "POST",
            FOLLOWS_TABLE,
            json={"follower_id": follower_id, "followee_id": followee_id},
            prefer="return=minimal",
        )

    async def delete_follow(self, follower_id: str, followee_id: str) -> int:
        response = await self._request(
            "DELETE",
            FOLLOWS_TABLE,
            params={"follower_id": f"eq.{follower_id}", "followee_id": f"eq.{followee_id}"},
            prefer="return=representation",
        )
        return len(response.json())

    async def find_review(self, user_id: str, cafe_id: str) -> ReviewRow | None:
        response = await self._request(
            "GET",
            REVIEWS_TABLE,
            params={
                "select": "*",
                "user_id": f"eq.{user_id}",
                "cafe_id": f"eq.{cafe_id}",
                "limit": "1",
            },
        )
        rows = response.json()
        return rows[0] if rows else None

    async def insert_review(self, fields: dict[str, Any]) -> ReviewRow:
        response = await self._request(
            "POST",
            REVIEWS_TABLE,
            params={"select": "*"},
            json=_jsonable(fields),
            prefer="return=representation",
        )
        return response.json()[0]

    async def update_review(self, review_id: str, fields: dict[str, Any]) -> ReviewRow:
        response = await self._request(
            "PATCH",
            REVIEWS_TABLE,
            params={"select": "*", "id": f"eq.{review_id}"},
            json=_jsonable(fields),
            prefer="return=representation",
        )
        rows = response.json()
        if not rows:
            raise StoreAppError(
                code="review_not_found",
                message="No review matched the update",
                details={"store_code": "PGRST116"},
            )
        return rows[0]

    async def review_timestamps_since(
        self,
        user_id: str,
        since: datetime,
        *,
        limit: int,
    ) -> list[datetime]:
        response = await self._request(
            "GET",
            REVIEWS_TABLE,
            params={
                "select": "created_at",
                "user_id": f"eq.{user_id}",
                "created_at": f"gte.{since.isoformat()}",
                "order": "created_at.asc",
                "limit": str(limit),
            },
        )
        return [_parse_timestamp(row["created_at"]) for row in response.json()]

    async def followee_ids(self, follower_id: str) -> list[str]:
        response = await self._request(
            "GET",
            FOLLOWS_TABLE,
            params={"select": "followee_id", "follower_id": f"eq.{follower_id}"},
        )
        return [row["followee_id"] for row in response.json()]

    async def reviewer_stats(
        self,
        *,
        campus: str | None = None,
        user_ids: list[str] | None = None,
    ) -> list[Row]:
        params = {
            "select": "user_id,reviews_count,photos_count,"
            "users!inner(id,username,avatar_url,college)",
        }
        if campus:
            params["users.college"] = f"eq.{campus}"
        if user_ids is not None:
            params["user_id"] = _in_filter(user_ids)

        response = await self._request("GET", USER_STATS_VIEW, params=params)
        return [
            {
                "user_id": row["user_id"],
                "reviews_count": row.get("reviews_count"),
                "photos_count": row.get("photos_count"),
                "user": row.get("users"),
            }
            for row in response.json()
        ]

    async def cafe_ratings(
        self,
        *,
        campus: str | None = None,
        user_ids: list[str] | None = None,
    ) -> list[Row]:
        params = {"select": "cafe_id,rating,cafes!inner(id,name,campus,google_place_id)"}
        if campus:
            params["cafes.campus"] = f"eq.{campus}"
        if user_ids is not None:
            params["user_id"] = _in_filter(user_ids)

        response = await self._request("GET", REVIEWS_TABLE, params=params)
        return [
            {"cafe_id": row["cafe_id"], "rating": row["rating"], "cafe": row.get("cafes")}
            for row in response.json()
        ]

    async def find_user(self, user_id: str) -> Row | None:
        response = await self._request(
            "GET",
            USERS_TABLE,
            params={
                "select": "id,username,full_name,avatar_url,college,created_at",
                "id": f"eq.{user_id}",
                "limit": "1",
            },
        )
        rows = response.json()
        return rows[0] if rows else None

    async def user_stats(self, user_id: str) -> Row | None:
        response = await self._request(
            "GET",
            USER_STATS_VIEW,
            params={
                "select": "reviews_count,photos_count,rank_position",
                "user_id": f"eq.{user_id}",
                "limit": "1",
            },
        )
        rows = response.json()
        return rows[0] if rows else None

    async def recent_reviews(self, user_id: str, *, limit: int) -> list[Row]:
        response = await self._request(
            "GET",
            REVIEWS_TABLE,
            params={
                "select": "id,rating,blurb,created_at,cafes(id,name,google_place_id)",
                "user_id": f"eq.{user_id}",
                "order": "created_at.desc",
                "limit": str(limit),
            },
        )
        return [
            {
                "id": row["id"],
                "rating": row["rating"],
                "blurb": row.get("blurb"),
                "created_at": row.get("created_at"),
                "cafe": row.get("cafes"),
            }
            for row in response.json()
        ]


class SupabaseStoreProvider(AbstractStoreProvider):
    """Owns the pooled httpx client and binds it to caller credentials."""

    def __init__(
        self,
        *,
        base_url: str,
        anon_key: str,
        timeout_seconds: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the PostgREST client.

        Args:
            base_url: Project URL (``/rest/v1`` is appended).
            anon_key: Public anon key sent as the ``apikey`` header.
            timeout_seconds: Per-request timeout.
            http: Optional pre-built client (tests inject a MockTransport).
        """
        self.http = http or httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/rest/v1",
            headers={"apikey": anon_key},
            timeout=timeout_seconds,
        )

    def for_credential(self, access_token: str | None) -> AbstractStore:
        return SupabaseRestStore(self.http, access_token)

    async def aclose(self) -> None:
        await self.http.aclose()

"""Supabase Auth (GoTrue) identity resolver over httpx."""

from __future__ import annotations

import logging

import httpx

from app.adapters.identity.base import AbstractIdentityResolver
from app.core.errors import AuthenticationAppError, InternalAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


class SupabaseAuthIdentityResolver(AbstractIdentityResolver):
    """Resolve a bearer token by asking ``/auth/v1/user`` who it belongs to.

    The token's structure is never inspected locally; the auth server is the
    only authority on validity and expiry.
    """

    def __init__(
        self,
        *,
        base_url: str,
        anon_key: str,
        timeout_seconds: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        """Initialize the auth client.

        Args:
            base_url: Project URL (``/auth/v1`` is appended).
            anon_key: Public anon key sent as the ``apikey`` header.
            timeout_seconds: Per-request timeout.
            http: Optional pre-built client (tests inject a MockTransport).
        """
        self.http = http or httpx.AsyncClient(
            base_url=f"{base_url.rstrip('/')}/auth/v1",
            headers={"apikey": anon_key},
            timeout=timeout_seconds,
        )

    async def resolve(self, credential: str) -> str:
        try:
            response = await self.http.get(
                "/user",
                headers={"Authorization": f"Bearer {credential}"},
            )
        except httpx.HTTPError as exc:
            logger.error(
                "auth.provider_unreachable",
                extra={"error_type": type(exc).__name__},
            )
            raise InternalAppError(
                code="auth_unavailable",
                message="Identity provider request failed",
            ) from exc

        if response.status_code >= 500:
            logger.error(
                "auth.provider_error",
                extra={"status_code": response.status_code},
            )
            raise InternalAppError(
                code="auth_unavailable",
                message="Identity provider request failed",
                details={"http_status": response.status_code},
            )

        user_id = None
        if response.is_success:
            try:
                user_id = response.json().get("id")
            except (ValueError, AttributeError):
                user_id = None

        if not user_id:
            logger.warning(
                "auth.rejected",
                extra={
                    "status_code": response.status_code,
                    "token_hash": hash_identifier(credential),
                },
            )
            raise AuthenticationAppError(code="unauthorized", message="Unauthorized")

        return str(user_id)

    async def aclose(self) -> None:
        await self.http.aclose()

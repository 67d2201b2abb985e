"""Bearer credential authentication.

The Authorization header is parsed here; whether the token is valid, and who
it belongs to, is decided solely by the configured identity resolver.

Design principles:
- Dependency Injection: the resolver lives on ``app.state`` and is reached via
  FastAPI Depends(), never imported ambiently
- Fail closed: anything but a resolvable ``Bearer <token>`` yields 401 before
  any store access
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Annotated

from fastapi import Header, Request

from app.adapters.identity.base import AbstractIdentityResolver
from app.core.errors import AuthenticationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)

BEARER_PREFIX = "bearer"


@dataclass(frozen=True)
class Caller:
    """Authenticated identity for one request.

    Attributes:
        user_id: Resolved caller id.
        access_token: Credential as presented, forwarded to the store so
            row-level authorization applies.
    """

    user_id: str
    access_token: str


def extract_bearer_token(authorization: str | None) -> str:
    """Extract the token from an ``Authorization: Bearer <token>`` header.

    Args:
        authorization: Raw header value, or None.

    Returns:
        The token string.

    Raises:
        AuthenticationAppError: If the header is missing, empty or not a bearer credential.

    Examples:
        >>> extract_bearer_token("Bearer abc")
        'abc'
        >>> extract_bearer_token("bearer   abc ")
        'abc'
    """
    if not authorization or not authorization.strip():
        raise AuthenticationAppError(
            code="missing_credential",
            message="Unauthorized",
            details={"hint": "Provide an Authorization: Bearer <token> header"},
        )

    scheme, _, token = authorization.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_PREFIX or not token:
        raise AuthenticationAppError(
            code="invalid_credential",
            message="Unauthorized",
            details={"hint": "Provide an Authorization: Bearer <token> header"},
        )
    return token


def get_identity_resolver(request: Request) -> AbstractIdentityResolver:
    """Return the resolver configured on the application."""
    return request.app.state.identity_resolver


async def resolve_caller(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> Caller:
    """FastAPI dependency resolving the calling user.

    Usage:
        @router.post("/protected")
        async def protected(caller: Caller = Depends(resolve_caller)):
            return {"user_id": caller.user_id}

    Raises:
        AuthenticationAppError: 401 when the credential is missing or rejected.
        InternalAppError: 500 when the identity provider is unreachable.
    """
    try:
        token = extract_bearer_token(authorization)
    except AuthenticationAppError as exc:
        logger.warning(
            "auth.missing_credential",
            extra={"reason": exc.code, "request_path": request.url.path},
        )
        raise

    user_id = await get_identity_resolver(request).resolve(token)
    logger.info(
        "auth.success",
        extra={"user_id": user_id, "token_hash": hash_identifier(token)},
    )
    return Caller(user_id=user_id, access_token=token)


async def resolve_optional_caller(
    request: Request,
    authorization: Annotated[str | None, Header()] = None,
) -> Caller | None:
    """Like ``resolve_caller`` but anonymous requests yield None.

    A credential that is present is still verified, so a bad token is a 401
    rather than a silent downgrade to anonymous access.
    """
    if authorization is None or not authorization.strip():
        return None
    return await resolve_caller(request, authorization)

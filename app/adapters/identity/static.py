"""Static token identity resolver for local development and tests.

Tokens are configured as a comma-separated list of ``token:user_id`` pairs
(APP_STATIC_TOKENS). Never use this in production.
"""

from __future__ import annotations

import logging

from app.adapters.identity.base import AbstractIdentityResolver
from app.core.errors import AuthenticationAppError
from app.core.logging import hash_identifier

logger = logging.getLogger(__name__)


def parse_static_tokens(tokens_string: str | None) -> dict[str, str]:
    """Parse comma-separated ``token:user_id`` pairs into a mapping.

    Args:
        tokens_string: Raw configuration value, or None.

    Returns:
        Mapping of token to user id. Malformed or empty entries are skipped.

    Examples:
        >>> parse_static_tokens("t1:alice, t2:bob")
        {'t1': 'alice', 't2': 'bob'}
        >>> parse_static_tokens("broken, :nobody, t3:")
        {}
        >>> parse_static_tokens(None)
        {}
    """
    if not tokens_string:
        return {}

    mapping: dict[str, str] = {}
    for entry in tokens_string.split(","):
        token, sep, user_id = entry.strip().partition(":")
        if sep and token.strip() and user_id.strip():
            mapping[token.strip()] = user_id.strip()
    return mapping


class StaticTokenIdentityResolver(AbstractIdentityResolver):
    """Resolves credentials from a fixed token table."""

    def __init__(self, tokens: dict[str, str]) -> None:
        self._tokens = dict(tokens)

    async def resolve(self, credential: str) -> str:
        user_id = self._tokens.get(credential)
        if user_id is None:
            logger.warning(
                "auth.unknown_token",
                extra={"token_hash": hash_identifier(credential)},
            )
            raise AuthenticationAppError(code="unauthorized", message="Unauthorized")
        return user_id

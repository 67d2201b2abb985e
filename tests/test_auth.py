"""Unit tests for bearer credential authentication."""

from unittest.mock import AsyncMock, MagicMock

import pytest

from app.core.auth import Caller, extract_bearer_token, resolve_caller
from app.core.errors import AuthenticationAppError


class TestExtractBearerToken:
    """Parsing of the Authorization header."""

    def test_extracts_token(self) -> None:
        assert extract_bearer_token("Bearer abc.def.ghi") == "abc.def.ghi"

    def test_scheme_is_case_insensitive(self) -> None:
        assert extract_bearer_token("bearer abc") == "abc"
        assert extract_bearer_token("BEARER abc") == "abc"

    def test_surrounding_whitespace_is_ignored(self) -> None:
        assert extract_bearer_token("  Bearer   abc  ") == "abc"

    @pytest.mark.parametrize("header", [None, "", "   "])
    def test_missing_header(self, header) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            extract_bearer_token(header)

        assert exc_info.value.code == "missing_credential"

    @pytest.mark.parametrize("header", ["Basic dXNlcjpwYXNz", "Bearer", "Bearer   ", "abc"])
    def test_malformed_header(self, header: str) -> None:
        with pytest.raises(AuthenticationAppError) as exc_info:
            extract_bearer_token(header)

        assert exc_info.value.code == "invalid_credential"


def _request_with_resolver(resolver) -> MagicMock:
    request = MagicMock()
    request.app.state.identity_resolver = resolver
    request.url.path = "/follow"
    return request


class TestResolveCaller:
    """FastAPI dependency resolving the caller."""

    @pytest.mark.asyncio
    async def test_returns_caller(self) -> None:
        resolver = MagicMock()
        resolver.resolve = AsyncMock(return_value="u1")

        caller = await resolve_caller(_request_with_resolver(resolver), authorization="Bearer tok")

        assert caller == Caller(user_id="u1", access_token="tok")
        resolver.resolve.assert_awaited_once_with("tok")

    @pytest.mark.asyncio
    async def test_missing_header_never_reaches_resolver(self) -> None:
        resolver = MagicMock()
        resolver.resolve = AsyncMock()

        with pytest.raises(AuthenticationAppError):
            await resolve_caller(_request_with_resolver(resolver), authorization=None)

        resolver.resolve.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_resolver_rejection_propagates(self) -> None:
        resolver = MagicMock()
        resolver.resolve = AsyncMock(
            side_effect=AuthenticationAppError(code="unauthorized", message="Unauthorized")
        )

        with pytest.raises(AuthenticationAppError):
            await resolve_caller(_request_with_resolver(resolver), authorization="Bearer bad")

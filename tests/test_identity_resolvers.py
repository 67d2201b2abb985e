"""Tests for identity resolvers."""

import httpx
import pytest

from app.adapters.identity.static import StaticTokenIdentityResolver, parse_static_tokens
from app.adapters.identity.supabase_auth import SupabaseAuthIdentityResolver
from app.core.errors import AuthenticationAppError, InternalAppError


class TestParseStaticTokens:
    """Parsing of APP_STATIC_TOKENS."""

    def test_parse_pairs(self) -> None:
        assert parse_static_tokens("t1:alice,t2:bob") == {"t1": "alice", "t2": "bob"}

    def test_parse_trims_whitespace(self) -> None:
        assert parse_static_tokens(" t1 : alice ,  t2:bob ") == {"t1": "alice", "t2": "bob"}

    def test_parse_skips_malformed_entries(self) -> None:
        assert parse_static_tokens("broken,:nobody,t3:,t4:dave") == {"t4": "dave"}

    @pytest.mark.parametrize("raw", [None, "", "  ,  "])
    def test_parse_empty(self, raw) -> None:
        assert parse_static_tokens(raw) == {}


class TestStaticResolver:
    @pytest.mark.asyncio
    async def test_known_token(self) -> None:
        resolver = StaticTokenIdentityResolver({"t1": "alice"})

        assert await resolver.resolve("t1") == "alice"

    @pytest.mark.asyncio
    async def test_unknown_token(self) -> None:
        resolver = StaticTokenIdentityResolver({"t1": "alice"})

        with pytest.raises(AuthenticationAppError):
            await resolver.resolve("nope")


def _supabase_resolver(handler) -> SupabaseAuthIdentityResolver:
    http = httpx.AsyncClient(
        base_url="https://proj.supabase.co/auth/v1",
        headers={"apikey": "anon-key"},
        transport=httpx.MockTransport(handler),
    )
    return SupabaseAuthIdentityResolver(
        base_url="https://proj.supabase.co", anon_key="anon-key", http=http
    )


class TestSupabaseResolver:
    @pytest.mark.asyncio
    async def test_resolves_user_id(self) -> None:
        seen: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(request)
            return httpx.Response(200, json={"id": "user-123", "email": "a@b.c"})

        user_id = await _supabase_resolver(handler).resolve("jwt-abc")

        assert user_id == "user-123"
        assert seen[0].url.path == "/auth/v1/user"
        assert seen[0].headers["Authorization"] == "Bearer jwt-abc"
        assert seen[0].headers["apikey"] == "anon-key"

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "response",
        [
            httpx.Response(401, json={"msg": "invalid JWT"}),
            httpx.Response(403, json={"msg": "forbidden"}),
            httpx.Response(200, json={}),
            httpx.Response(200, text="not json"),
        ],
    )
    async def test_rejected_credentials(self, response: httpx.Response) -> None:
        resolver = _supabase_resolver(lambda request: response)

        with pytest.raises(AuthenticationAppError):
            await resolver.resolve("jwt-abc")

    @pytest.mark.asyncio
    async def test_provider_outage_is_internal(self) -> None:
        resolver = _supabase_resolver(lambda request: httpx.Response(502))

        with pytest.raises(InternalAppError):
            await resolver.resolve("jwt-abc")

    @pytest.mark.asyncio
    async def test_transport_failure_is_internal(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("timed out", request=request)

        with pytest.raises(InternalAppError):
            await _supabase_resolver(handler).resolve("jwt-abc")

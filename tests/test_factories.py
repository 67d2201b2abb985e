"""Tests for backend selection in the store and identity factories."""

import asyncio

import pytest

from app.adapters.identity.factory import create_identity_resolver
from app.adapters.identity.static import StaticTokenIdentityResolver
from app.adapters.identity.supabase_auth import SupabaseAuthIdentityResolver
from app.adapters.store.factory import create_store_provider
from app.adapters.store.in_memory import InMemoryStoreProvider
from app.adapters.store.supabase_rest import SupabaseStoreProvider
from app.core.config import settings
from app.core.errors import ValidationAppError


@pytest.fixture
def supabase_backend(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.app, "backend", "supabase")
    monkeypatch.setattr(settings.supabase, "url", "https://project.supabase.co")
    monkeypatch.setattr(settings.supabase, "anon_key", "anon-key")


def test_memory_backend_builds_in_memory_collaborators(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.app, "backend", "memory")

    assert isinstance(create_store_provider(), InMemoryStoreProvider)
    assert isinstance(create_identity_resolver(), StaticTokenIdentityResolver)


def test_supabase_backend_builds_http_collaborators(supabase_backend: None) -> None:
    provider = create_store_provider()
    resolver = create_identity_resolver()
    try:
        assert isinstance(provider, SupabaseStoreProvider)
        assert isinstance(resolver, SupabaseAuthIdentityResolver)
    finally:
        asyncio.run(provider.aclose())
        asyncio.run(resolver.aclose())


def test_supabase_backend_requires_url_and_key(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.app, "backend", "supabase")
    monkeypatch.setattr(settings.supabase, "url", None)
    monkeypatch.setattr(settings.supabase, "anon_key", None)

    with pytest.raises(ValidationAppError) as store_exc:
        create_store_provider()
    with pytest.raises(ValidationAppError) as auth_exc:
        create_identity_resolver()

    assert store_exc.value.code == "store_missing_config"
    assert auth_exc.value.code == "auth_missing_config"


def test_unknown_backend_is_rejected(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(settings.app, "backend", "sqlite")

    with pytest.raises(ValidationAppError) as exc:
        create_store_provider()

    assert exc.value.code == "store_unknown_backend"

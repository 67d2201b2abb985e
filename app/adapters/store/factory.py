"""Factory pattern for creating store providers."""

from app.adapters.store.base import AbstractStoreProvider
from app.adapters.store.in_memory import InMemoryStoreProvider
from app.adapters.store.supabase_rest import SupabaseStoreProvider
from app.core.config import settings
from app.core.errors import ValidationAppError


def create_store_provider() -> AbstractStoreProvider:
    """Instantiate the store provider selected by APP_BACKEND.

    Returns:
        AbstractStoreProvider: Configured provider.

    Raises:
        ValidationAppError: If backend-specific requirements are not met.
    """
    backend = settings.app.backend.lower()

    if backend == "supabase":
        if not settings.supabase.url or not settings.supabase.anon_key:
            raise ValidationAppError(
                code="store_missing_config",
                message="Supabase backend requires SUPABASE_URL and SUPABASE_ANON_KEY",
            )
        return SupabaseStoreProvider(
            base_url=settings.supabase.url,
            anon_key=settings.supabase.anon_key,
            timeout_seconds=settings.supabase.timeout_seconds,
        )

    if backend == "memory":
        return InMemoryStoreProvider()

    raise ValidationAppError(
        code="store_unknown_backend",
        message=f"Unknown backend: '{backend}'. Supported backends: supabase, memory",
    )

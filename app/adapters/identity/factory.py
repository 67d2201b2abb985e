"""Factory pattern for creating identity resolvers."""

from app.adapters.identity.base import AbstractIdentityResolver
from app.adapters.identity.static import StaticTokenIdentityResolver, parse_static_tokens
from app.adapters.identity.supabase_auth import SupabaseAuthIdentityResolver
from app.core.config import settings
from app.core.errors import ValidationAppError


def create_identity_resolver() -> AbstractIdentityResolver:
    """Instantiate the identity resolver selected by APP_BACKEND.

    Returns:
        AbstractIdentityResolver: Configured resolver.

    Raises:
        ValidationAppError: If backend-specific requirements are not met.
    """
    backend = settings.app.backend.lower()

    if backend == "supabase":
        if not settings.supabase.url or not settings.supabase.anon_key:
            raise ValidationAppError(
                code="auth_missing_config",
                message="Supabase backend requires SUPABASE_URL and SUPABASE_ANON_KEY",
            )
        return SupabaseAuthIdentityResolver(
            base_url=settings.supabase.url,
            anon_key=settings.supabase.anon_key,
            timeout_seconds=settings.supabase.timeout_seconds,
        )

    if backend == "memory":
        return StaticTokenIdentityResolver(parse_static_tokens(settings.app.static_tokens))

    raise ValidationAppError(
        code="auth_unknown_backend",
        message=f"Unknown backend: '{backend}'. Supported backends: supabase, memory",
    )

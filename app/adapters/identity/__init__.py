"""Identity adapters - resolve a bearer credential to a caller id."""

from app.adapters.identity.base import AbstractIdentityResolver
from app.adapters.identity.factory import create_identity_resolver
from app.adapters.identity.static import StaticTokenIdentityResolver, parse_static_tokens
from app.adapters.identity.supabase_auth import SupabaseAuthIdentityResolver

__all__ = [
    "AbstractIdentityResolver",
    "StaticTokenIdentityResolver",
    "SupabaseAuthIdentityResolver",
    "create_identity_resolver",
    "parse_static_tokens",
]

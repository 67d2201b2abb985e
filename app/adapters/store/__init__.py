"""Store adapters - row-level CRUD against the follow and review tables."""

from app.adapters.store.base import AbstractStore, AbstractStoreProvider
from app.adapters.store.factory import create_store_provider
from app.adapters.store.in_memory import InMemoryStore, InMemoryStoreProvider
from app.adapters.store.supabase_rest import SupabaseRestStore, SupabaseStoreProvider

__all__ = [
    "AbstractStore",
    "AbstractStoreProvider",
    "InMemoryStore",
    "InMemoryStoreProvider",
    "SupabaseRestStore",
    "SupabaseStoreProvider",
    "create_store_provider",
]

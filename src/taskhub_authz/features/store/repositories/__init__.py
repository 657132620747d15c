"""Entity store implementations."""

from .cached_store import RedisCachedEntityStore
from .memory_store import InMemoryEntityStore
from .postgres_store import PostgresEntityStore, create_entity_store

__all__ = [
    "InMemoryEntityStore",
    "PostgresEntityStore",
    "RedisCachedEntityStore",
    "create_entity_store",
]

"""Entity store protocols."""

from .protocols import EntityReader, EntityStore

__all__ = [
    "EntityReader",
    "EntityStore",
]

"""Access services."""

from .access_resolver import AccessResolver
from .access_service import AccessService

__all__ = [
    "AccessResolver",
    "AccessService",
]

"""Identity services."""

from .identity_service import IdentityService

__all__ = [
    "IdentityService",
]

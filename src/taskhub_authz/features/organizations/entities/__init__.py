"""Organization entities."""

from .organization import Organization

__all__ = [
    "Organization",
]

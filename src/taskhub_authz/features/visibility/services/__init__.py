"""Visibility services."""

from .visibility_resolver import VisibilityResolver

__all__ = [
    "VisibilityResolver",
]

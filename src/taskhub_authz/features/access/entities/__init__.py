"""Access entities."""

from .decision import Decision, Grant

__all__ = [
    "Decision",
    "Grant",
]

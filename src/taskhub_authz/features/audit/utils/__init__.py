"""Audit utilities."""

from .formatting import format_date, to_snapshot

__all__ = [
    "format_date",
    "to_snapshot",
]

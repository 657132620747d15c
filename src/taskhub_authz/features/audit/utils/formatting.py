"""Formatting helpers for audit descriptions and stored snapshots."""

from datetime import date, datetime
from enum import Enum
from typing import Any


def format_date(value: Any) -> str:
    """Render a date-like value as YYYY-MM-DD."""
    if isinstance(value, str):
        try:
            value = datetime.fromisoformat(value)
        except ValueError:
            return value
    if isinstance(value, (datetime, date)):
        return value.strftime("%Y-%m-%d")
    return str(value)


def to_snapshot(value: Any) -> Any:
    """Convert a field value into a JSON-safe snapshot."""
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (datetime, date)):
        return value.isoformat()
    if isinstance(value, (list, tuple, set, frozenset)):
        return [to_snapshot(v) for v in value]
    if isinstance(value, dict):
        return {str(k): to_snapshot(v) for k, v in value.items()}
    return value

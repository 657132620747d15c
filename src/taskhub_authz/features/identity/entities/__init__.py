"""Identity entities and protocols."""

from .actor import Actor
from .protocols import TokenDecoder

__all__ = [
    "Actor",
    "TokenDecoder",
]

"""Identity adapters."""

from .jwt_decoder import JoseTokenDecoder

__all__ = [
    "JoseTokenDecoder",
]

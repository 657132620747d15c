"""Protocol interfaces for the identity boundary."""

from abc import abstractmethod
from typing import Any, Dict, Protocol, runtime_checkable


@runtime_checkable
class TokenDecoder(Protocol):
    """Turns a bearer token into its claims.

    Implementations verify the signature and expiry; they never issue tokens.
    """

    @abstractmethod
    def decode(self, token: str) -> Dict[str, Any]:
        """Decode and verify ``token``. Raises InvalidTokenError on failure."""
        ...

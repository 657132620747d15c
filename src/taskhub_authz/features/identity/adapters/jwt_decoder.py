"""JWT token decoder backed by python-jose."""

import logging
from typing import Any, Dict, Optional

from jose import ExpiredSignatureError, JWTError, jwt

from ....config.constants import DefaultValues
from ....core.exceptions import InvalidTokenError

logger = logging.getLogger(__name__)


class JoseTokenDecoder:
    """Verifies HMAC/RSA signed JWTs and returns their claims."""

    def __init__(self, secret: str, algorithm: str = DefaultValues.JWT_ALGORITHM, audience: Optional[str] = None):
        if not secret:
            raise ValueError("JWT secret must be configured")
        self._secret = secret
        self._algorithm = algorithm
        self._audience = audience

    def decode(self, token: str) -> Dict[str, Any]:
        if not token:
            raise InvalidTokenError("Missing bearer token")

        options = {"verify_aud": self._audience is not None}
        try:
            claims = jwt.decode(
                token,
                self._secret,
                algorithms=[self._algorithm],
                audience=self._audience,
                options=options,
            )
        except ExpiredSignatureError:
            logger.info("Rejected expired token")
            raise InvalidTokenError("Token has expired")
        except JWTError as e:
            logger.info(f"Rejected invalid token: {e}")
            raise InvalidTokenError()

        if not claims.get("sub"):
            raise InvalidTokenError("Token has no subject")
        return claims

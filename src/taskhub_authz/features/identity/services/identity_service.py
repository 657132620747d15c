"""Identity context service.

Resolves a bearer token into the Actor snapshot used for one request. The
store record is the source of truth for roles and memberships; only the
subject is taken from the token.
"""

import logging

from ....core.exceptions import ActorNotFoundError, InactiveActorError, InvalidTokenError
from ...store.entities.protocols import EntityReader
from ..entities.actor import Actor
from ..entities.protocols import TokenDecoder

logger = logging.getLogger(__name__)


class IdentityService:
    """Resolves actors from tokens."""

    def __init__(self, decoder: TokenDecoder, store: EntityReader):
        self._decoder = decoder
        self._store = store

    async def resolve_actor(self, token: str) -> Actor:
        """Resolve ``token`` into an active Actor.

        Raises:
            InvalidTokenError: token cannot be verified or names an unknown actor
            InactiveActorError: actor exists but is deactivated
        """
        claims = self._decoder.decode(token)
        actor_id = str(claims["sub"])

        try:
            actor = await self._store.get_actor(actor_id)
        except ValueError as e:
            # Stored role strings outside the closed taxonomy
            logger.error(f"Actor {actor_id} has an unrecognized role: {e}")
            raise InvalidTokenError("Actor has an unrecognized role")

        if actor is None:
            logger.info(f"Token subject {actor_id} does not match any actor")
            raise InvalidTokenError("Unknown actor")
        if not actor.is_active:
            raise InactiveActorError(actor_id)

        logger.debug(f"Resolved actor {actor}")
        return actor

    async def get_actor(self, actor_id: str) -> Actor:
        """Load an actor by id for service-to-service calls."""
        actor = await self._store.get_actor(actor_id)
        if actor is None:
            raise ActorNotFoundError(actor_id)
        return actor

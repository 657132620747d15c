"""Service wiring.

``build_services`` assembles the engine from a store, an audit repository
and a token decoder. ``build_default_services`` does the same from settings
using PostgreSQL and Redis.
"""

import logging
from dataclasses import dataclass
from typing import Optional

from redis.asyncio import Redis

from .config.settings import AuthzSettings, get_settings
from .features.access.services.access_resolver import AccessResolver
from .features.access.services.access_service import AccessService
from .features.audit.entities.protocols import AuditRepository
from .features.audit.repositories.postgres_audit_repository import PostgresAuditRepository
from .features.audit.services.audit_recorder import AuditRecorder
from .features.collaboration.services.membership_service import MembershipService
from .features.collaboration.services.resource_service import ResourceService
from .features.identity.adapters.jwt_decoder import JoseTokenDecoder
from .features.identity.entities.protocols import TokenDecoder
from .features.identity.services.identity_service import IdentityService
from .features.membership.services.membership_resolver import MembershipResolver
from .features.store.entities.protocols import EntityStore
from .features.store.repositories.cached_store import RedisCachedEntityStore
from .features.store.repositories.postgres_store import create_entity_store
from .features.visibility.services.visibility_resolver import VisibilityResolver

logger = logging.getLogger(__name__)


@dataclass
class AuthzServices:
    """Everything the HTTP surface and embedders need."""

    store: EntityStore
    identity: IdentityService
    resolver: AccessResolver
    access: AccessService
    audit: AuditRecorder
    memberships: MembershipService
    resources: ResourceService


def build_services(
    store: EntityStore,
    audit_repository: AuditRepository,
    decoder: TokenDecoder,
    settings: Optional[AuthzSettings] = None,
) -> AuthzServices:
    settings = settings or get_settings()

    membership = MembershipResolver(store)
    visibility = VisibilityResolver(store, membership)
    resolver = AccessResolver(store, membership, visibility)
    identity = IdentityService(decoder, store)
    access = AccessService(identity, resolver, store)
    audit = AuditRecorder(
        audit_repository,
        default_page_size=settings.audit_default_page_size,
        max_page_size=settings.audit_max_page_size,
    )

    return AuthzServices(
        store=store,
        identity=identity,
        resolver=resolver,
        access=access,
        audit=audit,
        memberships=MembershipService(store, access, audit, max_retries=settings.max_mutation_retries),
        resources=ResourceService(store, access, audit),
    )


async def build_default_services(settings: Optional[AuthzSettings] = None) -> AuthzServices:
    """Wire PostgreSQL, the Redis cache and JWT decoding from settings."""
    settings = settings or get_settings()

    postgres_store = await create_entity_store(settings)
    await postgres_store.create_schema()

    store: EntityStore = postgres_store
    if settings.redis_url:
        redis_client = Redis.from_url(settings.redis_url, decode_responses=True)
        store = RedisCachedEntityStore(postgres_store, redis_client, ttl=settings.cache_ttl_seconds)
        logger.info("Entity store cache enabled")

    audit_repository = PostgresAuditRepository(postgres_store.pool, settings.database_schema)
    decoder = JoseTokenDecoder(
        settings.jwt_secret.get_secret_value(),
        settings.jwt_algorithm,
        audience=settings.jwt_audience,
    )
    return build_services(store, audit_repository, decoder, settings)

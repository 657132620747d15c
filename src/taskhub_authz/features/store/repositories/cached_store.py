"""Redis read-through cache in front of an entity store.

Organizations, teams, projects and resources are cached as JSON under the
``CacheKeys`` patterns. Every write goes to the inner store first and then
invalidates the affected keys. A Redis failure on read falls through to the
inner store; a Redis failure on invalidation is logged.
"""

import json
import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ....config.constants import CacheKeys, CacheTTL, ResourceType
from ...identity.entities.actor import Actor
from ...organizations.entities.organization import Organization
from ...projects.entities.project import Project
from ...resources.entities.resource import CollaborationResource, resource_from_dict
from ...teams.entities.team import Team
from ..entities.protocols import EntityStore

logger = logging.getLogger(__name__)


class RedisCachedEntityStore:
    """EntityStore decorator adding a Redis read-through cache."""

    def __init__(self, inner: EntityStore, redis_client: Redis, ttl: int = CacheTTL.ENTITY_DEFAULT):
        """Initialize with the store to wrap.

        Args:
            inner: Store that owns the data
            redis_client: redis.asyncio client
            ttl: Expiry of cached entries in seconds
        """
        self._inner = inner
        self._redis = redis_client
        self._ttl = ttl

    # Cache helpers

    async def _read_through(
        self,
        key: str,
        loader: Callable[[], Awaitable[Any]],
        decode: Callable[[Dict[str, Any]], Any],
    ):
        try:
            cached = await self._redis.get(key)
        except RedisError as e:
            logger.warning(f"Cache read failed for {key}, falling back to store: {e}")
            return await loader()

        if cached:
            logger.debug(f"Cache hit: {key}")
            return decode(json.loads(cached))

        entity = await loader()
        if entity is not None:
            try:
                await self._redis.set(key, json.dumps(entity.to_dict()), ex=self._ttl)
            except RedisError as e:
                logger.warning(f"Cache write failed for {key}: {e}")
        return entity

    async def _invalidate(self, *keys: str) -> None:
        if not keys:
            return
        try:
            await self._redis.delete(*keys)
        except RedisError as e:
            logger.error(f"Cache invalidation failed for {list(keys)}: {e}")

    async def _invalidate_pattern(self, pattern: str) -> None:
        try:
            keys = [key async for key in self._redis.scan_iter(match=pattern)]
            if keys:
                await self._redis.delete(*keys)
        except RedisError as e:
            logger.error(f"Cache invalidation failed for pattern {pattern}: {e}")

    @staticmethod
    def _resource_key(resource_type: ResourceType, resource_id: str) -> str:
        return CacheKeys.RESOURCE.format(resource_type=ResourceType(resource_type).value, id=resource_id)

    # Reads

    async def get_actor(self, actor_id: str) -> Optional[Actor]:
        # Actors are resolved once per request and not cached
        return await self._inner.get_actor(actor_id)

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        return await self._read_through(
            CacheKeys.ORGANIZATION.format(id=organization_id),
            lambda: self._inner.get_organization(organization_id),
            Organization.from_dict,
        )

    async def get_team(self, team_id: str) -> Optional[Team]:
        return await self._read_through(
            CacheKeys.TEAM.format(id=team_id),
            lambda: self._inner.get_team(team_id),
            Team.from_dict,
        )

    async def get_project(self, project_id: str) -> Optional[Project]:
        return await self._read_through(
            CacheKeys.PROJECT.format(id=project_id),
            lambda: self._inner.get_project(project_id),
            Project.from_dict,
        )

    async def get_resource(
        self, resource_type: ResourceType, resource_id: str
    ) -> Optional[CollaborationResource]:
        resource_type = ResourceType(resource_type)
        return await self._read_through(
            self._resource_key(resource_type, resource_id),
            lambda: self._inner.get_resource(resource_type, resource_id),
            lambda data: resource_from_dict(resource_type, data),
        )

    async def list_resources(
        self, resource_type: ResourceType, project_id: Optional[str] = None
    ) -> List[CollaborationResource]:
        return await self._inner.list_resources(resource_type, project_id)

    # Writes

    async def save_actor(self, actor: Actor) -> Actor:
        return await self._inner.save_actor(actor)

    async def save_organization(self, organization: Organization) -> Organization:
        saved = await self._inner.save_organization(organization)
        await self._invalidate(CacheKeys.ORGANIZATION.format(id=organization.id))
        return saved

    async def save_team(self, team: Team) -> Team:
        saved = await self._inner.save_team(team)
        await self._invalidate(CacheKeys.TEAM.format(id=team.id))
        return saved

    async def save_project(self, project: Project) -> Project:
        saved = await self._inner.save_project(project)
        await self._invalidate(CacheKeys.PROJECT.format(id=project.id))
        return saved

    async def save_resource(self, resource: CollaborationResource) -> CollaborationResource:
        saved = await self._inner.save_resource(resource)
        await self._invalidate(self._resource_key(resource.resource_type, resource.id))
        return saved

    async def delete_resource(self, resource_type: ResourceType, resource_id: str) -> bool:
        deleted = await self._inner.delete_resource(resource_type, resource_id)
        await self._invalidate(self._resource_key(resource_type, resource_id))
        return deleted

    async def delete_project(self, project_id: str) -> bool:
        affected = []
        for resource_type in (ResourceType.TASK, ResourceType.DOCUMENT):
            for resource in await self._inner.list_resources(resource_type, project_id):
                affected.append(self._resource_key(resource_type, resource.id))

        deleted = await self._inner.delete_project(project_id)
        await self._invalidate(CacheKeys.PROJECT.format(id=project_id), *affected)
        return deleted

    async def deactivate_organization(self, organization_id: str) -> bool:
        deactivated = await self._inner.deactivate_organization(organization_id)
        await self._invalidate(CacheKeys.ORGANIZATION.format(id=organization_id))
        # Teams and projects lose their organization reference
        await self._invalidate_pattern(CacheKeys.TEAM.format(id="*"))
        await self._invalidate_pattern(CacheKeys.PROJECT.format(id="*"))
        return deactivated

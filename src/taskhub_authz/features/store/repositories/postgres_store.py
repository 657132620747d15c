"""PostgreSQL entity store using asyncpg.

Accepts an asyncpg pool and a schema name. Membership sets live in JSONB
columns; organization, team and project writes are compare-and-swap on the
``version`` column.
"""

import json
import logging
from typing import Any, Dict, List, Optional

import asyncpg

from ....config.constants import ResourceType
from ....core.exceptions import ConcurrentModificationError
from ...identity.entities.actor import Actor
from ...organizations.entities.organization import Organization
from ...projects.entities.project import Project
from ...resources.entities.resource import CollaborationResource, resource_from_dict
from ...teams.entities.team import Team
from ..utils.error_handling import store_operation
from ..utils.queries import (
    SCHEMA_DDL,
    ACTOR_GET_BY_ID,
    ACTOR_UPSERT,
    ACTOR_DETACH_ORGANIZATION,
    ORGANIZATION_GET_BY_ID,
    ORGANIZATION_INSERT,
    ORGANIZATION_UPDATE_CAS,
    ORGANIZATION_DEACTIVATE,
    TEAM_GET_BY_ID,
    TEAM_INSERT,
    TEAM_UPDATE_CAS,
    TEAM_DETACH_ORGANIZATION,
    PROJECT_GET_BY_ID,
    PROJECT_INSERT,
    PROJECT_UPDATE_CAS,
    PROJECT_DELETE,
    PROJECT_DETACH_ORGANIZATION,
    RESOURCE_GET,
    RESOURCE_LIST,
    RESOURCE_LIST_BY_PROJECT,
    RESOURCE_UPSERT,
    RESOURCE_DELETE,
    TASKS_DELETE_BY_PROJECT,
    DOCUMENTS_UNLINK_PROJECT,
)

logger = logging.getLogger(__name__)


def _json_value(value: Any) -> Any:
    """asyncpg returns JSONB columns as text unless a codec is registered."""
    if isinstance(value, str):
        return json.loads(value)
    return value


class PostgresEntityStore:
    """Entity store over an asyncpg connection pool."""

    def __init__(self, pool: asyncpg.Pool, schema: str):
        """Initialize with an existing pool.

        Args:
            pool: asyncpg connection pool
            schema: Database schema holding the entity tables
        """
        self._pool = pool
        self._schema = schema

    @property
    def pool(self) -> asyncpg.Pool:
        return self._pool

    def _q(self, query: str) -> str:
        return query.format(schema=self._schema)

    @store_operation("create schema")
    async def create_schema(self) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(self._q(SCHEMA_DDL))
        logger.info(f"Entity store schema '{self._schema}' is ready")

    # Reads

    @store_operation("get actor")
    async def get_actor(self, actor_id: str) -> Optional[Actor]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(self._q(ACTOR_GET_BY_ID), actor_id)
        if row is None:
            return None
        data = dict(row)
        data["team_memberships"] = _json_value(data.get("team_memberships")) or {}
        return Actor.from_dict(data)

    @store_operation("get organization")
    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(self._q(ORGANIZATION_GET_BY_ID), organization_id)
        return self._map_organization(row) if row else None

    @store_operation("get team")
    async def get_team(self, team_id: str) -> Optional[Team]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(self._q(TEAM_GET_BY_ID), team_id)
        return self._map_team(row) if row else None

    @store_operation("get project")
    async def get_project(self, project_id: str) -> Optional[Project]:
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(self._q(PROJECT_GET_BY_ID), project_id)
        return self._map_project(row) if row else None

    @store_operation("get resource")
    async def get_resource(
        self, resource_type: ResourceType, resource_id: str
    ) -> Optional[CollaborationResource]:
        resource_type = ResourceType(resource_type)
        async with self._pool.acquire() as conn:
            row = await conn.fetchrow(self._q(RESOURCE_GET), resource_type.value, resource_id)
        if row is None:
            return None
        return resource_from_dict(resource_type, _json_value(row["data"]))

    @store_operation("list resources")
    async def list_resources(
        self, resource_type: ResourceType, project_id: Optional[str] = None
    ) -> List[CollaborationResource]:
        resource_type = ResourceType(resource_type)
        async with self._pool.acquire() as conn:
            if project_id is None:
                rows = await conn.fetch(self._q(RESOURCE_LIST), resource_type.value)
            else:
                rows = await conn.fetch(self._q(RESOURCE_LIST_BY_PROJECT), resource_type.value, project_id)
        return [resource_from_dict(resource_type, _json_value(row["data"])) for row in rows]

    # Writes

    @store_operation("save actor")
    async def save_actor(self, actor: Actor) -> Actor:
        data = actor.to_dict()
        async with self._pool.acquire() as conn:
            await conn.execute(
                self._q(ACTOR_UPSERT),
                data["id"], data["name"], data["global_role"], data["organization_id"],
                json.dumps(data["team_memberships"]), data["is_active"],
            )
        return actor

    @store_operation("save organization")
    async def save_organization(self, organization: Organization) -> Organization:
        params = [
            organization.id, organization.name, organization.owner_id,
            sorted(organization.admin_ids), organization.is_active,
            organization.version, organization.updated_at,
        ]
        row = await self._compare_and_swap(ORGANIZATION_UPDATE_CAS, ORGANIZATION_INSERT, params)
        if row is None:
            raise ConcurrentModificationError("Organization", organization.id, organization.version)
        return self._map_organization(row)

    @store_operation("save team")
    async def save_team(self, team: Team) -> Team:
        params = [
            team.id, team.name, team.organization_id, team.lead_id,
            json.dumps({k: v.value for k, v in team.members.items()}),
            team.visibility.value, team.is_active, team.version, team.updated_at,
        ]
        row = await self._compare_and_swap(TEAM_UPDATE_CAS, TEAM_INSERT, params)
        if row is None:
            raise ConcurrentModificationError("Team", team.id, team.version)
        return self._map_team(row)

    @store_operation("save project")
    async def save_project(self, project: Project) -> Project:
        params = [
            project.id, project.name, project.created_by, project.organization_id,
            project.team_id, project.visibility.value,
            json.dumps({k: v.value for k, v in project.members.items()}),
            project.is_active, project.version, project.updated_at,
        ]
        row = await self._compare_and_swap(PROJECT_UPDATE_CAS, PROJECT_INSERT, params)
        if row is None:
            raise ConcurrentModificationError("Project", project.id, project.version)
        return self._map_project(row)

    @store_operation("save resource")
    async def save_resource(self, resource: CollaborationResource) -> CollaborationResource:
        data = resource.to_dict()
        async with self._pool.acquire() as conn:
            await conn.execute(
                self._q(RESOURCE_UPSERT),
                resource.resource_type.value, resource.id, data.get("project_id"),
                resource.created_by, json.dumps(data),
            )
        return resource

    @store_operation("delete resource")
    async def delete_resource(self, resource_type: ResourceType, resource_id: str) -> bool:
        async with self._pool.acquire() as conn:
            deleted = await conn.fetchval(
                self._q(RESOURCE_DELETE), ResourceType(resource_type).value, resource_id
            )
        return deleted is not None

    @store_operation("delete project")
    async def delete_project(self, project_id: str) -> bool:
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                deleted = await conn.fetchval(self._q(PROJECT_DELETE), project_id)
                if deleted is None:
                    return False
                tasks_status = await conn.execute(self._q(TASKS_DELETE_BY_PROJECT), project_id)
                documents_status = await conn.execute(self._q(DOCUMENTS_UNLINK_PROJECT), project_id)

        logger.info(
            f"Deleted project {project_id} (tasks: {tasks_status}, documents unlinked: {documents_status})"
        )
        return True

    @store_operation("deactivate organization")
    async def deactivate_organization(self, organization_id: str) -> bool:
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                updated = await conn.fetchval(self._q(ORGANIZATION_DEACTIVATE), organization_id)
                if updated is None:
                    return False
                await conn.execute(self._q(TEAM_DETACH_ORGANIZATION), organization_id)
                await conn.execute(self._q(PROJECT_DETACH_ORGANIZATION), organization_id)
                await conn.execute(self._q(ACTOR_DETACH_ORGANIZATION), organization_id)

        logger.info(f"Deactivated organization {organization_id} and detached its members")
        return True

    async def _compare_and_swap(self, update_query: str, insert_query: str, params: List[Any]):
        """Run the versioned update, falling back to insert for new rows.

        Returns None when the row exists with a different version.
        """
        async with self._pool.acquire() as conn:
            async with conn.transaction():
                row = await conn.fetchrow(self._q(update_query), *params)
                if row is not None:
                    return row
                return await conn.fetchrow(self._q(insert_query), *params)

    # Row mapping

    def _map_organization(self, row) -> Organization:
        data: Dict[str, Any] = dict(row)
        data["admin_ids"] = list(data.get("admin_ids") or [])
        return Organization.from_dict(data)

    def _map_team(self, row) -> Team:
        data: Dict[str, Any] = dict(row)
        data["members"] = _json_value(data.get("members")) or {}
        return Team.from_dict(data)

    def _map_project(self, row) -> Project:
        data: Dict[str, Any] = dict(row)
        data["members"] = _json_value(data.get("members")) or {}
        return Project.from_dict(data)


async def create_entity_store(settings) -> PostgresEntityStore:
    """Create a pool from settings and return a ready store."""
    if not settings.database_url:
        raise ValueError("TASKHUB_DATABASE_URL must be set to use the PostgreSQL store")
    pool = await asyncpg.create_pool(
        dsn=settings.database_url,
        min_size=settings.db_pool_min_size,
        max_size=settings.db_pool_max_size,
        command_timeout=settings.db_command_timeout,
    )
    return PostgresEntityStore(pool, settings.database_schema)

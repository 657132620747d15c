"""In-memory entity store.

Keeps serialized snapshots so that callers never share mutable state with the
store. Used by tests and by embedders that load the graph up front.
"""

import asyncio
import logging
from typing import Any, Dict, List, Optional, Tuple

from ....config.constants import GlobalRole, ResourceType
from ....core.exceptions import ConcurrentModificationError
from ...identity.entities.actor import Actor
from ...organizations.entities.organization import Organization
from ...projects.entities.project import Project
from ...resources.entities.resource import CollaborationResource, resource_from_dict
from ...teams.entities.team import Team

logger = logging.getLogger(__name__)


class InMemoryEntityStore:
    """Entity store backed by dictionaries guarded by one asyncio lock."""

    def __init__(self):
        self._actors: Dict[str, Dict[str, Any]] = {}
        self._organizations: Dict[str, Dict[str, Any]] = {}
        self._teams: Dict[str, Dict[str, Any]] = {}
        self._projects: Dict[str, Dict[str, Any]] = {}
        self._resources: Dict[Tuple[ResourceType, str], Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    # Reads

    async def get_actor(self, actor_id: str) -> Optional[Actor]:
        data = self._actors.get(actor_id)
        return Actor.from_dict(data) if data else None

    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        data = self._organizations.get(organization_id)
        return Organization.from_dict(data) if data else None

    async def get_team(self, team_id: str) -> Optional[Team]:
        data = self._teams.get(team_id)
        return Team.from_dict(data) if data else None

    async def get_project(self, project_id: str) -> Optional[Project]:
        data = self._projects.get(project_id)
        return Project.from_dict(data) if data else None

    async def get_resource(
        self, resource_type: ResourceType, resource_id: str
    ) -> Optional[CollaborationResource]:
        resource_type = ResourceType(resource_type)
        data = self._resources.get((resource_type, resource_id))
        return resource_from_dict(resource_type, data) if data else None

    async def list_resources(
        self, resource_type: ResourceType, project_id: Optional[str] = None
    ) -> List[CollaborationResource]:
        resource_type = ResourceType(resource_type)
        results = []
        for (stored_type, _), data in self._resources.items():
            if stored_type is not resource_type:
                continue
            if project_id is not None and data.get("project_id") != project_id:
                continue
            results.append(resource_from_dict(resource_type, data))
        return results

    # Writes

    async def save_actor(self, actor: Actor) -> Actor:
        async with self._lock:
            self._actors[actor.id] = actor.to_dict()
        return actor

    async def save_organization(self, organization: Organization) -> Organization:
        async with self._lock:
            stored = self._compare_and_swap(self._organizations, "Organization", organization)
        return Organization.from_dict(stored)

    async def save_team(self, team: Team) -> Team:
        async with self._lock:
            stored = self._compare_and_swap(self._teams, "Team", team)
        return Team.from_dict(stored)

    async def save_project(self, project: Project) -> Project:
        async with self._lock:
            stored = self._compare_and_swap(self._projects, "Project", project)
        return Project.from_dict(stored)

    async def save_resource(self, resource: CollaborationResource) -> CollaborationResource:
        async with self._lock:
            self._resources[(resource.resource_type, resource.id)] = resource.to_dict()
        return resource

    async def delete_resource(self, resource_type: ResourceType, resource_id: str) -> bool:
        async with self._lock:
            return self._resources.pop((ResourceType(resource_type), resource_id), None) is not None

    async def delete_project(self, project_id: str) -> bool:
        async with self._lock:
            if self._projects.pop(project_id, None) is None:
                return False

            deleted_tasks = 0
            unlinked_documents = 0
            for key in list(self._resources):
                data = self._resources[key]
                if data.get("project_id") != project_id:
                    continue
                if key[0] is ResourceType.TASK:
                    del self._resources[key]
                    deleted_tasks += 1
                elif key[0] is ResourceType.DOCUMENT:
                    data["project_id"] = None
                    data["is_public"] = False
                    unlinked_documents += 1

        logger.info(
            f"Deleted project {project_id}: {deleted_tasks} tasks deleted, "
            f"{unlinked_documents} documents unlinked"
        )
        return True

    async def deactivate_organization(self, organization_id: str) -> bool:
        async with self._lock:
            data = self._organizations.get(organization_id)
            if data is None:
                return False
            data["is_active"] = False
            data["version"] = data.get("version", 1) + 1

            for collection in (self._teams, self._projects):
                for entity in collection.values():
                    if entity.get("organization_id") == organization_id:
                        entity["organization_id"] = None
                        entity["version"] = entity.get("version", 1) + 1

            for actor in self._actors.values():
                if actor.get("organization_id") == organization_id:
                    actor["organization_id"] = None
                    if actor.get("global_role") != GlobalRole.SUPER_ADMIN.value:
                        actor["global_role"] = GlobalRole.MEMBER.value

        logger.info(f"Deactivated organization {organization_id} and detached its members")
        return True

    @staticmethod
    def _compare_and_swap(collection: Dict[str, Dict[str, Any]], entity_name: str, entity) -> Dict[str, Any]:
        current = collection.get(entity.id)
        if current is not None and current.get("version", 1) != entity.version:
            raise ConcurrentModificationError(entity_name, entity.id, entity.version)

        data = entity.to_dict()
        data["version"] = entity.version + 1 if current is not None else entity.version
        collection[entity.id] = data
        return data

"""Protocol interfaces for the entity store.

The access engine only reads through these contracts. Writes use
compare-and-swap on the ``version`` field of organizations, teams and
projects; a lost race raises ConcurrentModificationError.
"""

from abc import abstractmethod
from typing import List, Optional, Protocol, runtime_checkable

from ....config.constants import ResourceType
from ...identity.entities.actor import Actor
from ...organizations.entities.organization import Organization
from ...projects.entities.project import Project
from ...resources.entities.resource import CollaborationResource
from ...teams.entities.team import Team


@runtime_checkable
class EntityReader(Protocol):
    """Read side of the entity store consumed by the resolvers."""

    @abstractmethod
    async def get_actor(self, actor_id: str) -> Optional[Actor]:
        """Get actor by ID."""
        ...

    @abstractmethod
    async def get_organization(self, organization_id: str) -> Optional[Organization]:
        """Get organization by ID."""
        ...

    @abstractmethod
    async def get_team(self, team_id: str) -> Optional[Team]:
        """Get team by ID."""
        ...

    @abstractmethod
    async def get_project(self, project_id: str) -> Optional[Project]:
        """Get project by ID."""
        ...

    @abstractmethod
    async def get_resource(
        self, resource_type: ResourceType, resource_id: str
    ) -> Optional[CollaborationResource]:
        """Get a document, task or attachment by type and ID."""
        ...

    @abstractmethod
    async def list_resources(
        self, resource_type: ResourceType, project_id: Optional[str] = None
    ) -> List[CollaborationResource]:
        """List resources of a type, optionally restricted to one project."""
        ...


@runtime_checkable
class EntityStore(EntityReader, Protocol):
    """Full entity store contract including writes."""

    @abstractmethod
    async def save_actor(self, actor: Actor) -> Actor:
        """Insert or replace an actor."""
        ...

    @abstractmethod
    async def save_organization(self, organization: Organization) -> Organization:
        """Insert or compare-and-swap update an organization."""
        ...

    @abstractmethod
    async def save_team(self, team: Team) -> Team:
        """Insert or compare-and-swap update a team."""
        ...

    @abstractmethod
    async def save_project(self, project: Project) -> Project:
        """Insert or compare-and-swap update a project."""
        ...

    @abstractmethod
    async def save_resource(self, resource: CollaborationResource) -> CollaborationResource:
        """Insert or replace a document, task or attachment."""
        ...

    @abstractmethod
    async def delete_resource(self, resource_type: ResourceType, resource_id: str) -> bool:
        """Delete a document, task or attachment. Returns False if absent."""
        ...

    @abstractmethod
    async def delete_project(self, project_id: str) -> bool:
        """Delete a project, its tasks, and unlink its documents."""
        ...

    @abstractmethod
    async def deactivate_organization(self, organization_id: str) -> bool:
        """Deactivate an organization and strip references to it."""
        ...

"""Visibility resolver.

Grants read access from declared exposure alone, independent of explicit
membership. Never grants anything beyond ``read``.
"""

import logging
from typing import Optional, Union

from ....config.constants import Visibility
from ...identity.entities.actor import Actor
from ...membership.services.membership_resolver import MembershipResolver
from ...projects.entities.project import Project
from ...resources.entities.resource import Attachment, Document, Task
from ...store.entities.protocols import EntityReader
from ...teams.entities.team import Team

logger = logging.getLogger(__name__)

PolicySubject = Union[Project, Team, Document, Task, Attachment]


class VisibilityResolver:
    """Evaluates visibility policies for projects, teams and resources."""

    def __init__(self, store: EntityReader, membership: Optional[MembershipResolver] = None):
        self._store = store
        self._membership = membership or MembershipResolver(store)

    async def is_visible_by_policy(self, actor: Actor, resource: PolicySubject) -> bool:
        """Check whether ``resource`` is readable by ``actor`` through its visibility."""
        if not actor.is_active:
            return False

        if isinstance(resource, Project):
            return await self._project_visible(actor, resource)
        if isinstance(resource, Team):
            return self._team_visible(actor, resource)
        if isinstance(resource, Attachment):
            parent = await self._store.get_resource(resource.parent_type, resource.attached_to_id)
            if parent is None or not resource.is_active:
                return False
            return await self.is_visible_by_policy(actor, parent)
        return await self._collaboration_resource_visible(actor, resource)

    async def _project_visible(self, actor: Actor, project: Project) -> bool:
        if not project.is_active:
            return False

        visibility = project.visibility
        if visibility is Visibility.PRIVATE:
            return False
        if visibility is Visibility.TEAM:
            if project.team_id and await self._membership.is_team_member(actor, project.team_id):
                return True
            return project.organization_id is not None and await self._membership.is_org_admin(
                actor, project.organization_id
            )
        if visibility is Visibility.ORGANIZATION:
            return self._membership.is_org_member(actor, project.organization_id)
        return visibility is Visibility.PUBLIC

    def _team_visible(self, actor: Actor, team: Team) -> bool:
        if not team.is_active:
            return False
        if team.visibility is Visibility.PUBLIC:
            return True
        if team.visibility is Visibility.ORGANIZATION:
            return self._membership.is_org_member(actor, team.organization_id)
        return False

    async def _collaboration_resource_visible(self, actor: Actor, resource: Union[Document, Task]) -> bool:
        if resource.is_personal:
            return resource.created_by == actor.id or resource.is_effectively_public

        # Project containment overrides any public flag on the resource
        project = await self._store.get_project(resource.project_id)
        if project is None:
            return False
        return await self._project_visible(actor, project)

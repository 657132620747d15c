"""Membership resolver.

Answers member/admin/lead/owner questions by looking entities up in the
entity store. Entities may be passed either as ids or as already loaded
entities. A missing organization, team or project yields ``False``; store
failures propagate.
"""

import logging
from typing import Optional, Union

from ....config.constants import GlobalRole, ProjectRole, RoleScope, TeamRole
from ...identity.entities.actor import Actor
from ...organizations.entities.organization import Organization
from ...projects.entities.project import Project
from ...roles.services.role_hierarchy import at_least
from ...store.entities.protocols import EntityReader
from ...teams.entities.team import Team

logger = logging.getLogger(__name__)

OrganizationRef = Union[str, Organization, None]
TeamRef = Union[str, Team, None]
ProjectRef = Union[str, Project, None]


class MembershipResolver:
    """Resolves structural relationships between an actor and the entity graph."""

    def __init__(self, store: EntityReader):
        self._store = store

    async def _organization(self, ref: OrganizationRef) -> Optional[Organization]:
        if ref is None or isinstance(ref, Organization):
            return ref
        return await self._store.get_organization(ref)

    async def _team(self, ref: TeamRef) -> Optional[Team]:
        if ref is None or isinstance(ref, Team):
            return ref
        return await self._store.get_team(ref)

    async def _project(self, ref: ProjectRef) -> Optional[Project]:
        if ref is None or isinstance(ref, Project):
            return ref
        return await self._store.get_project(ref)

    # Organization

    async def is_org_admin(self, actor: Actor, organization: OrganizationRef) -> bool:
        """Super admin, owner, listed admin, or a global org_admin of this organization."""
        if actor.is_super_admin:
            return True
        org = await self._organization(organization)
        if org is None:
            return False
        if org.is_admin(actor.id):
            return True
        return actor.global_role is GlobalRole.ORG_ADMIN and actor.belongs_to_organization(org.id)

    async def is_org_owner(self, actor: Actor, organization: OrganizationRef) -> bool:
        org = await self._organization(organization)
        return org is not None and org.is_owner(actor.id)

    def is_org_member(self, actor: Actor, organization_id: Optional[str]) -> bool:
        return actor.belongs_to_organization(organization_id)

    # Team

    async def team_role(self, actor: Actor, team: TeamRef) -> Optional[TeamRole]:
        resolved = await self._team(team)
        if resolved is None:
            return None
        return resolved.role_of(actor.id)

    async def is_team_lead(self, actor: Actor, team: TeamRef) -> bool:
        resolved = await self._team(team)
        return resolved is not None and resolved.is_lead(actor.id)

    async def is_team_member(self, actor: Actor, team: TeamRef) -> bool:
        """Lead or listed member."""
        resolved = await self._team(team)
        return resolved is not None and resolved.is_member(actor.id)

    # Project

    async def project_role(self, actor: Actor, project: ProjectRef) -> Optional[ProjectRole]:
        resolved = await self._project(project)
        if resolved is None:
            return None
        return resolved.role_of(actor.id)

    async def is_project_member(
        self,
        actor: Actor,
        project: ProjectRef,
        min_role: ProjectRole = ProjectRole.VIEWER,
    ) -> bool:
        """Creator counts as admin; otherwise the member role must reach ``min_role``."""
        role = await self.project_role(actor, project)
        if role is None:
            return False
        return at_least(role, min_role, RoleScope.PROJECT)

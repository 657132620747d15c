"""Membership mutations for organizations, teams and projects.

Every operation re-reads the entity, checks ``manage_members`` against the
fresh state, applies the change through the entity's own invariants and
saves with compare-and-swap. A lost race is retried a bounded number of
times. Audit records are written only after a successful save.
"""

import logging
from dataclasses import replace
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple, TypeVar

from ....config.constants import Action, DefaultValues, ProjectRole, ResourceType, TeamRole
from ....core.exceptions import ActorNotFoundError, ConcurrentModificationError, InvariantViolationError
from ...access.services.access_service import AccessService
from ...audit.services.audit_recorder import AuditRecorder
from ...identity.entities.actor import Actor
from ...organizations.entities.organization import Organization
from ...projects.entities.project import Project
from ...store.entities.protocols import EntityStore
from ...teams.entities.team import Team

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _members_snapshot(entity) -> Dict[str, Any]:
    if isinstance(entity, Organization):
        return {"members": {admin_id: "admin" for admin_id in entity.admin_ids}}
    return {"members": {actor_id: role.value for actor_id, role in entity.members.items()}}


class MembershipService:
    """Adds, removes and re-roles members."""

    def __init__(
        self,
        store: EntityStore,
        access: AccessService,
        audit: AuditRecorder,
        max_retries: int = DefaultValues.MAX_MUTATION_RETRIES,
    ):
        self._store = store
        self._access = access
        self._audit = audit
        self._max_retries = max(1, max_retries)

    async def _with_retries(self, operation_name: str, attempt: Callable[[], Awaitable[T]]) -> T:
        for attempt_number in range(1, self._max_retries + 1):
            try:
                return await attempt()
            except ConcurrentModificationError as e:
                if attempt_number == self._max_retries:
                    logger.error(f"{operation_name} gave up after {attempt_number} attempts: {e}")
                    raise
                logger.warning(f"{operation_name} conflicted, retrying ({attempt_number}/{self._max_retries})")

    async def _load_member(self, member_id: str) -> Actor:
        member = await self._store.get_actor(member_id)
        if member is None:
            raise ActorNotFoundError(member_id)
        return member

    async def _audit_members(self, actor: Actor, resource_id: str, before, after) -> None:
        await self._audit.record_changes(resource_id, actor, _members_snapshot(before), _members_snapshot(after))

    # Organization admins

    async def add_organization_admin(self, actor: Actor, organization_id: str, member_id: str) -> Organization:
        """Only the owner or a super admin may grant admin rights."""
        member = await self._load_member(member_id)

        async def attempt() -> Tuple[Organization, Organization]:
            org, _ = await self._access.require(actor, ResourceType.ORGANIZATION, organization_id, Action.MANAGE_MEMBERS)
            before = Organization.from_dict(org.to_dict())
            if not member.belongs_to_organization(org.id):
                raise InvariantViolationError(
                    "User must be a member of the organization",
                    {"organization_id": org.id, "actor_id": member_id},
                )
            org.add_admin(member_id)
            return before, await self._store.save_organization(org)

        before, saved = await self._with_retries("add organization admin", attempt)
        logger.info(f"{actor.id} made {member_id} an admin of organization {organization_id}")
        await self._audit_members(actor, organization_id, before, saved)
        return saved

    async def remove_organization_admin(self, actor: Actor, organization_id: str, member_id: str) -> Organization:
        async def attempt() -> Tuple[Organization, Organization]:
            org, _ = await self._access.require(actor, ResourceType.ORGANIZATION, organization_id, Action.MANAGE_MEMBERS)
            before = Organization.from_dict(org.to_dict())
            if not org.is_admin(member_id):
                raise InvariantViolationError(
                    "User is not an admin", {"organization_id": org.id, "actor_id": member_id}
                )
            org.remove_admin(member_id)
            return before, await self._store.save_organization(org)

        before, saved = await self._with_retries("remove organization admin", attempt)
        logger.info(f"{actor.id} removed {member_id} from admins of organization {organization_id}")
        await self._audit_members(actor, organization_id, before, saved)
        return saved

    # Teams

    async def add_team_member(
        self, actor: Actor, team_id: str, member_id: str, role: TeamRole = TeamRole.MEMBER
    ) -> Team:
        member = await self._load_member(member_id)

        async def attempt() -> Tuple[Team, Team]:
            team, _ = await self._access.require(actor, ResourceType.TEAM, team_id, Action.MANAGE_MEMBERS)
            if team.organization_id and not member.belongs_to_organization(team.organization_id):
                raise InvariantViolationError(
                    "User must belong to the team's organization",
                    {"team_id": team.id, "actor_id": member_id},
                )
            before = Team.from_dict(team.to_dict())
            team.add_member(member_id, role)
            return before, await self._store.save_team(team)

        before, saved = await self._with_retries("add team member", attempt)
        await self._sync_actor_team(member_id, team_id, saved.role_of(member_id))
        logger.info(f"{actor.id} added {member_id} to team {team_id}")
        await self._audit_members(actor, team_id, before, saved)
        return saved

    async def remove_team_member(self, actor: Actor, team_id: str, member_id: str) -> Team:
        async def attempt() -> Tuple[Team, Team]:
            team, _ = await self._access.require(actor, ResourceType.TEAM, team_id, Action.MANAGE_MEMBERS)
            before = Team.from_dict(team.to_dict())
            team.remove_member(member_id)
            return before, await self._store.save_team(team)

        before, saved = await self._with_retries("remove team member", attempt)
        await self._sync_actor_team(member_id, team_id, None)
        logger.info(f"{actor.id} removed {member_id} from team {team_id}")
        await self._audit_members(actor, team_id, before, saved)
        return saved

    async def change_team_member_role(self, actor: Actor, team_id: str, member_id: str, role: TeamRole) -> Team:
        """Promoting to lead demotes the current lead in the same save."""
        async def attempt() -> Tuple[Team, Team, Optional[str]]:
            team, _ = await self._access.require(actor, ResourceType.TEAM, team_id, Action.MANAGE_MEMBERS)
            before = Team.from_dict(team.to_dict())
            previous_lead = team.change_member_role(member_id, role)
            return before, await self._store.save_team(team), previous_lead

        before, saved, previous_lead = await self._with_retries("change team member role", attempt)
        await self._sync_actor_team(member_id, team_id, saved.role_of(member_id))
        if previous_lead:
            await self._sync_actor_team(previous_lead, team_id, saved.role_of(previous_lead))
            logger.info(f"Leadership of team {team_id} moved from {previous_lead} to {member_id}")
        await self._audit_members(actor, team_id, before, saved)
        return saved

    async def transfer_team_leadership(self, actor: Actor, team_id: str, new_lead_id: str) -> Team:
        return await self.change_team_member_role(actor, team_id, new_lead_id, TeamRole.LEAD)

    async def _sync_actor_team(self, actor_id: str, team_id: str, role: Optional[TeamRole]) -> None:
        """Mirror a team role onto the actor record."""
        member = await self._store.get_actor(actor_id)
        if member is None:
            return
        memberships = dict(member.team_memberships)
        if role is None:
            memberships.pop(team_id, None)
        else:
            memberships[team_id] = role
        await self._store.save_actor(replace(member, team_memberships=memberships))

    # Projects

    async def add_project_member(
        self, actor: Actor, project_id: str, member_id: str, role: ProjectRole = ProjectRole.MEMBER
    ) -> Project:
        member = await self._load_member(member_id)

        async def attempt() -> Tuple[Project, Project]:
            project, _ = await self._access.require(actor, ResourceType.PROJECT, project_id, Action.MANAGE_MEMBERS)
            if project.organization_id and not member.belongs_to_organization(project.organization_id):
                raise InvariantViolationError(
                    "User must belong to the project's organization",
                    {"project_id": project.id, "actor_id": member_id},
                )
            before = Project.from_dict(project.to_dict())
            project.add_member(member_id, role)
            return before, await self._store.save_project(project)

        before, saved = await self._with_retries("add project member", attempt)
        logger.info(f"{actor.id} added {member_id} to project {project_id}")
        await self._audit_members(actor, project_id, before, saved)
        return saved

    async def remove_project_member(self, actor: Actor, project_id: str, member_id: str) -> Project:
        async def attempt() -> Tuple[Project, Project]:
            project, _ = await self._access.require(actor, ResourceType.PROJECT, project_id, Action.MANAGE_MEMBERS)
            before = Project.from_dict(project.to_dict())
            project.remove_member(member_id)
            return before, await self._store.save_project(project)

        before, saved = await self._with_retries("remove project member", attempt)
        logger.info(f"{actor.id} removed {member_id} from project {project_id}")
        await self._audit_members(actor, project_id, before, saved)
        return saved

    async def change_project_member_role(
        self, actor: Actor, project_id: str, member_id: str, role: ProjectRole
    ) -> Project:
        async def attempt() -> Tuple[Project, Project]:
            project, _ = await self._access.require(actor, ResourceType.PROJECT, project_id, Action.MANAGE_MEMBERS)
            before = Project.from_dict(project.to_dict())
            project.change_member_role(member_id, role)
            return before, await self._store.save_project(project)

        before, saved = await self._with_retries("change project member role", attempt)
        await self._audit_members(actor, project_id, before, saved)
        return saved

"""Access resolver.

Single decision function for every (actor, resource, action) request. Rules
are evaluated in a fixed order and the first one that applies wins:

1. inactive actors are denied outright
2. super admin
3. ownership (organization owner, project creator, resource creator,
   attachment uploader)
4. lifecycle: inactive resources are closed to everyone else
5. explicit membership, ranked by role
6. visibility policy, read only
7. deny

Missing resources are denied with ``not_found``. Store failures propagate.
"""

import logging
from typing import FrozenSet, List, Optional, Union

from ....config.constants import (
    ALL_ACTIONS,
    NO_ACTIONS,
    READ_ONLY,
    READ_WRITE,
    Action,
    DecisionReason,
    ProjectRole,
    ResourceType,
)
from ...identity.entities.actor import Actor
from ...membership.services.membership_resolver import MembershipResolver
from ...organizations.entities.organization import Organization
from ...projects.entities.project import Project
from ...resources.entities.resource import Attachment, Document, Task
from ...store.entities.protocols import EntityReader
from ...teams.entities.team import Team
from ...visibility.services.visibility_resolver import VisibilityResolver
from ..entities.decision import Decision, Grant

logger = logging.getLogger(__name__)

AccessSubject = Union[Organization, Team, Project, Document, Task, Attachment]

ORG_ADMIN_ACTIONS: FrozenSet[Action] = READ_WRITE
TEAM_MANAGER_ACTIONS: FrozenSet[Action] = frozenset({Action.READ, Action.WRITE, Action.MANAGE_MEMBERS})

PROJECT_ROLE_ACTIONS = {
    ProjectRole.ADMIN: frozenset({Action.READ, Action.WRITE, Action.MANAGE_MEMBERS}),
    ProjectRole.MEMBER: READ_WRITE,
    ProjectRole.VIEWER: READ_ONLY,
}

PROJECT_RESOURCE_ROLE_ACTIONS = {
    ProjectRole.ADMIN: frozenset({Action.READ, Action.WRITE, Action.DELETE}),
    ProjectRole.MEMBER: READ_WRITE,
    ProjectRole.VIEWER: READ_ONLY,
}

# Grant reasons that mean "you are related, but not enough"
_MEMBERSHIP_REASONS = frozenset({
    DecisionReason.MEMBERSHIP,
    DecisionReason.TEAM_MEMBERSHIP,
    DecisionReason.ORGANIZATION_ADMIN,
    DecisionReason.ASSIGNMENT,
    DecisionReason.PARENT_RESOURCE,
})


class AccessResolver:
    """Combines role hierarchy, membership and visibility into a Decision."""

    def __init__(
        self,
        store: EntityReader,
        membership: Optional[MembershipResolver] = None,
        visibility: Optional[VisibilityResolver] = None,
    ):
        self._store = store
        self._membership = membership or MembershipResolver(store)
        self._visibility = visibility or VisibilityResolver(store, self._membership)

    async def load(self, resource_type: ResourceType, resource_id: str) -> Optional[AccessSubject]:
        """Fetch the entity a decision is about."""
        resource_type = ResourceType(resource_type)
        if resource_type is ResourceType.ORGANIZATION:
            return await self._store.get_organization(resource_id)
        if resource_type is ResourceType.TEAM:
            return await self._store.get_team(resource_id)
        if resource_type is ResourceType.PROJECT:
            return await self._store.get_project(resource_id)
        return await self._store.get_resource(resource_type, resource_id)

    async def decide(
        self,
        actor: Actor,
        resource_type: ResourceType,
        resource_id: str,
        action: Action,
    ) -> Decision:
        """Decide whether ``actor`` may perform ``action`` on the resource."""
        resource_type = ResourceType(resource_type)
        action = Action(action)

        entity = await self.load(resource_type, resource_id)
        if entity is None:
            logger.info(f"Denied {action.value} on missing {resource_type.value} {resource_id} for {actor.id}")
            return Decision.deny(DecisionReason.NOT_FOUND, action, resource_type, resource_id)

        return await self.decide_for(actor, entity, action)

    async def decide_for(self, actor: Actor, entity: AccessSubject, action: Action) -> Decision:
        """Decide against an already loaded entity."""
        action = Action(action)
        resource_type = entity.resource_type

        grants = await self.grants(actor, entity)
        permitted = frozenset().union(*(g.actions for g in grants)) if grants else NO_ACTIONS

        for grant in grants:
            if action in grant.actions:
                logger.debug(
                    f"Allowed {action.value} on {resource_type.value} {entity.id} "
                    f"for {actor.id} ({grant.reason.value})"
                )
                return Decision.allow(grant.reason, action, resource_type, entity.id, permitted)

        reason = _denial_reason(grants)
        logger.info(
            f"Denied {action.value} on {resource_type.value} {entity.id} for {actor.id} ({reason.value})"
        )
        return Decision.deny(reason, action, resource_type, entity.id, permitted)

    async def permitted_actions(
        self, actor: Actor, resource_type: ResourceType, resource_id: str
    ) -> FrozenSet[Action]:
        decision = await self.decide(actor, resource_type, resource_id, Action.READ)
        return decision.permitted_actions

    async def grants(self, actor: Actor, entity: AccessSubject) -> List[Grant]:
        """Return the grants of the first rule that applies, strongest first.

        An empty list means nothing applied.
        """
        if not actor.is_active:
            return [Grant(NO_ACTIONS, DecisionReason.INACTIVE)]

        if actor.is_super_admin:
            return [Grant(ALL_ACTIONS, DecisionReason.SUPER_ADMIN)]

        if _is_owner(actor, entity):
            return [Grant(ALL_ACTIONS, DecisionReason.OWNERSHIP)]

        if isinstance(entity, Attachment):
            return await self._attachment_grants(actor, entity)

        project = await self._containing_project(entity)
        if not _is_active(entity) or (project is not None and not project.is_active):
            return [Grant(NO_ACTIONS, DecisionReason.INACTIVE)]

        if isinstance(entity, Organization):
            grants = await self._organization_grants(actor, entity)
        elif isinstance(entity, Team):
            grants = await self._team_grants(actor, entity)
        elif isinstance(entity, Project):
            grants = await self._project_grants(actor, entity)
        else:
            grants = await self._resource_grants(actor, entity, project)

        if grants:
            return grants

        if not isinstance(entity, Organization) and await self._visibility.is_visible_by_policy(actor, entity):
            return [Grant(READ_ONLY, DecisionReason.VISIBILITY)]

        return []

    # Membership grants per entity kind

    async def _organization_grants(self, actor: Actor, organization: Organization) -> List[Grant]:
        if await self._membership.is_org_admin(actor, organization):
            return [Grant(ORG_ADMIN_ACTIONS, DecisionReason.ORGANIZATION_ADMIN)]
        if self._membership.is_org_member(actor, organization.id):
            return [Grant(READ_ONLY, DecisionReason.MEMBERSHIP)]
        return []

    async def _team_grants(self, actor: Actor, team: Team) -> List[Grant]:
        grants = []
        if team.is_lead(actor.id):
            grants.append(Grant(ALL_ACTIONS, DecisionReason.MEMBERSHIP))
        if team.organization_id and await self._membership.is_org_admin(actor, team.organization_id):
            grants.append(Grant(TEAM_MANAGER_ACTIONS, DecisionReason.ORGANIZATION_ADMIN))
        if team.is_member(actor.id) and not team.is_lead(actor.id):
            grants.append(Grant(READ_ONLY, DecisionReason.TEAM_MEMBERSHIP))
        return grants

    async def _project_grants(self, actor: Actor, project: Project) -> List[Grant]:
        grants = []
        role = project.role_of(actor.id)
        if role is not None:
            grants.append(Grant(PROJECT_ROLE_ACTIONS[role], DecisionReason.MEMBERSHIP))
        grants.extend(await self._project_scope_grants(actor, project))
        return grants

    async def _resource_grants(
        self, actor: Actor, resource: Union[Document, Task], project: Optional[Project]
    ) -> List[Grant]:
        grants = []
        if project is not None:
            role = project.role_of(actor.id)
            if role is not None:
                grants.append(Grant(PROJECT_RESOURCE_ROLE_ACTIONS[role], DecisionReason.MEMBERSHIP))
            grants.extend(await self._project_scope_grants(actor, project))
        if isinstance(resource, Task) and resource.is_assignee(actor.id):
            grants.append(Grant(READ_WRITE, DecisionReason.ASSIGNMENT))
        return grants

    async def _attachment_grants(self, actor: Actor, attachment: Attachment) -> List[Grant]:
        if not attachment.is_active:
            return [Grant(NO_ACTIONS, DecisionReason.INACTIVE)]

        parent = await self._store.get_resource(attachment.parent_type, attachment.attached_to_id)
        if parent is None:
            logger.warning(f"Attachment {attachment.id} references missing {attachment.parent_type.value} "
                           f"{attachment.attached_to_id}")
            return []

        grants = []
        for grant in await self.grants(actor, parent):
            actions = set()
            if Action.READ in grant.actions:
                actions.add(Action.READ)
            if Action.WRITE in grant.actions:
                actions.update((Action.WRITE, Action.DELETE))
            reason = grant.reason
            if reason not in (DecisionReason.VISIBILITY, DecisionReason.INACTIVE):
                reason = DecisionReason.PARENT_RESOURCE
            grants.append(Grant(frozenset(actions), reason))
        return grants

    # Helpers

    async def _project_scope_grants(self, actor: Actor, project: Project) -> List[Grant]:
        """Read access through the project's organization or team, whatever its visibility."""
        grants = []
        if project.organization_id and await self._membership.is_org_admin(actor, project.organization_id):
            grants.append(Grant(READ_ONLY, DecisionReason.ORGANIZATION_ADMIN))
        if project.team_id and await self._membership.is_team_member(actor, project.team_id):
            grants.append(Grant(READ_ONLY, DecisionReason.TEAM_MEMBERSHIP))
        return grants

    async def _containing_project(self, entity: AccessSubject) -> Optional[Project]:
        if isinstance(entity, (Document, Task)) and entity.project_id is not None:
            return await self._store.get_project(entity.project_id)
        return None


def _is_owner(actor: Actor, entity: AccessSubject) -> bool:
    if isinstance(entity, Organization):
        return entity.is_owner(actor.id)
    if isinstance(entity, Team):
        # Teams have a lead, not an owner
        return False
    if isinstance(entity, Project):
        return entity.is_creator(actor.id)
    return entity.created_by == actor.id


def _is_active(entity: AccessSubject) -> bool:
    return getattr(entity, "is_active", True)


def _denial_reason(grants: List[Grant]) -> DecisionReason:
    if not grants:
        return DecisionReason.ACCESS_DENIED
    reason = grants[0].reason
    if reason in _MEMBERSHIP_REASONS:
        return DecisionReason.INSUFFICIENT_ROLE
    if reason is DecisionReason.INACTIVE:
        return DecisionReason.INACTIVE
    return DecisionReason.ACCESS_DENIED

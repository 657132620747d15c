"""Access service.

Entry point for callers holding a bearer token. ``check_access`` returns a
verdict; ``require`` turns a deny into ``NotFoundError`` or
``AccessDeniedError`` so HTTP callers can answer 404 versus 403.
"""

import logging
from typing import Dict, List, Optional, Tuple, Type

from ....config.constants import Action, DecisionReason, ResourceType
from ....core.exceptions import (
    AccessDeniedError,
    NotFoundError,
    OrganizationNotFoundError,
    ProjectNotFoundError,
    ResourceNotFoundError,
    TeamNotFoundError,
    ValidationError,
)
from ...identity.entities.actor import Actor
from ...identity.services.identity_service import IdentityService
from ...resources.entities.resource import CollaborationResource
from ...store.entities.protocols import EntityReader
from ..entities.decision import Decision
from .access_resolver import AccessResolver, AccessSubject

logger = logging.getLogger(__name__)

NOT_FOUND_ERRORS: Dict[ResourceType, Type[NotFoundError]] = {
    ResourceType.ORGANIZATION: OrganizationNotFoundError,
    ResourceType.TEAM: TeamNotFoundError,
    ResourceType.PROJECT: ProjectNotFoundError,
    ResourceType.DOCUMENT: ResourceNotFoundError,
    ResourceType.TASK: ResourceNotFoundError,
    ResourceType.ATTACHMENT: ResourceNotFoundError,
}

LISTABLE_TYPES = (ResourceType.DOCUMENT, ResourceType.TASK, ResourceType.ATTACHMENT)


def _parse(resource_type, action) -> Tuple[ResourceType, Action]:
    try:
        return ResourceType(resource_type), Action(action)
    except ValueError as e:
        raise ValidationError(str(e), {"resource_type": str(resource_type), "action": str(action)})


class AccessService:
    """Identity-aware facade over the access resolver."""

    def __init__(self, identity: IdentityService, resolver: AccessResolver, store: EntityReader):
        self._identity = identity
        self._resolver = resolver
        self._store = store

    async def check_access(self, token: str, resource_type, resource_id: str, action) -> Decision:
        """Resolve the token's actor and decide. Authentication errors propagate."""
        resource_type, action = _parse(resource_type, action)
        actor = await self._identity.resolve_actor(token)
        return await self._resolver.decide(actor, resource_type, resource_id, action)

    async def decide(self, actor: Actor, resource_type, resource_id: str, action) -> Decision:
        resource_type, action = _parse(resource_type, action)
        return await self._resolver.decide(actor, resource_type, resource_id, action)

    async def require(
        self, actor: Actor, resource_type, resource_id: str, action
    ) -> Tuple[AccessSubject, Decision]:
        """Load the entity and assert access, returning both.

        Raises:
            NotFoundError: the entity does not exist
            AccessDeniedError: the entity exists but the action is not permitted
        """
        resource_type, action = _parse(resource_type, action)
        entity = await self._resolver.load(resource_type, resource_id)
        if entity is None:
            raise NOT_FOUND_ERRORS[resource_type](resource_id)

        decision = await self._resolver.decide_for(actor, entity, action)
        if not decision.allowed:
            raise AccessDeniedError(
                f"Not permitted to {action.value} {resource_type.value} {resource_id}",
                details={
                    "resource_type": resource_type.value,
                    "resource_id": resource_id,
                    "action": action.value,
                    "reason": decision.reason.value,
                },
            )
        return entity, decision

    async def list_accessible(
        self, actor: Actor, resource_type, project_id: Optional[str] = None
    ) -> List[CollaborationResource]:
        """Return the documents, tasks or attachments ``actor`` may read."""
        resource_type, _ = _parse(resource_type, Action.READ)
        if resource_type not in LISTABLE_TYPES:
            raise ValidationError(
                f"Cannot list resources of type {resource_type.value}",
                {"resource_type": resource_type.value},
            )

        accessible = []
        for resource in await self._store.list_resources(resource_type, project_id):
            decision = await self._resolver.decide_for(actor, resource, Action.READ)
            if decision.allowed:
                accessible.append(resource)

        logger.debug(f"{actor.id} can read {len(accessible)} {resource_type.value} resources")
        return accessible

    @staticmethod
    def is_not_found(decision: Decision) -> bool:
        return decision.reason is DecisionReason.NOT_FOUND

"""Mutations on documents, tasks, attachments, projects and organizations.

Each operation asks the access service first and changes nothing unless the
decision is an allow. Tracked field changes are written to the audit trail
after the store accepted the write.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict

from ....config.constants import Action, AuditAction, ResourceType
from ....core.exceptions import ResourceNotFoundError, ValidationError
from ...access.services.access_service import AccessService
from ...audit.services.audit_recorder import AuditRecorder
from ...audit.services.field_diff import FieldChange
from ...identity.entities.actor import Actor
from ...resources.entities.resource import (
    Attachment,
    CollaborationResource,
    Document,
    Subtask,
    Task,
)
from ...store.entities.protocols import EntityStore

logger = logging.getLogger(__name__)

TASK_UPDATABLE_FIELDS = frozenset({
    "title",
    "description",
    "status",
    "priority",
    "start_date",
    "due_date",
    "tags",
    "assignees",
    "attachments",
    "subtasks",
})

DOCUMENT_UPDATABLE_FIELDS = frozenset({"title", "content"})


class ResourceService:
    """Creates, updates and deletes collaboration resources."""

    def __init__(self, store: EntityStore, access: AccessService, audit: AuditRecorder):
        self._store = store
        self._access = access
        self._audit = audit

    async def create_resource(self, actor: Actor, resource: CollaborationResource) -> CollaborationResource:
        """Create a resource owned by ``actor``.

        Project-scoped resources need ``write`` on the project. Attachments
        need ``write`` on their parent.
        """
        if resource.created_by != actor.id:
            raise ValidationError("Resources are created on behalf of the caller", {"created_by": resource.created_by})

        if isinstance(resource, Attachment):
            await self._access.require(actor, resource.parent_type, resource.attached_to_id, Action.WRITE)
        else:
            resource.validate_public_flag()
            if resource.project_id is not None:
                await self._access.require(actor, ResourceType.PROJECT, resource.project_id, Action.WRITE)

        existing = await self._store.get_resource(resource.resource_type, resource.id)
        if existing is not None:
            raise ValidationError(
                f"{resource.resource_type.value} {resource.id} already exists", {"id": resource.id}
            )

        saved = await self._store.save_resource(resource)
        logger.info(f"{actor.id} created {resource.resource_type.value} {resource.id}")
        await self._audit.record(resource.id, AuditAction.CREATED, actor)
        if isinstance(resource, Attachment):
            await self._record_on_parent(actor, resource, AuditAction.ATTACHMENT_ADDED)
        return saved

    async def update_document(self, actor: Actor, document_id: str, **changes: Any) -> Document:
        """Update title or content, bumping the document version."""
        _reject_unknown_fields(changes, DOCUMENT_UPDATABLE_FIELDS)
        document, _ = await self._access.require(actor, ResourceType.DOCUMENT, document_id, Action.WRITE)

        before = document.snapshot()
        for name, value in changes.items():
            setattr(document, name, value)
        document.version += 1
        document.last_edited_by = actor.id
        document.updated_at = datetime.now(timezone.utc)

        saved = await self._store.save_resource(document)
        await self._audit.record_changes(document_id, actor, before, saved.snapshot())
        return saved

    async def update_task(self, actor: Actor, task_id: str, **changes: Any) -> Task:
        """Update tracked task fields. Assignees may do this too."""
        _reject_unknown_fields(changes, TASK_UPDATABLE_FIELDS)
        task, _ = await self._access.require(actor, ResourceType.TASK, task_id, Action.WRITE)

        before = task.snapshot()
        data = task.to_dict()
        if "subtasks" in changes:
            changes["subtasks"] = [
                s.to_dict() if isinstance(s, Subtask) else dict(s) for s in changes["subtasks"]
            ]
        data.update(changes)
        data["updated_at"] = datetime.now(timezone.utc)
        try:
            updated = Task.from_dict(data)
        except (TypeError, ValueError) as e:
            raise ValidationError(f"Invalid task update: {e}", {"task_id": task_id})

        saved = await self._store.save_resource(updated)
        await self._audit.record_changes(task_id, actor, before, saved.snapshot())
        return saved

    async def set_public(self, actor: Actor, resource_type, resource_id: str, is_public: bool):
        """Toggle the public flag of a personal document or task."""
        resource_type = ResourceType(resource_type)
        if resource_type not in (ResourceType.DOCUMENT, ResourceType.TASK):
            raise ValidationError(
                f"{resource_type.value} resources have no public flag", {"resource_type": resource_type.value}
            )
        resource, _ = await self._access.require(actor, resource_type, resource_id, Action.WRITE)
        unchanged = resource.is_public == is_public
        resource.is_public = is_public
        resource.validate_public_flag()
        if unchanged:
            return resource

        resource.updated_at = datetime.now(timezone.utc)
        saved = await self._store.save_resource(resource)
        await self._audit.record(
            resource_id,
            AuditAction.UPDATED,
            actor,
            details=f"{actor.name or actor.id} made this {resource_type.value} {'public' if is_public else 'private'}",
        )
        return saved

    async def delete_resource(self, actor: Actor, resource_type, resource_id: str) -> None:
        resource_type = ResourceType(resource_type)
        resource, _ = await self._access.require(actor, resource_type, resource_id, Action.DELETE)
        if not await self._store.delete_resource(resource_type, resource_id):
            raise ResourceNotFoundError(resource_id)
        logger.info(f"{actor.id} deleted {resource_type.value} {resource_id}")
        await self._audit.record(resource_id, AuditAction.DELETED, actor)
        if isinstance(resource, Attachment):
            await self._record_on_parent(actor, resource, AuditAction.ATTACHMENT_REMOVED)

    async def delete_project(self, actor: Actor, project_id: str) -> None:
        """Delete a project. Its tasks are deleted; its documents become private personal documents."""
        await self._access.require(actor, ResourceType.PROJECT, project_id, Action.DELETE)
        await self._store.delete_project(project_id)
        await self._audit.record(project_id, AuditAction.DELETED, actor)

    async def delete_organization(self, actor: Actor, organization_id: str) -> None:
        """Soft delete: the organization is deactivated and detached from its teams and projects."""
        await self._access.require(actor, ResourceType.ORGANIZATION, organization_id, Action.DELETE)
        await self._store.deactivate_organization(organization_id)
        await self._audit.record(
            organization_id, AuditAction.DELETED, actor, details="Organization deactivated"
        )

    async def _record_on_parent(self, actor: Actor, attachment: Attachment, action: AuditAction) -> None:
        """Mirror an attachment upload or removal into its parent's history."""
        name = attachment.original_name or attachment.id
        if action is AuditAction.ATTACHMENT_ADDED:
            change = FieldChange(action, "attachments", new_value=name)
        else:
            change = FieldChange(action, "attachments", old_value=name)
        await self._audit.record(attachment.attached_to_id, action, actor, [change])


def _reject_unknown_fields(changes: Dict[str, Any], allowed: frozenset) -> None:
    unknown = sorted(set(changes) - allowed)
    if unknown:
        raise ValidationError(f"Fields cannot be updated: {', '.join(unknown)}", {"fields": unknown})

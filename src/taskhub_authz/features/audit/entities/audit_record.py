"""Audit record entity.

Records are immutable once created. Values are stored as JSON-safe
snapshots taken at the time of the change.
"""

from dataclasses import dataclass, field as dataclass_field
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional
from uuid import uuid4

from ....config.constants import AuditAction
from ..utils.formatting import format_date


@dataclass(frozen=True)
class AuditRecord:
    """One change applied to a resource by an actor."""

    resource_id: str
    action: AuditAction
    actor_id: str
    actor_name: str = ""
    field: Optional[str] = None
    old_value: Any = None
    new_value: Any = None
    details: Optional[str] = None
    id: str = dataclass_field(default_factory=lambda: uuid4().hex)
    created_at: datetime = dataclass_field(default_factory=lambda: datetime.now(timezone.utc))

    def __post_init__(self):
        object.__setattr__(self, "action", AuditAction(self.action))

    def describe(self) -> str:
        """Human readable summary of the change."""
        name = self.actor_name or self.actor_id
        old, new = self.old_value, self.new_value
        action = self.action

        if action is AuditAction.CREATED:
            return f"{name} created this resource"
        if action is AuditAction.TITLE_UPDATED:
            return f'{name} changed title from "{old}" to "{new}"'
        if action is AuditAction.DESCRIPTION_UPDATED:
            return f"{name} updated the description"
        if action is AuditAction.STATUS_CHANGED:
            return f'{name} changed status from "{old}" to "{new}"'
        if action is AuditAction.PRIORITY_CHANGED:
            return f'{name} changed priority from "{old}" to "{new}"'
        if action is AuditAction.ASSIGNED:
            return f"{name} assigned this task to {new}"
        if action is AuditAction.UNASSIGNED:
            return f"{name} unassigned {old} from this task"
        if action in (AuditAction.DUE_DATE_CHANGED, AuditAction.START_DATE_CHANGED):
            label = "due date" if action is AuditAction.DUE_DATE_CHANGED else "start date"
            if new is None:
                return f"{name} cleared {label}"
            if old is None:
                return f"{name} set {label} to {format_date(new)}"
            return f"{name} changed {label} from {format_date(old)} to {format_date(new)}"
        if action is AuditAction.ATTACHMENT_ADDED:
            return f"{name} added attachment: {new}"
        if action is AuditAction.ATTACHMENT_REMOVED:
            return f"{name} removed attachment: {old}"
        if action is AuditAction.SUBTASK_ADDED:
            return f"{name} added subtask: {new}"
        if action is AuditAction.SUBTASK_UPDATED:
            return f"{name} updated subtask: {self.details}"
        if action is AuditAction.SUBTASK_COMPLETED:
            return f"{name} completed subtask: {new}"
        if action is AuditAction.SUBTASK_DELETED:
            return f"{name} deleted subtask: {old}"
        if action is AuditAction.TAG_ADDED:
            return f"{name} added tag: {new}"
        if action is AuditAction.TAG_REMOVED:
            return f"{name} removed tag: {old}"
        if action is AuditAction.MEMBER_ADDED:
            return f"{name} added member {new}"
        if action is AuditAction.MEMBER_REMOVED:
            return f"{name} removed member {old}"
        if action is AuditAction.MEMBER_ROLE_CHANGED:
            return f'{name} changed role of {self.details} from "{old}" to "{new}"'
        if action is AuditAction.DELETED:
            return f"{name} deleted this resource"
        return self.details or f"{name} made changes to this resource"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "resource_id": self.resource_id,
            "action": self.action.value,
            "field": self.field,
            "actor_id": self.actor_id,
            "actor_name": self.actor_name,
            "old_value": self.old_value,
            "new_value": self.new_value,
            "details": self.details,
            "created_at": self.created_at.isoformat(),
            "description": self.describe(),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "AuditRecord":
        created_at = data.get("created_at")
        if isinstance(created_at, str):
            created_at = datetime.fromisoformat(created_at)
        return cls(
            id=str(data["id"]),
            resource_id=str(data["resource_id"]),
            action=AuditAction(data["action"]),
            actor_id=str(data["actor_id"]),
            actor_name=data.get("actor_name") or "",
            field=data.get("field"),
            old_value=data.get("old_value"),
            new_value=data.get("new_value"),
            details=data.get("details"),
            created_at=created_at or datetime.now(timezone.utc),
        )

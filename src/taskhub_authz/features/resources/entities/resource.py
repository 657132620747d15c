"""Collaboration resources: documents, tasks and attachments.

A resource without a project is personal, owned by its creator, and may be
flagged public. A resource inside a project inherits the project's access
policy and is never independently public.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, ClassVar, Dict, List, Mapping, Optional, Union

from ....config.constants import (
    AttachmentParent,
    ResourceType,
    SubtaskStatus,
    TaskPriority,
)
from ....core.exceptions import InvariantViolationError


def _now() -> datetime:
    return datetime.now(timezone.utc)


def _parse_datetime(value: Any) -> Optional[datetime]:
    if value is None or isinstance(value, datetime):
        return value
    return datetime.fromisoformat(value)


def _format_datetime(value: Optional[datetime]) -> Optional[str]:
    return value.isoformat() if value else None


class PublicFlagMixin:
    """Shared public-flag semantics for documents and tasks."""

    project_id: Optional[str]
    is_public: bool

    @property
    def is_personal(self) -> bool:
        return self.project_id is None

    @property
    def is_effectively_public(self) -> bool:
        """Project containment overrides the public flag."""
        return self.is_public and self.project_id is None

    def validate_public_flag(self) -> None:
        if self.is_public and self.project_id is not None:
            raise InvariantViolationError(
                "Project-scoped resources cannot be made public",
                {"resource_id": getattr(self, "id", None), "project_id": self.project_id},
            )


@dataclass
class Document(PublicFlagMixin):
    """Rich-text document."""

    resource_type: ClassVar[ResourceType] = ResourceType.DOCUMENT

    id: str
    created_by: str
    title: str = ""
    content: str = ""
    project_id: Optional[str] = None
    is_public: bool = False
    version: int = 1
    last_edited_by: Optional[str] = None
    updated_at: datetime = field(default_factory=_now)

    def snapshot(self) -> Dict[str, Any]:
        return {"title": self.title, "description": self.content}

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created_by": self.created_by,
            "title": self.title,
            "content": self.content,
            "project_id": self.project_id,
            "is_public": self.is_public,
            "version": self.version,
            "last_edited_by": self.last_edited_by,
            "updated_at": _format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Document":
        return cls(
            id=str(data["id"]),
            created_by=str(data["created_by"]),
            title=data.get("title") or "",
            content=data.get("content") or "",
            project_id=data.get("project_id"),
            is_public=bool(data.get("is_public", False)),
            version=data.get("version", 1),
            last_edited_by=data.get("last_edited_by"),
            updated_at=_parse_datetime(data.get("updated_at")) or _now(),
        )


@dataclass
class Subtask:
    """Checklist item inside a task."""

    id: str
    title: str
    status: SubtaskStatus = SubtaskStatus.TODO

    def __post_init__(self):
        self.status = SubtaskStatus(self.status)

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "title": self.title, "status": self.status.value}


@dataclass
class Task(PublicFlagMixin):
    """Kanban task."""

    resource_type: ClassVar[ResourceType] = ResourceType.TASK

    id: str
    created_by: str
    title: str = ""
    description: str = ""
    status: str = "todo"
    priority: TaskPriority = TaskPriority.MEDIUM
    start_date: Optional[datetime] = None
    due_date: Optional[datetime] = None
    tags: List[str] = field(default_factory=list)
    assignees: List[str] = field(default_factory=list)
    attachments: List[str] = field(default_factory=list)
    subtasks: List[Subtask] = field(default_factory=list)
    project_id: Optional[str] = None
    is_public: bool = False
    updated_at: datetime = field(default_factory=_now)

    def __post_init__(self):
        self.priority = TaskPriority(self.priority)
        self.subtasks = [
            s if isinstance(s, Subtask) else Subtask(**s) for s in self.subtasks
        ]

    def is_assignee(self, actor_id: str) -> bool:
        return actor_id in self.assignees

    def snapshot(self) -> Dict[str, Any]:
        return {
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority.value,
            "start_date": self.start_date,
            "due_date": self.due_date,
            "tags": list(self.tags),
            "assignees": list(self.assignees),
            "attachments": list(self.attachments),
            "subtasks": {s.id: s.to_dict() for s in self.subtasks},
        }

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created_by": self.created_by,
            "title": self.title,
            "description": self.description,
            "status": self.status,
            "priority": self.priority.value,
            "start_date": _format_datetime(self.start_date),
            "due_date": _format_datetime(self.due_date),
            "tags": list(self.tags),
            "assignees": list(self.assignees),
            "attachments": list(self.attachments),
            "subtasks": [s.to_dict() for s in self.subtasks],
            "project_id": self.project_id,
            "is_public": self.is_public,
            "updated_at": _format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Task":
        return cls(
            id=str(data["id"]),
            created_by=str(data["created_by"]),
            title=data.get("title") or "",
            description=data.get("description") or "",
            status=data.get("status") or "todo",
            priority=TaskPriority(data.get("priority", TaskPriority.MEDIUM.value)),
            start_date=_parse_datetime(data.get("start_date")),
            due_date=_parse_datetime(data.get("due_date")),
            tags=list(data.get("tags") or []),
            assignees=list(data.get("assignees") or []),
            attachments=list(data.get("attachments") or []),
            subtasks=[Subtask(**s) for s in data.get("subtasks") or []],
            project_id=data.get("project_id"),
            is_public=bool(data.get("is_public", False)),
            updated_at=_parse_datetime(data.get("updated_at")) or _now(),
        )


@dataclass
class Attachment:
    """File attached to a task or document.

    Project scope and public exposure come from the parent resource.
    """

    resource_type: ClassVar[ResourceType] = ResourceType.ATTACHMENT

    id: str
    created_by: str
    attached_to: AttachmentParent
    attached_to_id: str
    original_name: str = ""
    description: str = ""
    is_active: bool = True
    updated_at: datetime = field(default_factory=_now)

    def __post_init__(self):
        self.attached_to = AttachmentParent(self.attached_to)

    @property
    def uploaded_by(self) -> str:
        return self.created_by

    @property
    def parent_type(self) -> ResourceType:
        return ResourceType(self.attached_to.value)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "created_by": self.created_by,
            "attached_to": self.attached_to.value,
            "attached_to_id": self.attached_to_id,
            "original_name": self.original_name,
            "description": self.description,
            "is_active": self.is_active,
            "updated_at": _format_datetime(self.updated_at),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "Attachment":
        return cls(
            id=str(data["id"]),
            created_by=str(data["created_by"]),
            attached_to=AttachmentParent(data["attached_to"]),
            attached_to_id=str(data["attached_to_id"]),
            original_name=data.get("original_name") or "",
            description=data.get("description") or "",
            is_active=data.get("is_active", True),
            updated_at=_parse_datetime(data.get("updated_at")) or _now(),
        )


CollaborationResource = Union[Document, Task, Attachment]

RESOURCE_CLASSES = {
    ResourceType.DOCUMENT: Document,
    ResourceType.TASK: Task,
    ResourceType.ATTACHMENT: Attachment,
}


def resource_from_dict(resource_type: ResourceType, data: Mapping[str, Any]) -> CollaborationResource:
    """Rebuild a resource entity of the given type from its stored mapping."""
    return RESOURCE_CLASSES[ResourceType(resource_type)].from_dict(data)

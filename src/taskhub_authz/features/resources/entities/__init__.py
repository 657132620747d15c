"""Resource entities."""

from .resource import (
    RESOURCE_CLASSES,
    Attachment,
    CollaborationResource,
    Document,
    PublicFlagMixin,
    Subtask,
    Task,
    resource_from_dict,
)

__all__ = [
    "Document",
    "Task",
    "Subtask",
    "Attachment",
    "PublicFlagMixin",
    "CollaborationResource",
    "RESOURCE_CLASSES",
    "resource_from_dict",
]

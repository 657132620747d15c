"""Constants and enums for taskhub-authz.

This module defines the closed role, visibility, action and audit taxonomies
used throughout the access engine. The values correspond to the columns
stored by the entity store and to the strings carried in identity tokens.
"""

from enum import Enum
from typing import Final, FrozenSet


class RoleScope(str, Enum):
    """Scopes within which a role is meaningful. Roles never compare across scopes."""

    GLOBAL = "global"
    ORGANIZATION = "organization"
    TEAM = "team"
    PROJECT = "project"


class GlobalRole(str, Enum):
    """Platform-wide role carried by every actor."""

    SUPER_ADMIN = "super_admin"
    ORG_ADMIN = "org_admin"
    TEAM_LEAD = "team_lead"
    MEMBER = "member"
    VIEWER = "viewer"


class OrganizationRole(str, Enum):
    """Role of an actor inside one organization."""

    OWNER = "owner"
    ADMIN = "admin"
    MEMBER = "member"


class TeamRole(str, Enum):
    """Role of an actor inside one team."""

    LEAD = "lead"
    MEMBER = "member"


class ProjectRole(str, Enum):
    """Role of an actor inside one project."""

    ADMIN = "admin"
    MEMBER = "member"
    VIEWER = "viewer"


class Visibility(str, Enum):
    """Declared exposure policy of a project or team."""

    PRIVATE = "private"
    TEAM = "team"
    ORGANIZATION = "organization"
    PUBLIC = "public"


class ResourceType(str, Enum):
    """Entity kinds the access engine can decide on."""

    ORGANIZATION = "organization"
    TEAM = "team"
    PROJECT = "project"
    DOCUMENT = "document"
    TASK = "task"
    ATTACHMENT = "attachment"


class Action(str, Enum):
    """Operations an actor may request on a resource."""

    READ = "read"
    WRITE = "write"
    DELETE = "delete"
    MANAGE_MEMBERS = "manage_members"

    @property
    def is_mutation(self) -> bool:
        return self is not Action.READ


ALL_ACTIONS: Final[FrozenSet[Action]] = frozenset(Action)
READ_ONLY: Final[FrozenSet[Action]] = frozenset({Action.READ})
READ_WRITE: Final[FrozenSet[Action]] = frozenset({Action.READ, Action.WRITE})
NO_ACTIONS: Final[FrozenSet[Action]] = frozenset()


class DecisionReason(str, Enum):
    """Why a decision was reached. Deny reasons are surfaced to callers."""

    SUPER_ADMIN = "super_admin"
    OWNERSHIP = "ownership"
    MEMBERSHIP = "membership"
    TEAM_MEMBERSHIP = "team_membership"
    ORGANIZATION_ADMIN = "organization_admin"
    ASSIGNMENT = "assignment"
    PARENT_RESOURCE = "parent_resource"
    VISIBILITY = "visibility"
    INSUFFICIENT_ROLE = "insufficient_role"
    INACTIVE = "inactive"
    NOT_FOUND = "not_found"
    ACCESS_DENIED = "access_denied"


class AttachmentParent(str, Enum):
    """Resource kinds an attachment can hang off."""

    TASK = "task"
    DOCUMENT = "document"


class TaskPriority(str, Enum):
    """Task priority levels."""

    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class SubtaskStatus(str, Enum):
    """Subtask workflow states."""

    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class AuditAction(str, Enum):
    """Closed enumeration of audited change kinds."""

    CREATED = "created"
    UPDATED = "updated"
    TITLE_UPDATED = "title_updated"
    DESCRIPTION_UPDATED = "description_updated"
    STATUS_CHANGED = "status_changed"
    PRIORITY_CHANGED = "priority_changed"
    DUE_DATE_CHANGED = "due_date_changed"
    START_DATE_CHANGED = "start_date_changed"
    ASSIGNED = "assigned"
    UNASSIGNED = "unassigned"
    TAG_ADDED = "tag_added"
    TAG_REMOVED = "tag_removed"
    ATTACHMENT_ADDED = "attachment_added"
    ATTACHMENT_REMOVED = "attachment_removed"
    SUBTASK_ADDED = "subtask_added"
    SUBTASK_UPDATED = "subtask_updated"
    SUBTASK_COMPLETED = "subtask_completed"
    SUBTASK_DELETED = "subtask_deleted"
    MEMBER_ADDED = "member_added"
    MEMBER_REMOVED = "member_removed"
    MEMBER_ROLE_CHANGED = "member_role_changed"
    DELETED = "deleted"


# Fields whose changes are written to the audit trail
TRACKED_FIELDS: Final[tuple] = (
    "title",
    "description",
    "status",
    "priority",
    "due_date",
    "start_date",
    "assignees",
    "tags",
    "attachments",
    "subtasks",
    "members",
)


class CacheKeys:
    """Cache key patterns for Redis."""

    ORGANIZATION: Final[str] = "authz:organization:{id}"
    TEAM: Final[str] = "authz:team:{id}"
    PROJECT: Final[str] = "authz:project:{id}"
    RESOURCE: Final[str] = "authz:{resource_type}:{id}"


class CacheTTL:
    """Cache TTL values in seconds."""

    ENTITY_SHORT: Final[int] = 60
    ENTITY_DEFAULT: Final[int] = 300


class DefaultValues:
    """Default values used throughout the engine."""

    DEFAULT_SCHEMA: Final[str] = "taskhub"
    DEFAULT_AUDIT_PAGE_SIZE: Final[int] = 20
    MAX_AUDIT_PAGE_SIZE: Final[int] = 100
    MAX_MUTATION_RETRIES: Final[int] = 3
    JWT_ALGORITHM: Final[str] = "HS256"


class ErrorCodes:
    """Standardized error codes."""

    NOT_FOUND = "AUTHZ_404"
    ACCESS_DENIED = "AUTHZ_403"
    INVARIANT_VIOLATION = "AUTHZ_409"
    CONCURRENT_MODIFICATION = "AUTHZ_410"
    STORE_UNAVAILABLE = "AUTHZ_503"
    INVALID_TOKEN = "AUTH_001"
    ACTOR_INACTIVE = "AUTH_002"
    VALIDATION_FAILED = "VALID_001"


class Headers:
    """HTTP headers used by the API surface."""

    AUTHORIZATION = "Authorization"
    REQUEST_ID = "X-Request-ID"

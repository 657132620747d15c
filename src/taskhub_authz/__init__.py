"""taskhub-authz - hierarchical authorization for multi-tenant task and document collaboration.

Decides, for any actor and resource, whether an action is permitted given
resources nested across Organization, Team, Project and Document/Task/Attachment,
per-scope roles and per-resource visibility.
"""

# Initialize logging configuration on import
from .config.logging_config import setup_logging
setup_logging()

from .__version__ import __version__

from .config import (
    Action,
    AuditAction,
    DecisionReason,
    GlobalRole,
    OrganizationRole,
    ProjectRole,
    ResourceType,
    RoleScope,
    TeamRole,
    Visibility,
    AuthzSettings,
    get_settings,
)

from .core.exceptions import (
    TaskhubAuthzError,
    NotFoundError,
    AccessDeniedError,
    InvariantViolationError,
    StoreUnavailableError,
    ConcurrentModificationError,
    AuthenticationError,
    InvalidTokenError,
    InactiveActorError,
    ValidationError,
    get_http_status_code,
    create_error_response,
)

from .features.identity.entities import Actor
from .features.organizations.entities import Organization
from .features.teams.entities import Team
from .features.projects.entities import Project
from .features.resources.entities import Attachment, Document, Subtask, Task
from .features.access.entities import Decision
from .features.access.services import AccessResolver, AccessService
from .features.audit.entities import AuditRecord
from .features.audit.services import AuditRecorder
from .features.store.repositories import InMemoryEntityStore
from .bootstrap import AuthzServices, build_services, build_default_services

__all__ = [
    "__version__",

    # Taxonomies
    "Action",
    "AuditAction",
    "DecisionReason",
    "GlobalRole",
    "OrganizationRole",
    "ProjectRole",
    "ResourceType",
    "RoleScope",
    "TeamRole",
    "Visibility",

    # Settings
    "AuthzSettings",
    "get_settings",

    # Exceptions
    "TaskhubAuthzError",
    "NotFoundError",
    "AccessDeniedError",
    "InvariantViolationError",
    "StoreUnavailableError",
    "ConcurrentModificationError",
    "AuthenticationError",
    "InvalidTokenError",
    "InactiveActorError",
    "ValidationError",
    "get_http_status_code",
    "create_error_response",

    # Entities
    "Actor",
    "Organization",
    "Team",
    "Project",
    "Document",
    "Task",
    "Subtask",
    "Attachment",
    "Decision",
    "AuditRecord",

    # Services
    "AccessResolver",
    "AccessService",
    "AuditRecorder",
    "InMemoryEntityStore",
    "AuthzServices",
    "build_services",
    "build_default_services",
]

"""Exception hierarchy for taskhub-authz."""

from .base import (
    TaskhubAuthzError,
    get_http_status_code,
    create_error_response,
)

from .domain import (
    NotFoundError,
    OrganizationNotFoundError,
    TeamNotFoundError,
    ProjectNotFoundError,
    ResourceNotFoundError,
    ActorNotFoundError,
    AccessDeniedError,
    InvariantViolationError,
    StoreError,
    StoreUnavailableError,
    ConcurrentModificationError,
    AuthenticationError,
    InvalidTokenError,
    InactiveActorError,
    ValidationError,
    AuditError,
)

from .http_mapping import HTTP_STATUS_MAP

__all__ = [
    # Base
    "TaskhubAuthzError",
    "get_http_status_code",
    "create_error_response",

    # Lookup
    "NotFoundError",
    "OrganizationNotFoundError",
    "TeamNotFoundError",
    "ProjectNotFoundError",
    "ResourceNotFoundError",
    "ActorNotFoundError",

    # Authorization
    "AccessDeniedError",
    "InvariantViolationError",

    # Store
    "StoreError",
    "StoreUnavailableError",
    "ConcurrentModificationError",

    # Identity
    "AuthenticationError",
    "InvalidTokenError",
    "InactiveActorError",

    # Misc
    "ValidationError",
    "AuditError",
    "HTTP_STATUS_MAP",
]

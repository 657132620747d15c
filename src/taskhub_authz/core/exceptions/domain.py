"""Domain-specific exceptions for taskhub-authz.

NotFound, AccessDenied, InvariantViolation and StoreUnavailable form the
closed taxonomy callers branch on. Authentication errors are raised only at
the identity boundary.
"""

from typing import Any, Dict, Optional

from ...config.constants import ErrorCodes
from .base import TaskhubAuthzError


# Lookup errors
class NotFoundError(TaskhubAuthzError):
    """Raised when a referenced entity does not exist."""

    entity_name = "Entity"

    def __init__(self, entity_id: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(
            f"{self.entity_name} not found: {entity_id}",
            error_code=ErrorCodes.NOT_FOUND,
            details={"entity": self.entity_name.lower(), "id": entity_id, **(details or {})},
        )
        self.entity_id = entity_id


class OrganizationNotFoundError(NotFoundError):
    """Raised when an organization is not found."""
    entity_name = "Organization"


class TeamNotFoundError(NotFoundError):
    """Raised when a team is not found."""
    entity_name = "Team"


class ProjectNotFoundError(NotFoundError):
    """Raised when a project is not found."""
    entity_name = "Project"


class ResourceNotFoundError(NotFoundError):
    """Raised when a document, task or attachment is not found."""
    entity_name = "Resource"


class ActorNotFoundError(NotFoundError):
    """Raised when an actor is not found."""
    entity_name = "Actor"


# Authorization errors
class AccessDeniedError(TaskhubAuthzError):
    """Raised when no rule grants the requested action."""

    def __init__(self, message: str = "Access denied", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code=ErrorCodes.ACCESS_DENIED, details=details)


class InvariantViolationError(TaskhubAuthzError):
    """Raised when a mutation would break a structural invariant."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code=ErrorCodes.INVARIANT_VIOLATION, details=details)


# Store errors
class StoreError(TaskhubAuthzError):
    """Base class for entity store failures."""
    pass


class StoreUnavailableError(StoreError):
    """Raised on entity store I/O failure. Transient and retryable."""

    retryable = True

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code=ErrorCodes.STORE_UNAVAILABLE, details=details)


class ConcurrentModificationError(StoreError):
    """Raised when a compare-and-swap save loses against a concurrent writer."""

    retryable = True

    def __init__(self, entity: str, entity_id: str, expected_version: int):
        super().__init__(
            f"{entity} {entity_id} was modified concurrently (expected version {expected_version})",
            error_code=ErrorCodes.CONCURRENT_MODIFICATION,
            details={"entity": entity, "id": entity_id, "expected_version": expected_version},
        )


# Identity boundary errors
class AuthenticationError(TaskhubAuthzError):
    """Base class for identity resolution errors."""
    pass


class InvalidTokenError(AuthenticationError):
    """Raised when a bearer token cannot be decoded or lacks a subject."""

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message, error_code=ErrorCodes.INVALID_TOKEN)


class InactiveActorError(AuthenticationError):
    """Raised when the token resolves to a deactivated actor."""

    def __init__(self, actor_id: str):
        super().__init__(
            f"Actor is inactive: {actor_id}",
            error_code=ErrorCodes.ACTOR_INACTIVE,
            details={"actor_id": actor_id},
        )


class ValidationError(TaskhubAuthzError):
    """Raised when input values fall outside the closed taxonomies."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, error_code=ErrorCodes.VALIDATION_FAILED, details=details)


class AuditError(TaskhubAuthzError):
    """Raised by audit repositories. Never escapes the recorder."""
    pass

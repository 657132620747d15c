"""HTTP status code mapping for exceptions."""

from typing import Dict, Type

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


HTTP_STATUS_MAP: Dict[Type[Exception], int] = {
    # 400 Bad Request
    ValidationError: 400,

    # 401 Unauthorized
    AuthenticationError: 401,
    InvalidTokenError: 401,
    InactiveActorError: 401,

    # 403 Forbidden
    AccessDeniedError: 403,

    # 404 Not Found
    NotFoundError: 404,
    OrganizationNotFoundError: 404,
    TeamNotFoundError: 404,
    ProjectNotFoundError: 404,
    ResourceNotFoundError: 404,
    ActorNotFoundError: 404,

    # 409 Conflict
    InvariantViolationError: 409,
    ConcurrentModificationError: 409,

    # 500 Internal Server Error
    AuditError: 500,
    StoreError: 500,

    # 503 Service Unavailable
    StoreUnavailableError: 503,
}


def get_http_status_code(exception: Exception) -> int:
    """Resolve the status code, walking the class hierarchy for subclasses."""
    for exc_type in type(exception).__mro__:
        if exc_type in HTTP_STATUS_MAP:
            return HTTP_STATUS_MAP[exc_type]
    return 500

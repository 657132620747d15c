"""Base exceptions for taskhub-authz.

All exceptions inherit from TaskhubAuthzError and carry an error code and a
details mapping so that API layers can render structured responses.
"""

from typing import Any, Dict, Optional


class TaskhubAuthzError(Exception):
    """Base exception for all taskhub-authz errors."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}


def get_http_status_code(exception: Exception) -> int:
    """Get HTTP status code for an exception."""
    from .http_mapping import get_http_status_code as _lookup
    return _lookup(exception)


def create_error_response(exception: TaskhubAuthzError) -> Dict[str, Any]:
    """Create standardized error response from exception."""
    return {
        "error": {
            "code": exception.error_code,
            "message": exception.message,
            "details": exception.details,
            "type": exception.__class__.__name__,
        }
    }

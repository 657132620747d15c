"""Tests for the exception taxonomy and its HTTP mapping."""

import pytest

from taskhub_authz.core.exceptions import (
    AccessDeniedError,
    ActorNotFoundError,
    AuditError,
    ConcurrentModificationError,
    InactiveActorError,
    InvalidTokenError,
    InvariantViolationError,
    NotFoundError,
    ProjectNotFoundError,
    StoreError,
    StoreUnavailableError,
    TaskhubAuthzError,
    ValidationError,
    create_error_response,
    get_http_status_code,
)


class TestHttpMapping:

    @pytest.mark.parametrize("exception,status", [
        (ValidationError("bad input"), 400),
        (InvalidTokenError(), 401),
        (InactiveActorError("alice"), 401),
        (AccessDeniedError(), 403),
        (ProjectNotFoundError("apollo"), 404),
        (ActorNotFoundError("ghost"), 404),
        (InvariantViolationError("owner is always an admin"), 409),
        (ConcurrentModificationError("team", "core", 3), 409),
        (StoreUnavailableError("database unreachable"), 503),
        (StoreError("disk full"), 500),
        (AuditError("write failed"), 500),
    ])
    def test_status_codes(self, exception, status):
        assert get_http_status_code(exception) == status

    def test_subclass_falls_back_to_parent(self):
        class ArchivedProjectError(NotFoundError):
            entity_name = "Archived project"

        assert get_http_status_code(ArchivedProjectError("old")) == 404

    def test_unknown_exception_is_server_error(self):
        assert get_http_status_code(RuntimeError("boom")) == 500


class TestErrorPayloads:

    def test_not_found_details(self):
        error = ProjectNotFoundError("apollo")

        assert error.message == "Project not found: apollo"
        assert error.details == {"entity": "project", "id": "apollo"}
        assert error.entity_id == "apollo"

    def test_concurrent_modification_is_retryable(self):
        error = ConcurrentModificationError("team", "core", 3)

        assert error.retryable
        assert error.details["expected_version"] == 3

    def test_default_error_code_is_class_name(self):
        assert TaskhubAuthzError("plain").error_code == "TaskhubAuthzError"

    def test_error_response_envelope(self):
        response = create_error_response(AccessDeniedError(details={"reason": "insufficient_role"}))

        assert response == {
            "error": {
                "code": "AUTHZ_403",
                "message": "Access denied",
                "details": {"reason": "insufficient_role"},
                "type": "AccessDeniedError",
            }
        }

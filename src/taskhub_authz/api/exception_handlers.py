"""Exception handlers mapping the error taxonomy onto HTTP responses."""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse

from ..config.constants import Headers
from ..core.exceptions import (
    AuthenticationError,
    StoreUnavailableError,
    TaskhubAuthzError,
    create_error_response,
    get_http_status_code,
)

logger = logging.getLogger(__name__)


class ExceptionHandlerRegistry:
    """Registers handlers for engine exceptions and unexpected errors."""

    def __init__(self, is_production: bool = True):
        self.is_production = is_production

    def register_handlers(self, app: FastAPI) -> None:
        @app.exception_handler(TaskhubAuthzError)
        async def authz_exception_handler(request: Request, exc: TaskhubAuthzError):
            status_code = get_http_status_code(exc)
            if status_code >= 500:
                logger.error(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")
            else:
                logger.info(f"{exc.__class__.__name__} on {request.url.path}: {exc.message}")

            headers = {}
            if isinstance(exc, AuthenticationError):
                headers["WWW-Authenticate"] = "Bearer"
            if isinstance(exc, StoreUnavailableError):
                headers["Retry-After"] = "1"
            request_id = request.headers.get(Headers.REQUEST_ID)
            if request_id:
                headers[Headers.REQUEST_ID] = request_id

            return JSONResponse(
                status_code=status_code,
                content=create_error_response(exc),
                headers=headers or None,
            )

        @app.exception_handler(Exception)
        async def general_exception_handler(request: Request, exc: Exception):
            logger.error(f"Unhandled exception: {exc}", exc_info=True)
            message = "An unexpected error occurred" if self.is_production else str(exc)
            return JSONResponse(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                content={"error": {"code": "INTERNAL_ERROR", "message": message, "details": {}}},
            )


def register_exception_handlers(app: FastAPI, is_production: bool = True) -> None:
    """Create a registry and register its handlers in one call."""
    ExceptionHandlerRegistry(is_production=is_production).register_handlers(app)

"""FastAPI application factory."""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI

from ..__version__ import __version__
from ..bootstrap import AuthzServices, build_default_services
from ..config.settings import AuthzSettings, get_settings
from .exception_handlers import register_exception_handlers
from .routers import router

logger = logging.getLogger(__name__)


def create_app(
    services: Optional[AuthzServices] = None,
    settings: Optional[AuthzSettings] = None,
) -> FastAPI:
    """Create the application.

    Without ``services`` the default PostgreSQL/Redis wiring is built on
    startup from settings.
    """
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        if getattr(app.state, "services", None) is None:
            app.state.services = await build_default_services(settings)
        logger.info(f"{settings.app_name} {__version__} started ({settings.environment})")
        yield
        logger.info(f"{settings.app_name} stopped")

    app = FastAPI(title=settings.app_name, version=__version__, debug=settings.debug, lifespan=lifespan)
    app.state.services = services
    register_exception_handlers(app, is_production=settings.is_production)
    app.include_router(router)
    return app

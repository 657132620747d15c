"""Uvicorn entry point for the HTTP surface."""

import os

import uvicorn

from ..config.settings import get_settings
from .app import create_app


def run() -> None:
    settings = get_settings()
    uvicorn.run(
        create_app(settings=settings),
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        log_config=None,
        reload=False,
    )


if __name__ == "__main__":
    run()

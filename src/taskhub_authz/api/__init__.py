"""HTTP surface for access checks and the audit trail."""

from .app import create_app
from .exception_handlers import ExceptionHandlerRegistry, register_exception_handlers

__all__ = [
    "create_app",
    "ExceptionHandlerRegistry",
    "register_exception_handlers",
]

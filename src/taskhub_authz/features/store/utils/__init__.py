"""Entity store utilities."""

from .error_handling import TRANSIENT_ERRORS, store_operation

__all__ = [
    "store_operation",
    "TRANSIENT_ERRORS",
]

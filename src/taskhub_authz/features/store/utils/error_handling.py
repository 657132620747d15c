"""Error translation for entity store adapters.

Driver and network failures surface as StoreUnavailableError so callers can
retry; they are never turned into a deny.
"""

import asyncio
import functools
import logging
from typing import Callable

import asyncpg
from redis.exceptions import RedisError

from ....core.exceptions import StoreUnavailableError, TaskhubAuthzError

logger = logging.getLogger(__name__)

TRANSIENT_ERRORS = (
    asyncpg.PostgresError,
    asyncpg.InterfaceError,
    RedisError,
    OSError,
    asyncio.TimeoutError,
)


def store_operation(operation_name: str):
    """Decorator translating transient driver errors into StoreUnavailableError.

    Usage:
        @store_operation("get project")
        async def get_project(self, project_id):
            ...
    """
    def decorator(func: Callable) -> Callable:
        @functools.wraps(func)
        async def wrapper(*args, **kwargs):
            try:
                return await func(*args, **kwargs)
            except TaskhubAuthzError:
                raise
            except TRANSIENT_ERRORS as e:
                logger.error(f"Entity store failure during {operation_name}: {e}")
                raise StoreUnavailableError(
                    f"Entity store unavailable during {operation_name}",
                    details={"operation": operation_name, "error": str(e)},
                ) from e
        return wrapper
    return decorator

"""FastAPI dependencies.

Services are attached to ``app.state.services`` by ``create_app``.
"""

from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from ..bootstrap import AuthzServices
from ..core.exceptions import InvalidTokenError
from ..features.identity.entities.actor import Actor

bearer_scheme = HTTPBearer(auto_error=False)


def get_services(request: Request) -> AuthzServices:
    return request.app.state.services


def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> str:
    if credentials is None or not credentials.credentials:
        raise InvalidTokenError("Missing bearer token")
    return credentials.credentials


async def get_current_actor(
    token: str = Depends(get_bearer_token),
    services: AuthzServices = Depends(get_services),
) -> Actor:
    return await services.identity.resolve_actor(token)

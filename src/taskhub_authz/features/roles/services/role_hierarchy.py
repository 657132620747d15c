"""Role hierarchy evaluator.

Ranks roles inside a single scope. Scopes are independent: a team role never
compares to a project role.
"""

from enum import Enum
from typing import Dict, Mapping, Type

from ....config.constants import (
    GlobalRole,
    OrganizationRole,
    ProjectRole,
    RoleScope,
    TeamRole,
)


_RANKS: Mapping[RoleScope, Mapping[Enum, int]] = {
    RoleScope.GLOBAL: {
        GlobalRole.SUPER_ADMIN: 4,
        GlobalRole.ORG_ADMIN: 3,
        GlobalRole.TEAM_LEAD: 2,
        GlobalRole.MEMBER: 1,
        GlobalRole.VIEWER: 0,
    },
    RoleScope.ORGANIZATION: {
        OrganizationRole.OWNER: 2,
        OrganizationRole.ADMIN: 1,
        OrganizationRole.MEMBER: 0,
    },
    RoleScope.TEAM: {
        TeamRole.LEAD: 1,
        TeamRole.MEMBER: 0,
    },
    RoleScope.PROJECT: {
        ProjectRole.ADMIN: 2,
        ProjectRole.MEMBER: 1,
        ProjectRole.VIEWER: 0,
    },
}

SCOPE_ROLE_TYPES: Dict[RoleScope, Type[Enum]] = {
    RoleScope.GLOBAL: GlobalRole,
    RoleScope.ORGANIZATION: OrganizationRole,
    RoleScope.TEAM: TeamRole,
    RoleScope.PROJECT: ProjectRole,
}


def _coerce(role, scope: RoleScope) -> Enum:
    role_type = SCOPE_ROLE_TYPES[scope]
    if isinstance(role, Enum) and not isinstance(role, role_type):
        raise ValueError(f"Role {role!r} does not belong to scope {scope.value}")
    return role_type(role)


def rank(role, scope: RoleScope) -> int:
    """Return the rank of ``role`` within ``scope``; higher is more privileged."""
    scope = RoleScope(scope)
    return _RANKS[scope][_coerce(role, scope)]


def at_least(role, threshold, scope: RoleScope) -> bool:
    """Check that ``role`` ranks at or above ``threshold`` within ``scope``."""
    return rank(role, scope) >= rank(threshold, scope)


class RoleHierarchy:
    """Object wrapper around the module functions for dependency injection."""

    def rank(self, role, scope: RoleScope) -> int:
        return rank(role, scope)

    def at_least(self, role, threshold, scope: RoleScope) -> bool:
        return at_least(role, threshold, scope)

    def highest(self, roles, scope: RoleScope):
        """Return the most privileged of ``roles`` or None when empty."""
        coerced = [_coerce(r, scope) for r in roles]
        if not coerced:
            return None
        return max(coerced, key=lambda r: rank(r, scope))

"""Role services."""

from .role_hierarchy import SCOPE_ROLE_TYPES, RoleHierarchy, at_least, rank

__all__ = [
    "RoleHierarchy",
    "rank",
    "at_least",
    "SCOPE_ROLE_TYPES",
]

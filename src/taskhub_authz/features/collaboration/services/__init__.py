"""Collaboration services."""

from .membership_service import MembershipService
from .resource_service import ResourceService

__all__ = [
    "MembershipService",
    "ResourceService",
]

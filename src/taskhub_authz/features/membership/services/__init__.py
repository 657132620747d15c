"""Membership services."""

from .membership_resolver import MembershipResolver

__all__ = [
    "MembershipResolver",
]

"""Audit repositories."""

from .memory_audit_repository import InMemoryAuditRepository
from .postgres_audit_repository import PostgresAuditRepository

__all__ = [
    "InMemoryAuditRepository",
    "PostgresAuditRepository",
]

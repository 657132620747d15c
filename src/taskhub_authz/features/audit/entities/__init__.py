"""Audit entities and protocols."""

from .audit_record import AuditRecord
from .protocols import AuditRepository

__all__ = [
    "AuditRecord",
    "AuditRepository",
]

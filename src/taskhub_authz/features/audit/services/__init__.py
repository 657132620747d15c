"""Audit services."""

from .audit_recorder import AuditPage, AuditRecorder
from .field_diff import FieldChange, compute_field_changes

__all__ = [
    "AuditRecorder",
    "AuditPage",
    "FieldChange",
    "compute_field_changes",
]

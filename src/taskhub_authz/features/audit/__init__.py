"""Audit trail.

- entities/: AuditRecord and the repository protocol
- services/: field diffing and the recorder
- repositories/: in-memory and PostgreSQL storage
- utils/: value formatting
"""

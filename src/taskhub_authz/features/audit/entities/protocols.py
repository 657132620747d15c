"""Protocol interfaces for audit persistence."""

from abc import abstractmethod
from typing import List, Protocol, runtime_checkable

from .audit_record import AuditRecord


@runtime_checkable
class AuditRepository(Protocol):
    """Append-only audit record storage."""

    @abstractmethod
    async def append(self, record: AuditRecord) -> None:
        """Persist a record. Records are never updated."""
        ...

    @abstractmethod
    async def list_by_resource(self, resource_id: str, limit: int, offset: int) -> List[AuditRecord]:
        """List records for a resource, newest first."""
        ...

    @abstractmethod
    async def count_by_resource(self, resource_id: str) -> int:
        """Count records for a resource."""
        ...

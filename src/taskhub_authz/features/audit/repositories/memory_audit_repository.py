"""In-memory audit repository."""

import asyncio
from collections import defaultdict
from typing import Dict, List

from ..entities.audit_record import AuditRecord


class InMemoryAuditRepository:
    """Audit records kept per resource in insertion order."""

    def __init__(self):
        self._records: Dict[str, List[AuditRecord]] = defaultdict(list)
        self._lock = asyncio.Lock()

    async def append(self, record: AuditRecord) -> None:
        async with self._lock:
            self._records[record.resource_id].append(record)

    async def list_by_resource(self, resource_id: str, limit: int, offset: int) -> List[AuditRecord]:
        records = sorted(
            enumerate(self._records.get(resource_id, [])),
            key=lambda item: (item[1].created_at, item[0]),
            reverse=True,
        )
        return [record for _, record in records[offset:offset + limit]]

    async def count_by_resource(self, resource_id: str) -> int:
        return len(self._records.get(resource_id, []))

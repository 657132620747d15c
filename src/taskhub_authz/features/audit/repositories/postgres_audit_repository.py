"""PostgreSQL audit repository using asyncpg."""

import json
import logging
from typing import List

import asyncpg

from ...store.utils.error_handling import store_operation
from ...store.utils.queries import AUDIT_COUNT_BY_RESOURCE, AUDIT_INSERT, AUDIT_LIST_BY_RESOURCE
from ..entities.audit_record import AuditRecord

logger = logging.getLogger(__name__)


def _load(value):
    if isinstance(value, str):
        return json.loads(value)
    return value


class PostgresAuditRepository:
    """Audit records in the ``audit_records`` table of the entity schema."""

    def __init__(self, pool: asyncpg.Pool, schema: str):
        self._pool = pool
        self._schema = schema

    @store_operation("append audit record")
    async def append(self, record: AuditRecord) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(
                AUDIT_INSERT.format(schema=self._schema),
                record.id,
                record.resource_id,
                record.action.value,
                record.field,
                record.actor_id,
                record.actor_name,
                json.dumps(record.old_value),
                json.dumps(record.new_value),
                record.details,
                record.created_at,
            )

    @store_operation("list audit records")
    async def list_by_resource(self, resource_id: str, limit: int, offset: int) -> List[AuditRecord]:
        async with self._pool.acquire() as conn:
            rows = await conn.fetch(AUDIT_LIST_BY_RESOURCE.format(schema=self._schema), resource_id, limit, offset)

        records = []
        for row in rows:
            data = dict(row)
            data["old_value"] = _load(data.get("old_value"))
            data["new_value"] = _load(data.get("new_value"))
            records.append(AuditRecord.from_dict(data))
        return records

    @store_operation("count audit records")
    async def count_by_resource(self, resource_id: str) -> int:
        async with self._pool.acquire() as conn:
            return await conn.fetchval(AUDIT_COUNT_BY_RESOURCE.format(schema=self._schema), resource_id)

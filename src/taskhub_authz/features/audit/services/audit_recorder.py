"""Audit trail recorder.

Called by the collaboration services after an allowed mutation has been
persisted. Recording is best effort: a failing repository is logged and the
mutation stands.
"""

import logging
from dataclasses import dataclass
from typing import Any, List, Mapping, Optional, Sequence

from ....config.constants import AuditAction, DefaultValues
from ....core.exceptions import ValidationError
from ...identity.entities.actor import Actor
from ..entities.audit_record import AuditRecord
from ..entities.protocols import AuditRepository
from .field_diff import FieldChange, compute_field_changes

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuditPage:
    """One page of audit records, newest first."""

    items: List[AuditRecord]
    page: int
    page_size: int
    total: int


class AuditRecorder:
    """Appends and lists audit records."""

    def __init__(
        self,
        repository: AuditRepository,
        default_page_size: int = DefaultValues.DEFAULT_AUDIT_PAGE_SIZE,
        max_page_size: int = DefaultValues.MAX_AUDIT_PAGE_SIZE,
    ):
        self._repository = repository
        self._default_page_size = default_page_size
        self._max_page_size = max_page_size

    async def append_audit_record(self, record: AuditRecord) -> AuditRecord:
        """Persist one record. Repository errors propagate."""
        await self._repository.append(record)
        return record

    async def record(
        self,
        resource_id: str,
        action: AuditAction,
        actor: Actor,
        field_diffs: Sequence[FieldChange] = (),
        details: Optional[str] = None,
    ) -> List[AuditRecord]:
        """Record a mutation. Never raises.

        With ``field_diffs`` one record is written per change; without, a
        single record of kind ``action`` is written.
        """
        if field_diffs:
            records = [
                AuditRecord(
                    resource_id=resource_id,
                    action=change.action,
                    actor_id=actor.id,
                    actor_name=actor.name,
                    field=change.field,
                    old_value=change.old_value,
                    new_value=change.new_value,
                    details=change.details,
                )
                for change in field_diffs
            ]
        else:
            records = [
                AuditRecord(
                    resource_id=resource_id,
                    action=action,
                    actor_id=actor.id,
                    actor_name=actor.name,
                    details=details,
                )
            ]

        written = []
        for record in records:
            try:
                await self._repository.append(record)
                written.append(record)
            except Exception as e:
                logger.error(
                    f"Failed to record audit entry {record.action.value} for {resource_id} "
                    f"by {actor.id}: {e}"
                )
        return written

    async def record_changes(
        self,
        resource_id: str,
        actor: Actor,
        before: Mapping[str, Any],
        after: Mapping[str, Any],
    ) -> List[AuditRecord]:
        """Diff two snapshots and record every tracked change."""
        changes = compute_field_changes(before, after)
        if not changes:
            logger.debug(f"No tracked changes on {resource_id}")
            return []
        return await self.record(resource_id, AuditAction.UPDATED, actor, changes)

    async def list_audit_records(
        self, resource_id: str, page: int = 1, page_size: Optional[int] = None
    ) -> AuditPage:
        """List records for a resource, newest first."""
        page_size = page_size or self._default_page_size
        if page < 1:
            raise ValidationError("Page must be at least 1", {"page": page})
        if page_size < 1 or page_size > self._max_page_size:
            raise ValidationError(
                f"Page size must be between 1 and {self._max_page_size}", {"page_size": page_size}
            )

        offset = (page - 1) * page_size
        items = await self._repository.list_by_resource(resource_id, page_size, offset)
        total = await self._repository.count_by_resource(resource_id)
        return AuditPage(items=items, page=page, page_size=page_size, total=total)

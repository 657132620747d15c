"""Pure comparison of before/after snapshots into audit change kinds.

Only fields in ``TRACKED_FIELDS`` are compared. Scalar fields yield one
change each; collection fields yield one change per added or removed item.
"""

from dataclasses import dataclass
from typing import Any, Dict, List, Mapping, Optional

from ....config.constants import TRACKED_FIELDS, AuditAction, SubtaskStatus
from ..utils.formatting import to_snapshot


@dataclass(frozen=True)
class FieldChange:
    """One audited change, not yet attributed to an actor."""

    action: AuditAction
    field: Optional[str]
    old_value: Any = None
    new_value: Any = None
    details: Optional[str] = None


SCALAR_ACTIONS = {
    "title": AuditAction.TITLE_UPDATED,
    "description": AuditAction.DESCRIPTION_UPDATED,
    "status": AuditAction.STATUS_CHANGED,
    "priority": AuditAction.PRIORITY_CHANGED,
    "due_date": AuditAction.DUE_DATE_CHANGED,
    "start_date": AuditAction.START_DATE_CHANGED,
}

LIST_ACTIONS = {
    "assignees": (AuditAction.ASSIGNED, AuditAction.UNASSIGNED),
    "tags": (AuditAction.TAG_ADDED, AuditAction.TAG_REMOVED),
    "attachments": (AuditAction.ATTACHMENT_ADDED, AuditAction.ATTACHMENT_REMOVED),
}


def compute_field_changes(before: Mapping[str, Any], after: Mapping[str, Any]) -> List[FieldChange]:
    """Diff two snapshots over the tracked fields."""
    changes: List[FieldChange] = []
    for field_name in TRACKED_FIELDS:
        if field_name not in before or field_name not in after:
            continue
        old = to_snapshot(before[field_name])
        new = to_snapshot(after[field_name])
        if old == new:
            continue

        if field_name in SCALAR_ACTIONS:
            changes.append(FieldChange(SCALAR_ACTIONS[field_name], field_name, old, new))
        elif field_name in LIST_ACTIONS:
            changes.extend(_list_changes(field_name, old or [], new or []))
        elif field_name == "subtasks":
            changes.extend(_subtask_changes(old or {}, new or {}))
        elif field_name == "members":
            changes.extend(_member_changes(old or {}, new or {}))
    return changes


def _list_changes(field_name: str, old: List[Any], new: List[Any]) -> List[FieldChange]:
    added_action, removed_action = LIST_ACTIONS[field_name]
    changes = [FieldChange(added_action, field_name, new_value=item) for item in new if item not in old]
    changes.extend(FieldChange(removed_action, field_name, old_value=item) for item in old if item not in new)
    return changes


def _subtask_changes(old: Dict[str, Dict[str, Any]], new: Dict[str, Dict[str, Any]]) -> List[FieldChange]:
    changes = []
    for subtask_id, subtask in new.items():
        previous = old.get(subtask_id)
        title = subtask.get("title")
        if previous is None:
            changes.append(FieldChange(AuditAction.SUBTASK_ADDED, "subtasks", new_value=title))
        elif previous != subtask:
            completed = (
                subtask.get("status") == SubtaskStatus.DONE.value
                and previous.get("status") != SubtaskStatus.DONE.value
            )
            if completed:
                changes.append(FieldChange(AuditAction.SUBTASK_COMPLETED, "subtasks", new_value=title))
            else:
                changes.append(
                    FieldChange(AuditAction.SUBTASK_UPDATED, "subtasks", previous, subtask, details=title)
                )
    for subtask_id, subtask in old.items():
        if subtask_id not in new:
            changes.append(FieldChange(AuditAction.SUBTASK_DELETED, "subtasks", old_value=subtask.get("title")))
    return changes


def _member_changes(old: Dict[str, Any], new: Dict[str, Any]) -> List[FieldChange]:
    changes = []
    for actor_id, role in new.items():
        if actor_id not in old:
            changes.append(FieldChange(AuditAction.MEMBER_ADDED, "members", new_value=actor_id, details=role))
        elif old[actor_id] != role:
            changes.append(
                FieldChange(AuditAction.MEMBER_ROLE_CHANGED, "members", old[actor_id], role, details=actor_id)
            )
    for actor_id, role in old.items():
        if actor_id not in new:
            changes.append(FieldChange(AuditAction.MEMBER_REMOVED, "members", old_value=actor_id, details=role))
    return changes

"""Tests for audit diffs, descriptions and the recorder."""

from datetime import datetime, timedelta, timezone
from unittest.mock import AsyncMock, patch

import pytest

from taskhub_authz.config.constants import AuditAction
from taskhub_authz.core.exceptions import ValidationError
from taskhub_authz.features.audit.entities.audit_record import AuditRecord
from taskhub_authz.features.audit.repositories.memory_audit_repository import InMemoryAuditRepository
from taskhub_authz.features.audit.services.audit_recorder import AuditRecorder
from taskhub_authz.features.audit.services.field_diff import compute_field_changes
from taskhub_authz.features.identity.entities.actor import Actor


@pytest.fixture
def alice():
    return Actor("alice", "Alice")


class TestFieldDiff:

    def test_unchanged_fields_produce_nothing(self):
        snapshot = {"title": "A", "tags": ["x"]}
        assert compute_field_changes(snapshot, dict(snapshot)) == []

    def test_untracked_fields_ignored(self):
        assert compute_field_changes({"content": "a"}, {"content": "b"}) == []

    def test_scalar_change(self):
        changes = compute_field_changes({"status": "todo"}, {"status": "done"})
        assert len(changes) == 1
        assert changes[0].action is AuditAction.STATUS_CHANGED
        assert (changes[0].old_value, changes[0].new_value) == ("todo", "done")

    def test_dates_snapshotted(self):
        due = datetime(2024, 5, 1, tzinfo=timezone.utc)
        changes = compute_field_changes({"due_date": None}, {"due_date": due})
        assert changes[0].action is AuditAction.DUE_DATE_CHANGED
        assert changes[0].new_value == due.isoformat()

    def test_list_changes_per_item(self):
        changes = compute_field_changes(
            {"assignees": ["bob", "carol"], "tags": ["urgent"]},
            {"assignees": ["carol", "dave"], "tags": []},
        )
        kinds = {(c.action, c.old_value, c.new_value) for c in changes}
        assert kinds == {
            (AuditAction.ASSIGNED, None, "dave"),
            (AuditAction.UNASSIGNED, "bob", None),
            (AuditAction.TAG_REMOVED, "urgent", None),
        }

    def test_subtask_changes(self):
        before = {"subtasks": {
            "s1": {"id": "s1", "title": "Write", "status": "todo"},
            "s2": {"id": "s2", "title": "Review", "status": "todo"},
            "s3": {"id": "s3", "title": "Ship", "status": "todo"},
        }}
        after = {"subtasks": {
            "s1": {"id": "s1", "title": "Write", "status": "done"},
            "s2": {"id": "s2", "title": "Review", "status": "in-progress"},
            "s4": {"id": "s4", "title": "Celebrate", "status": "todo"},
        }}

        actions = {c.action: c for c in compute_field_changes(before, after)}

        assert actions[AuditAction.SUBTASK_COMPLETED].new_value == "Write"
        assert actions[AuditAction.SUBTASK_UPDATED].details == "Review"
        assert actions[AuditAction.SUBTASK_ADDED].new_value == "Celebrate"
        assert actions[AuditAction.SUBTASK_DELETED].old_value == "Ship"

    def test_member_changes(self):
        changes = compute_field_changes(
            {"members": {"bob": "member", "carol": "viewer"}},
            {"members": {"bob": "admin", "dave": "member"}},
        )
        actions = {c.action: c for c in changes}
        assert actions[AuditAction.MEMBER_ROLE_CHANGED].details == "bob"
        assert actions[AuditAction.MEMBER_ADDED].new_value == "dave"
        assert actions[AuditAction.MEMBER_REMOVED].old_value == "carol"


class TestAuditRecord:

    def test_generated_defaults_with_field_keyword(self):
        first = AuditRecord("t1", AuditAction.TITLE_UPDATED, "alice", field="title", new_value="Launch")
        second = AuditRecord("t1", AuditAction.TITLE_UPDATED, "alice", field="title", new_value="Launch")

        assert first.field == "title"
        assert first.id != second.id
        assert first.created_at.tzinfo is not None

    def test_package_exports_audit_record(self):
        import taskhub_authz

        assert taskhub_authz.AuditRecord is AuditRecord

    def test_describe_status_change(self):
        record = AuditRecord("t1", AuditAction.STATUS_CHANGED, "alice", "Alice", "status", "todo", "done")
        assert record.describe() == 'Alice changed status from "todo" to "done"'

    def test_describe_falls_back_to_actor_id(self):
        assert AuditRecord("t1", AuditAction.CREATED, "alice").describe() == "alice created this resource"

    @pytest.mark.parametrize("old,new,expected", [
        (None, "2024-05-01T00:00:00+00:00", "Alice set due date to 2024-05-01"),
        ("2024-05-01T00:00:00+00:00", "2024-06-02T00:00:00+00:00",
         "Alice changed due date from 2024-05-01 to 2024-06-02"),
        ("2024-05-01T00:00:00+00:00", None, "Alice cleared due date"),
    ])
    def test_describe_due_date(self, old, new, expected):
        record = AuditRecord("t1", AuditAction.DUE_DATE_CHANGED, "alice", "Alice", "due_date", old, new)
        assert record.describe() == expected

    def test_round_trip(self):
        record = AuditRecord("t1", AuditAction.TAG_ADDED, "alice", "Alice", "tags", None, "urgent")
        restored = AuditRecord.from_dict(record.to_dict())
        assert restored == record
        assert record.to_dict()["description"] == "Alice added tag: urgent"


class TestAuditRecorder:

    @pytest.mark.asyncio
    async def test_record_without_diffs_writes_one_record(self, alice):
        repository = InMemoryAuditRepository()
        recorder = AuditRecorder(repository)

        written = await recorder.record("t1", AuditAction.CREATED, alice)

        assert len(written) == 1
        assert await repository.count_by_resource("t1") == 1

    @pytest.mark.asyncio
    async def test_record_changes_writes_one_record_per_change(self, alice):
        repository = InMemoryAuditRepository()
        recorder = AuditRecorder(repository)

        written = await recorder.record_changes(
            "t1", alice, {"title": "A", "tags": []}, {"title": "B", "tags": ["x", "y"]}
        )

        assert len(written) == 3
        assert all(r.actor_name == "Alice" for r in written)

    @pytest.mark.asyncio
    async def test_record_changes_with_no_changes(self, alice):
        repository = AsyncMock()
        recorder = AuditRecorder(repository)

        assert await recorder.record_changes("t1", alice, {"title": "A"}, {"title": "A"}) == []
        repository.append.assert_not_called()

    @pytest.mark.asyncio
    async def test_repository_failure_is_swallowed(self, alice):
        repository = AsyncMock()
        repository.append.side_effect = RuntimeError("disk full")
        recorder = AuditRecorder(repository)

        with patch("taskhub_authz.features.audit.services.audit_recorder.logger") as mock_logger:
            written = await recorder.record("t1", AuditAction.DELETED, alice)

        assert written == []
        mock_logger.error.assert_called_once()

    @pytest.mark.asyncio
    async def test_append_audit_record_propagates(self, alice):
        repository = AsyncMock()
        repository.append.side_effect = RuntimeError("disk full")
        recorder = AuditRecorder(repository)

        with pytest.raises(RuntimeError):
            await recorder.append_audit_record(AuditRecord("t1", AuditAction.CREATED, alice.id))

    @pytest.mark.asyncio
    async def test_listing_is_newest_first_and_paginated(self, alice):
        repository = InMemoryAuditRepository()
        recorder = AuditRecorder(repository, default_page_size=2)
        start = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for minute in range(5):
            await recorder.append_audit_record(AuditRecord(
                "t1", AuditAction.UPDATED, alice.id, details=str(minute),
                created_at=start + timedelta(minutes=minute),
            ))

        first = await recorder.list_audit_records("t1")
        last = await recorder.list_audit_records("t1", page=3)

        assert first.total == 5
        assert [r.details for r in first.items] == ["4", "3"]
        assert [r.details for r in last.items] == ["0"]

    @pytest.mark.asyncio
    async def test_equal_timestamps_keep_insertion_order(self, alice):
        repository = InMemoryAuditRepository()
        recorder = AuditRecorder(repository)
        moment = datetime(2024, 1, 1, tzinfo=timezone.utc)
        for index in range(3):
            await recorder.append_audit_record(
                AuditRecord("t1", AuditAction.UPDATED, alice.id, details=str(index), created_at=moment)
            )

        page = await recorder.list_audit_records("t1")

        assert [r.details for r in page.items] == ["2", "1", "0"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("page,page_size", [(0, 10), (1, -1), (1, 1000)])
    async def test_invalid_pagination(self, alice, page, page_size):
        recorder = AuditRecorder(InMemoryAuditRepository())
        with pytest.raises(ValidationError):
            await recorder.list_audit_records("t1", page=page, page_size=page_size)

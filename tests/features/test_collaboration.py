"""Tests for membership and resource mutations."""

import asyncio
from unittest.mock import patch

import pytest

from taskhub_authz.config.constants import (
    Action,
    AttachmentParent,
    AuditAction,
    DecisionReason,
    GlobalRole,
    ProjectRole,
    ResourceType,
    TeamRole,
)
from taskhub_authz.core.exceptions import (
    AccessDeniedError,
    ConcurrentModificationError,
    InvariantViolationError,
    ProjectNotFoundError,
    ValidationError,
)
from taskhub_authz.features.resources.entities.resource import Attachment, Document, Task


async def audit_actions(services, resource_id):
    page = await services.audit.list_audit_records(resource_id)
    return [record.action for record in page.items]


class TestOrganizationAdmins:

    @pytest.mark.asyncio
    async def test_owner_adds_admin(self, services, actors):
        org = await services.memberships.add_organization_admin(actors["owner"], "acme", "outsider")

        assert org.is_admin("outsider")
        page = await services.audit.list_audit_records("acme")
        assert page.items[0].action is AuditAction.MEMBER_ADDED
        assert page.items[0].new_value == "outsider"

    @pytest.mark.asyncio
    async def test_admin_cannot_add_admin(self, services, actors, store):
        with pytest.raises(AccessDeniedError) as exc_info:
            await services.memberships.add_organization_admin(actors["orgadmin"], "acme", "outsider")

        assert exc_info.value.details["reason"] == DecisionReason.INSUFFICIENT_ROLE.value
        assert not (await store.get_organization("acme")).is_admin("outsider")
        assert await audit_actions(services, "acme") == []

    @pytest.mark.asyncio
    async def test_admin_must_belong_to_organization(self, services, actors):
        with pytest.raises(InvariantViolationError):
            await services.memberships.add_organization_admin(actors["owner"], "acme", "stranger")

    @pytest.mark.asyncio
    async def test_owner_cannot_be_removed(self, services, actors):
        with pytest.raises(InvariantViolationError):
            await services.memberships.remove_organization_admin(actors["super"], "acme", "owner")

    @pytest.mark.asyncio
    async def test_remove_admin(self, services, actors):
        org = await services.memberships.remove_organization_admin(actors["owner"], "acme", "orgadmin")

        assert not org.is_admin("orgadmin")
        assert await audit_actions(services, "acme") == [AuditAction.MEMBER_REMOVED]


class TestTeamMembership:

    @pytest.mark.asyncio
    async def test_lead_adds_member_and_actor_record_follows(self, services, actors, store):
        team = await services.memberships.add_team_member(actors["lead"], "core", "outsider")

        assert team.role_of("outsider") is TeamRole.MEMBER
        actor = await store.get_actor("outsider")
        assert actor.role_in_team("core") is TeamRole.MEMBER
        assert await audit_actions(services, "core") == [AuditAction.MEMBER_ADDED]

    @pytest.mark.asyncio
    async def test_member_from_other_organization_rejected(self, services, actors):
        with pytest.raises(InvariantViolationError):
            await services.memberships.add_team_member(actors["lead"], "core", "stranger")

    @pytest.mark.asyncio
    async def test_plain_member_cannot_manage(self, services, actors, store):
        with pytest.raises(AccessDeniedError):
            await services.memberships.add_team_member(actors["teammate"], "core", "outsider")

        assert not (await store.get_team("core")).is_member("outsider")
        assert await audit_actions(services, "core") == []

    @pytest.mark.asyncio
    async def test_org_admin_manages_team(self, services, actors):
        team = await services.memberships.add_team_member(actors["orgadmin"], "core", "creator")
        assert team.is_member("creator")

    @pytest.mark.asyncio
    async def test_promotion_moves_leadership(self, services, actors, store):
        team = await services.memberships.change_team_member_role(
            actors["lead"], "core", "teammate", TeamRole.LEAD
        )

        assert team.lead_id == "teammate"
        assert team.role_of("lead") is TeamRole.MEMBER
        assert [m for m, r in team.members.items() if r is TeamRole.LEAD] == ["teammate"]
        assert (await store.get_actor("teammate")).role_in_team("core") is TeamRole.LEAD
        assert (await store.get_actor("lead")).role_in_team("core") is TeamRole.MEMBER

    @pytest.mark.asyncio
    async def test_lead_cannot_be_removed(self, services, actors):
        with pytest.raises(InvariantViolationError):
            await services.memberships.remove_team_member(actors["super"], "core", "lead")

    @pytest.mark.asyncio
    async def test_remove_member_clears_actor_record(self, services, actors, store):
        await services.memberships.remove_team_member(actors["lead"], "core", "teammate")

        assert (await store.get_actor("teammate")).role_in_team("core") is None

    @pytest.mark.asyncio
    async def test_concurrent_adds_both_land(self, services, actors, store):
        await asyncio.gather(
            services.memberships.add_team_member(actors["lead"], "core", "outsider"),
            services.memberships.add_team_member(actors["lead"], "core", "creator"),
        )

        team = await store.get_team("core")
        assert team.is_member("outsider") and team.is_member("creator")


class TestMutationRetries:

    @pytest.mark.asyncio
    async def test_conflict_is_retried_on_fresh_state(self, services, actors, store):
        original = store.save_team
        attempts = []

        async def flaky(team):
            attempts.append(team.version)
            if len(attempts) == 1:
                raise ConcurrentModificationError("Team", team.id, team.version)
            return await original(team)

        with patch.object(store, "save_team", side_effect=flaky):
            team = await services.memberships.add_team_member(actors["lead"], "core", "outsider")

        assert len(attempts) == 2
        assert team.is_member("outsider")

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, services, actors, settings):
        with patch.object(
            services.store, "save_project",
            side_effect=ConcurrentModificationError("Project", "apollo", 1),
        ) as mock_save:
            with pytest.raises(ConcurrentModificationError):
                await services.memberships.add_project_member(actors["padmin"], "apollo", "outsider")

        assert mock_save.await_count == settings.max_mutation_retries
        assert await audit_actions(services, "apollo") == []


class TestProjectMembership:

    @pytest.mark.asyncio
    async def test_admin_adds_member(self, services, actors):
        project = await services.memberships.add_project_member(
            actors["padmin"], "apollo", "outsider", ProjectRole.VIEWER
        )

        assert project.role_of("outsider") is ProjectRole.VIEWER
        decision = await services.resolver.decide(actors["outsider"], ResourceType.PROJECT, "apollo", Action.READ)
        assert decision.allowed

    @pytest.mark.asyncio
    async def test_member_cannot_add(self, services, actors):
        with pytest.raises(AccessDeniedError):
            await services.memberships.add_project_member(actors["pmember"], "apollo", "outsider")

    @pytest.mark.asyncio
    async def test_creator_is_permanent(self, services, actors):
        with pytest.raises(InvariantViolationError):
            await services.memberships.remove_project_member(actors["padmin"], "apollo", "creator")
        with pytest.raises(InvariantViolationError):
            await services.memberships.change_project_member_role(
                actors["padmin"], "apollo", "creator", ProjectRole.VIEWER
            )

    @pytest.mark.asyncio
    async def test_change_role_audited(self, services, actors):
        project = await services.memberships.change_project_member_role(
            actors["padmin"], "apollo", "pviewer", ProjectRole.MEMBER
        )

        assert project.role_of("pviewer") is ProjectRole.MEMBER
        page = await services.audit.list_audit_records("apollo")
        record = page.items[0]
        assert record.action is AuditAction.MEMBER_ROLE_CHANGED
        assert (record.old_value, record.new_value, record.details) == ("viewer", "member", "pviewer")

    @pytest.mark.asyncio
    async def test_missing_project(self, services, actors):
        with pytest.raises(ProjectNotFoundError):
            await services.memberships.add_project_member(actors["super"], "nope", "outsider")


class TestResourceCreation:

    @pytest.mark.asyncio
    async def test_member_creates_project_document(self, services, actors, store):
        doc = Document("doc-new", created_by="pmember", title="Notes", project_id="apollo")

        await services.resources.create_resource(actors["pmember"], doc)

        assert await store.get_resource(ResourceType.DOCUMENT, "doc-new") is not None
        assert await audit_actions(services, "doc-new") == [AuditAction.CREATED]

    @pytest.mark.asyncio
    async def test_viewer_cannot_create_in_project(self, services, actors, store):
        doc = Document("doc-new", created_by="pviewer", project_id="apollo")

        with pytest.raises(AccessDeniedError):
            await services.resources.create_resource(actors["pviewer"], doc)

        assert await store.get_resource(ResourceType.DOCUMENT, "doc-new") is None

    @pytest.mark.asyncio
    async def test_public_project_resource_rejected(self, services, actors):
        task = Task("task-new", created_by="pmember", project_id="apollo", is_public=True)
        with pytest.raises(InvariantViolationError):
            await services.resources.create_resource(actors["pmember"], task)

    @pytest.mark.asyncio
    async def test_created_by_must_be_caller(self, services, actors):
        with pytest.raises(ValidationError):
            await services.resources.create_resource(actors["pmember"], Document("d", created_by="padmin"))

    @pytest.mark.asyncio
    async def test_duplicate_rejected(self, services, actors):
        with pytest.raises(ValidationError):
            await services.resources.create_resource(
                actors["stranger"], Document("doc-personal", created_by="stranger")
            )

    @pytest.mark.asyncio
    async def test_attachment_needs_write_on_parent(self, services, actors):
        viewer_upload = Attachment("att-new", created_by="pviewer", attached_to=AttachmentParent.TASK,
                                   attached_to_id="task-apollo")
        assignee_upload = Attachment("att-new", created_by="outsider", attached_to=AttachmentParent.TASK,
                                     attached_to_id="task-apollo")

        with pytest.raises(AccessDeniedError):
            await services.resources.create_resource(actors["pviewer"], viewer_upload)
        await services.resources.create_resource(actors["outsider"], assignee_upload)

    @pytest.mark.asyncio
    async def test_attachment_upload_recorded_on_parent(self, services, actors):
        upload = Attachment("att-new", created_by="pmember", attached_to=AttachmentParent.TASK,
                            attached_to_id="task-apollo", original_name="mockup.png")

        await services.resources.create_resource(actors["pmember"], upload)

        assert await audit_actions(services, "att-new") == [AuditAction.CREATED]
        page = await services.audit.list_audit_records("task-apollo")
        assert [r.action for r in page.items] == [AuditAction.ATTACHMENT_ADDED]
        assert page.items[0].describe() == "Max Member added attachment: mockup.png"

    @pytest.mark.asyncio
    async def test_attachment_removal_recorded_on_parent(self, services, actors, store):
        await services.resources.delete_resource(actors["pmember"], ResourceType.ATTACHMENT, "att-apollo")

        assert await store.get_resource(ResourceType.ATTACHMENT, "att-apollo") is None
        page = await services.audit.list_audit_records("task-apollo")
        assert [r.action for r in page.items] == [AuditAction.ATTACHMENT_REMOVED]
        assert page.items[0].describe() == "Max Member removed attachment: brief.pdf"


class TestResourceUpdates:

    @pytest.mark.asyncio
    async def test_assignee_updates_task(self, services, actors):
        task = await services.resources.update_task(
            actors["outsider"], "task-apollo", status="done", tags=["urgent", "release"]
        )

        assert task.status == "done"
        assert set(await audit_actions(services, "task-apollo")) == {
            AuditAction.STATUS_CHANGED, AuditAction.TAG_ADDED,
        }

    @pytest.mark.asyncio
    async def test_denied_update_changes_nothing(self, services, actors, store):
        with pytest.raises(AccessDeniedError):
            await services.resources.update_task(actors["pviewer"], "task-apollo", title="Hijacked")

        task = await store.get_resource(ResourceType.TASK, "task-apollo")
        assert task.title == "Launch"
        assert await audit_actions(services, "task-apollo") == []

    @pytest.mark.asyncio
    async def test_unknown_field_rejected(self, services, actors):
        with pytest.raises(ValidationError):
            await services.resources.update_task(actors["creator"], "task-apollo", project_id="open")

    @pytest.mark.asyncio
    async def test_invalid_value_rejected(self, services, actors):
        with pytest.raises(ValidationError):
            await services.resources.update_task(actors["creator"], "task-apollo", priority="whenever")

    @pytest.mark.asyncio
    async def test_document_update_bumps_version(self, services, actors):
        doc = await services.resources.update_document(actors["pmember"], "doc-apollo", title="Plan v2")

        assert doc.version == 2
        assert doc.last_edited_by == "pmember"
        assert await audit_actions(services, "doc-apollo") == [AuditAction.TITLE_UPDATED]

    @pytest.mark.asyncio
    async def test_personal_resource_made_public(self, services, actors, store):
        await services.resources.set_public(actors["stranger"], ResourceType.DOCUMENT, "doc-personal", True)

        decision = await services.resolver.decide(
            actors["outsider"], ResourceType.DOCUMENT, "doc-personal", Action.READ
        )
        assert decision.allowed
        assert decision.reason is DecisionReason.VISIBILITY

    @pytest.mark.asyncio
    async def test_project_resource_cannot_be_made_public(self, services, actors, store):
        with pytest.raises(InvariantViolationError):
            await services.resources.set_public(actors["padmin"], ResourceType.DOCUMENT, "doc-apollo", True)

        assert not (await store.get_resource(ResourceType.DOCUMENT, "doc-apollo")).is_public

    @pytest.mark.asyncio
    async def test_stray_public_flag_in_project_is_rejected(self, services, actors, store):
        await store.save_resource(Document("doc-flagged", created_by="creator", project_id="apollo", is_public=True))

        with pytest.raises(InvariantViolationError):
            await services.resources.set_public(actors["creator"], ResourceType.DOCUMENT, "doc-flagged", True)

        await services.resources.set_public(actors["creator"], ResourceType.DOCUMENT, "doc-flagged", False)
        assert not (await store.get_resource(ResourceType.DOCUMENT, "doc-flagged")).is_public


class TestDeletion:

    @pytest.mark.asyncio
    async def test_member_cannot_delete_document(self, services, actors, store):
        with pytest.raises(AccessDeniedError):
            await services.resources.delete_resource(actors["pmember"], ResourceType.DOCUMENT, "doc-apollo")
        assert await store.get_resource(ResourceType.DOCUMENT, "doc-apollo") is not None

    @pytest.mark.asyncio
    async def test_project_admin_deletes_document(self, services, actors, store):
        await services.resources.delete_resource(actors["padmin"], ResourceType.DOCUMENT, "doc-apollo")

        assert await store.get_resource(ResourceType.DOCUMENT, "doc-apollo") is None
        assert await audit_actions(services, "doc-apollo") == [AuditAction.DELETED]

    @pytest.mark.asyncio
    async def test_project_delete_removes_tasks_and_unlinks_documents(self, services, actors, store):
        await services.resources.delete_project(actors["creator"], "apollo")

        assert await store.get_project("apollo") is None
        assert await store.get_resource(ResourceType.TASK, "task-apollo") is None
        doc = await store.get_resource(ResourceType.DOCUMENT, "doc-apollo")
        assert doc is not None and doc.project_id is None

        decision = await services.resolver.decide(actors["padmin"], ResourceType.DOCUMENT, "doc-apollo", Action.READ)
        assert not decision.allowed

    @pytest.mark.asyncio
    async def test_unlinked_documents_become_private(self, services, actors, store):
        await store.save_resource(Document("doc-flagged", created_by="creator", project_id="secret", is_public=True))

        await services.resources.delete_project(actors["creator"], "secret")

        doc = await store.get_resource(ResourceType.DOCUMENT, "doc-flagged")
        assert doc.project_id is None
        assert not doc.is_public
        decision = await services.resolver.decide(actors["stranger"], ResourceType.DOCUMENT, "doc-flagged", Action.READ)
        assert not decision.allowed
        assert decision.reason is DecisionReason.ACCESS_DENIED

    @pytest.mark.asyncio
    async def test_project_admin_cannot_delete_project(self, services, actors, store):
        with pytest.raises(AccessDeniedError):
            await services.resources.delete_project(actors["padmin"], "apollo")
        assert await store.get_project("apollo") is not None

    @pytest.mark.asyncio
    async def test_organization_soft_delete(self, services, actors, store):
        await services.resources.delete_organization(actors["owner"], "acme")

        org = await store.get_organization("acme")
        assert org is not None and not org.is_active
        assert (await store.get_team("core")).organization_id is None
        assert (await store.get_project("orgwide")).organization_id is None

        owner = await store.get_actor("owner")
        assert owner.organization_id is None
        assert owner.global_role is GlobalRole.MEMBER
        assert (await store.get_actor("super")).global_role is GlobalRole.SUPER_ADMIN

        outsider = await store.get_actor("outsider")
        decision = await services.resolver.decide(outsider, ResourceType.ORGANIZATION, "acme", Action.READ)
        assert not decision.allowed

    @pytest.mark.asyncio
    async def test_admin_cannot_delete_organization(self, services, actors, store):
        with pytest.raises(AccessDeniedError):
            await services.resources.delete_organization(actors["orgadmin"], "acme")
        assert (await store.get_organization("acme")).is_active


class TestListAccessible:

    @pytest.mark.asyncio
    async def test_lists_readable_documents(self, services, actors):
        docs = await services.access.list_accessible(actors["pviewer"], ResourceType.DOCUMENT)

        assert {d.id for d in docs} == {"doc-apollo", "doc-secret", "doc-open", "doc-public"}

    @pytest.mark.asyncio
    async def test_filters_by_project(self, services, actors):
        docs = await services.access.list_accessible(actors["pviewer"], "document", project_id="apollo")
        assert [d.id for d in docs] == ["doc-apollo"]

    @pytest.mark.asyncio
    async def test_projects_are_not_listable(self, services, actors):
        with pytest.raises(ValidationError):
            await services.access.list_accessible(actors["pviewer"], ResourceType.PROJECT)

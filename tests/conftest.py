"""Pytest configuration and fixtures for taskhub-authz tests.

The ``world`` fixture builds one organization with a team, projects of every
visibility, documents, a task and an attachment, plus an actor for every
role the engine distinguishes.
"""

from typing import Dict

import pytest
import pytest_asyncio
from jose import jwt

from taskhub_authz.bootstrap import build_services
from taskhub_authz.config.constants import (
    AttachmentParent,
    GlobalRole,
    ProjectRole,
    TeamRole,
    Visibility,
)
from taskhub_authz.config.settings import AuthzSettings
from taskhub_authz.features.access.services.access_resolver import AccessResolver
from taskhub_authz.features.audit.repositories.memory_audit_repository import InMemoryAuditRepository
from taskhub_authz.features.identity.adapters.jwt_decoder import JoseTokenDecoder
from taskhub_authz.features.identity.entities.actor import Actor
from taskhub_authz.features.organizations.entities.organization import Organization
from taskhub_authz.features.projects.entities.project import Project
from taskhub_authz.features.resources.entities.resource import Attachment, Document, Task
from taskhub_authz.features.store.repositories.memory_store import InMemoryEntityStore
from taskhub_authz.features.teams.entities.team import Team

JWT_SECRET = "test-secret"


def make_actors() -> Dict[str, Actor]:
    return {
        "super": Actor("super", "Sam Super", GlobalRole.SUPER_ADMIN),
        "owner": Actor("owner", "Olive Owner", GlobalRole.ORG_ADMIN, organization_id="acme"),
        "orgadmin": Actor("orgadmin", "Adam Admin", GlobalRole.MEMBER, organization_id="acme"),
        "globaladmin": Actor("globaladmin", "Gail Global", GlobalRole.ORG_ADMIN, organization_id="acme"),
        "lead": Actor("lead", "Lee Lead", GlobalRole.TEAM_LEAD, organization_id="acme",
                      team_memberships={"core": TeamRole.LEAD}),
        "teammate": Actor("teammate", "Tia Teammate", organization_id="acme",
                          team_memberships={"core": TeamRole.MEMBER}),
        "creator": Actor("creator", "Cora Creator", organization_id="acme"),
        "padmin": Actor("padmin", "Pat Admin", organization_id="acme"),
        "pmember": Actor("pmember", "Max Member", organization_id="acme"),
        "pviewer": Actor("pviewer", "Vic Viewer", GlobalRole.VIEWER, organization_id="acme"),
        "outsider": Actor("outsider", "Otto Outsider", organization_id="acme"),
        "stranger": Actor("stranger", "Stan Stranger"),
        "inactive": Actor("inactive", "Ian Inactive", organization_id="acme", is_active=False),
    }


async def populate(store: InMemoryEntityStore) -> Dict[str, Actor]:
    actors = make_actors()
    for actor in actors.values():
        await store.save_actor(actor)

    await store.save_organization(Organization("acme", owner_id="owner", name="Acme", admin_ids={"orgadmin"}))
    await store.save_organization(Organization("globex", owner_id="stranger", name="Globex"))

    await store.save_team(Team(
        "core", lead_id="lead", name="Core", organization_id="acme",
        members={"teammate": TeamRole.MEMBER},
    ))
    await store.save_team(Team(
        "hidden", lead_id="lead", name="Hidden", organization_id="acme", visibility=Visibility.PRIVATE,
    ))

    members = {
        "padmin": ProjectRole.ADMIN,
        "pmember": ProjectRole.MEMBER,
        "pviewer": ProjectRole.VIEWER,
    }
    await store.save_project(Project(
        "apollo", created_by="creator", name="Apollo", organization_id="acme", team_id="core",
        visibility=Visibility.TEAM, members=dict(members),
    ))
    await store.save_project(Project(
        "secret", created_by="creator", name="Secret", organization_id="acme", team_id="core",
        visibility=Visibility.PRIVATE, members=dict(members),
    ))
    await store.save_project(Project(
        "orgwide", created_by="creator", name="Org wide", organization_id="acme",
        visibility=Visibility.ORGANIZATION,
    ))
    await store.save_project(Project(
        "open", created_by="creator", name="Open", organization_id="acme", visibility=Visibility.PUBLIC,
    ))
    await store.save_project(Project(
        "archived", created_by="creator", name="Archived", organization_id="acme",
        visibility=Visibility.PUBLIC, members={"pmember": ProjectRole.MEMBER}, is_active=False,
    ))

    await store.save_resource(Document("doc-apollo", created_by="creator", title="Plan", project_id="apollo"))
    await store.save_resource(Document("doc-secret", created_by="creator", title="Secret", project_id="secret"))
    await store.save_resource(Document("doc-open", created_by="creator", title="Open", project_id="open"))
    await store.save_resource(Document("doc-personal", created_by="stranger", title="Diary"))
    await store.save_resource(Document("doc-public", created_by="stranger", title="Blog", is_public=True))
    await store.save_resource(Document("doc-archived", created_by="creator", project_id="archived"))

    await store.save_resource(Task(
        "task-apollo", created_by="creator", title="Launch", project_id="apollo",
        assignees=["outsider"], tags=["urgent"],
    ))
    await store.save_resource(Task("task-personal", created_by="stranger", title="Groceries"))

    await store.save_resource(Attachment(
        "att-apollo", created_by="pmember", attached_to=AttachmentParent.TASK,
        attached_to_id="task-apollo", original_name="brief.pdf",
    ))
    await store.save_resource(Attachment(
        "att-orphan", created_by="pmember", attached_to=AttachmentParent.DOCUMENT,
        attached_to_id="missing-doc", original_name="lost.pdf",
    ))
    return actors


@pytest.fixture
def settings():
    return AuthzSettings(jwt_secret=JWT_SECRET, max_mutation_retries=3)


@pytest_asyncio.fixture
async def store():
    return InMemoryEntityStore()


@pytest_asyncio.fixture
async def actors(store):
    return await populate(store)


@pytest.fixture
def resolver(store, actors):
    return AccessResolver(store)


@pytest.fixture
def audit_repository():
    return InMemoryAuditRepository()


@pytest.fixture
def services(store, actors, audit_repository, settings):
    return build_services(store, audit_repository, JoseTokenDecoder(JWT_SECRET), settings)


@pytest.fixture
def jwt_secret():
    return JWT_SECRET


@pytest.fixture
def make_token():
    def _make_token(subject: str, **claims) -> str:
        return jwt.encode({"sub": subject, **claims}, JWT_SECRET, algorithm="HS256")
    return _make_token

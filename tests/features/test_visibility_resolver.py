"""Tests for visibility policy evaluation."""

import pytest

from taskhub_authz.features.visibility.services.visibility_resolver import VisibilityResolver


@pytest.fixture
def visibility(store, actors):
    return VisibilityResolver(store)


async def visible(visibility, store, actor, loader, entity_id, *args):
    entity = await getattr(store, loader)(*args, entity_id)
    return await visibility.is_visible_by_policy(actor, entity)


class TestProjectVisibility:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("project_id,actor_key,expected", [
        ("secret", "padmin", False),
        ("secret", "orgadmin", False),
        ("apollo", "teammate", True),
        ("apollo", "orgadmin", True),
        ("apollo", "outsider", False),
        ("orgwide", "outsider", True),
        ("orgwide", "stranger", False),
        ("open", "stranger", True),
        ("archived", "stranger", False),
    ])
    async def test_policy(self, visibility, store, actors, project_id, actor_key, expected):
        project = await store.get_project(project_id)
        assert await visibility.is_visible_by_policy(actors[actor_key], project) is expected

    @pytest.mark.asyncio
    async def test_inactive_actor_sees_nothing(self, visibility, store, actors):
        project = await store.get_project("open")
        assert not await visibility.is_visible_by_policy(actors["inactive"], project)


class TestTeamVisibility:

    @pytest.mark.asyncio
    async def test_organization_team(self, visibility, store, actors):
        team = await store.get_team("core")
        assert await visibility.is_visible_by_policy(actors["outsider"], team)
        assert not await visibility.is_visible_by_policy(actors["stranger"], team)

    @pytest.mark.asyncio
    async def test_private_team(self, visibility, store, actors):
        team = await store.get_team("hidden")
        assert not await visibility.is_visible_by_policy(actors["outsider"], team)


class TestResourceVisibility:

    @pytest.mark.asyncio
    async def test_personal_resource_visible_to_creator_only(self, visibility, store, actors):
        assert await visible(visibility, store, actors["stranger"], "get_resource", "doc-personal", "document")
        assert not await visible(visibility, store, actors["super"], "get_resource", "doc-personal", "document")

    @pytest.mark.asyncio
    async def test_public_personal_resource(self, visibility, store, actors):
        assert await visible(visibility, store, actors["outsider"], "get_resource", "doc-public", "document")

    @pytest.mark.asyncio
    async def test_project_resource_follows_project(self, visibility, store, actors):
        assert await visible(visibility, store, actors["stranger"], "get_resource", "doc-open", "document")
        assert not await visible(visibility, store, actors["stranger"], "get_resource", "doc-secret", "document")

    @pytest.mark.asyncio
    async def test_attachment_follows_parent(self, visibility, store, actors):
        assert await visible(visibility, store, actors["teammate"], "get_resource", "att-apollo", "attachment")
        assert not await visible(visibility, store, actors["outsider"], "get_resource", "att-apollo", "attachment")

    @pytest.mark.asyncio
    async def test_orphan_attachment_hidden(self, visibility, store, actors):
        assert not await visible(visibility, store, actors["pmember"], "get_resource", "att-orphan", "attachment")

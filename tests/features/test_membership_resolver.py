"""Tests for the membership resolver."""

from unittest.mock import AsyncMock

import pytest

from taskhub_authz.config.constants import ProjectRole, TeamRole
from taskhub_authz.core.exceptions import StoreUnavailableError
from taskhub_authz.features.membership.services.membership_resolver import MembershipResolver


@pytest.fixture
def membership(store, actors):
    return MembershipResolver(store)


class TestOrganizationMembership:

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actor_key,expected", [
        ("super", True),
        ("owner", True),
        ("orgadmin", True),
        ("globaladmin", True),
        ("outsider", False),
        ("stranger", False),
    ])
    async def test_is_org_admin(self, membership, actors, actor_key, expected):
        assert await membership.is_org_admin(actors[actor_key], "acme") is expected

    @pytest.mark.asyncio
    async def test_global_org_admin_limited_to_own_organization(self, membership, actors):
        assert not await membership.is_org_admin(actors["globaladmin"], "globex")

    @pytest.mark.asyncio
    async def test_missing_organization(self, membership, actors):
        assert not await membership.is_org_admin(actors["owner"], "nowhere")
        assert not await membership.is_org_owner(actors["owner"], "nowhere")

    @pytest.mark.asyncio
    async def test_owner(self, membership, actors, store):
        org = await store.get_organization("acme")
        assert await membership.is_org_owner(actors["owner"], org)
        assert not await membership.is_org_owner(actors["orgadmin"], org)

    def test_member(self, membership, actors):
        assert membership.is_org_member(actors["outsider"], "acme")
        assert not membership.is_org_member(actors["stranger"], "acme")


class TestTeamMembership:

    @pytest.mark.asyncio
    async def test_lead_counts_as_member(self, membership, actors):
        assert await membership.is_team_lead(actors["lead"], "core")
        assert await membership.is_team_member(actors["lead"], "core")
        assert await membership.team_role(actors["lead"], "core") is TeamRole.LEAD

    @pytest.mark.asyncio
    async def test_member(self, membership, actors):
        assert await membership.is_team_member(actors["teammate"], "core")
        assert not await membership.is_team_lead(actors["teammate"], "core")
        assert not await membership.is_team_member(actors["teammate"], "hidden")

    @pytest.mark.asyncio
    async def test_missing_team(self, membership, actors):
        assert await membership.team_role(actors["lead"], "gone") is None
        assert not await membership.is_team_member(actors["lead"], None)


class TestProjectMembership:

    @pytest.mark.asyncio
    async def test_creator_is_admin(self, membership, actors):
        assert await membership.project_role(actors["creator"], "apollo") is ProjectRole.ADMIN
        assert await membership.is_project_member(actors["creator"], "apollo", ProjectRole.ADMIN)

    @pytest.mark.asyncio
    @pytest.mark.parametrize("actor_key,min_role,expected", [
        ("pviewer", ProjectRole.VIEWER, True),
        ("pviewer", ProjectRole.MEMBER, False),
        ("pmember", ProjectRole.MEMBER, True),
        ("pmember", ProjectRole.ADMIN, False),
        ("padmin", ProjectRole.ADMIN, True),
        ("outsider", ProjectRole.VIEWER, False),
    ])
    async def test_min_role(self, membership, actors, actor_key, min_role, expected):
        assert await membership.is_project_member(actors[actor_key], "apollo", min_role) is expected

    @pytest.mark.asyncio
    async def test_store_failure_propagates(self, actors):
        store = AsyncMock()
        store.get_project.side_effect = StoreUnavailableError("down")
        membership = MembershipResolver(store)

        with pytest.raises(StoreUnavailableError):
            await membership.is_project_member(actors["pmember"], "apollo")

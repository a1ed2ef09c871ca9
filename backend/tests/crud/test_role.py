"""Tests for Member, Role and Permission CRUD operations."""

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.crud import member as member_crud
from cfp.crud import role as role_crud

from tests.fixtures.factories import MemberFactory, RoleFactory


@pytest.mark.database
class TestMemberCRUD:
    """Test suite for Member CRUD operations."""

    async def test_create_member_with_provider_and_links(
        self, async_session: AsyncSession
    ):
        """Test creating a member with a provider identity and profile links."""
        result = await member_crud.create(
            async_session,
            email="octocat@example.com",
            display_name="The Octocat",
            provider="github",
            provider_user_id="583231",
            links=[("github", "https://github.com/octocat")],
        )

        assert result.id is not None
        assert result.token_version == 0
        assert [(p.provider, p.provider_user_id) for p in result.providers] == [
            ("github", "583231")
        ]
        assert [(link.type, link.url) for link in result.links] == [
            ("github", "https://github.com/octocat")
        ]

    async def test_get_by_email(self, async_session: AsyncSession):
        """Test finding a member by email with providers loaded."""
        created = await member_crud.create(
            async_session, email="dev@example.com", provider="dev", provider_user_id="dev_1"
        )

        result = await member_crud.get_by_email(async_session, "dev@example.com")

        assert result is not None
        assert result.id == created.id
        assert [p.provider for p in result.providers] == ["dev"]
        assert await member_crud.get_by_email(async_session, "nobody@example.com") is None

    async def test_add_provider(self, async_session: AsyncSession):
        """Test linking a second identity to an existing member."""
        await member_crud.create(
            async_session, email="both@example.com", provider="dev", provider_user_id="dev_1"
        )
        member = await member_crud.get_by_email(async_session, "both@example.com")

        await member_crud.add_provider(
            async_session, member, provider="github", provider_user_id="42"
        )

        assert sorted(p.provider for p in member.providers) == ["dev", "github"]


@pytest.mark.database
class TestRoleCRUD:
    """Test suite for Role and Permission CRUD operations."""

    async def test_permission_codes_union_across_roles(
        self, async_session: AsyncSession
    ):
        """Test that codes from every role are merged without duplicates."""
        member = await MemberFactory.create_async(async_session)
        shared = await role_crud.upsert_permission(async_session, "activity:view")
        await RoleFactory.create_async(
            async_session, permissions=["activity:manage", shared], members=[member]
        )
        await RoleFactory.create_async(
            async_session, permissions=["activity:edit", shared], members=[member]
        )

        result = await role_crud.get_permission_codes_for_member(async_session, member.id)

        assert result == ["activity:edit", "activity:manage", "activity:view"]

    async def test_permission_codes_for_member_without_roles(
        self, async_session: AsyncSession
    ):
        """Test that a member without roles has no permissions."""
        member = await MemberFactory.create_async(async_session)
        await RoleFactory.create_async(async_session, permissions=["activity:manage"])

        result = await role_crud.get_permission_codes_for_member(async_session, member.id)

        assert result == []

    async def test_upsert_permission_is_idempotent(self, async_session: AsyncSession):
        """Test that upserting an existing code returns the same row."""
        first = await role_crud.upsert_permission(async_session, "activity:manage", "x")
        second = await role_crud.upsert_permission(async_session, "activity:manage", "y")

        assert first.id == second.id
        assert second.description == "x"

    async def test_upsert_role_adds_missing_permissions(
        self, async_session: AsyncSession
    ):
        """Test that upserting a role grants only the permissions it lacks."""
        manage = await role_crud.upsert_permission(async_session, "activity:manage")
        view = await role_crud.upsert_permission(async_session, "activity:view")

        role = await role_crud.upsert_role(async_session, "admin", permissions=[manage])
        again = await role_crud.upsert_role(
            async_session, "admin", permissions=[manage, view]
        )

        assert again.id == role.id
        assert sorted(p.code for p in again.permissions) == [
            "activity:manage",
            "activity:view",
        ]

    async def test_add_member_is_idempotent(self, async_session: AsyncSession):
        """Test that assigning a member twice keeps a single membership."""
        member = await MemberFactory.create_async(async_session)
        role = await role_crud.upsert_role(async_session, "admin")

        await role_crud.add_member(async_session, role, member)
        await role_crud.add_member(async_session, role, member)

        loaded = await role_crud.get_role_by_name(async_session, "admin")
        assert [m.id for m in loaded.members] == [member.id]

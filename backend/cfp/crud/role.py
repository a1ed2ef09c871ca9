"""Role and Permission CRUD operations."""

import uuid
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cfp.models.member import Member
from cfp.models.role import Permission, Role, role_members, role_permissions


async def get_permission_codes_for_member(
    session: AsyncSession, member_id: uuid.UUID
) -> list[str]:
    """
    Get the distinct permission codes granted to a member through any of its roles.

    Args:
        session: Async database session
        member_id: Member UUID

    Returns:
        Sorted list of permission codes (empty if the member has no roles)
    """
    stmt = (
        select(Permission.code)
        .join(role_permissions, role_permissions.c.permission_id == Permission.id)
        .join(role_members, role_members.c.role_id == role_permissions.c.role_id)
        .where(role_members.c.member_id == member_id)
        .distinct()
        .order_by(Permission.code)
    )
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def get_permission_by_code(
    session: AsyncSession, code: str
) -> Permission | None:
    """Get a permission by its code."""
    result = await session.execute(select(Permission).where(Permission.code == code))
    return result.scalar_one_or_none()


async def upsert_permission(
    session: AsyncSession, code: str, description: str | None = None
) -> Permission:
    """
    Get a permission by code, creating it if missing.

    An existing permission is returned unchanged.
    """
    permission = await get_permission_by_code(session, code)
    if permission is None:
        permission = Permission(code=code, description=description)
        session.add(permission)
        await session.flush()
    return permission


async def get_role_by_name(session: AsyncSession, name: str) -> Role | None:
    """Get a role by name, with its permissions and members loaded."""
    stmt = (
        select(Role)
        .where(Role.name == name)
        .options(selectinload(Role.permissions), selectinload(Role.members))
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def upsert_role(
    session: AsyncSession,
    name: str,
    description: str | None = None,
    permissions: Iterable[Permission] = (),
) -> Role:
    """
    Get a role by name, creating it if missing, and grant it the given permissions.

    Permissions the role already holds are left as they are.
    """
    role = await get_role_by_name(session, name)
    if role is None:
        role = Role(name=name, description=description, permissions=[], members=[])
        session.add(role)

    held = {permission.code for permission in role.permissions}
    for permission in permissions:
        if permission.code not in held:
            role.permissions.append(permission)
            held.add(permission.code)

    await session.flush()
    return role


async def add_member(session: AsyncSession, role: Role, member: Member) -> None:
    """
    Assign a member to a role (no-op if already assigned).

    Args:
        session: Async database session
        role: Role instance (members collection loaded)
        member: Member instance
    """
    if any(existing.id == member.id for existing in role.members):
        return
    role.members.append(member)
    await session.flush()

"""Seed permission codes and the admin role.

Usage:
    python -m cfp.commands.seed [--admin-email someone@example.com]

Safe to run repeatedly: existing permissions, roles and role assignments are
left as they are.
"""

from __future__ import annotations

import argparse
import asyncio
import logging

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.crud import member as member_crud
from cfp.crud import role as role_crud
from cfp.models.role import Role

logger = logging.getLogger(__name__)

PERMISSION_CODES = (
    "activity:manage",
    "activity:create",
    "activity:edit",
    "activity:delete",
    "activity:view",
)

ADMIN_ROLE = "admin"


async def seed(session: AsyncSession, admin_email: str | None = None) -> Role:
    """
    Upsert the permission codes and an admin role holding all of them.

    Args:
        session: Async database session (caller commits)
        admin_email: Email of a member to put in the admin role, created if missing

    Returns:
        The admin role
    """
    permissions = [
        await role_crud.upsert_permission(
            session, code, description=f"{code.replace(':', ' ')} permission"
        )
        for code in PERMISSION_CODES
    ]
    logger.info(f"Seeded {len(permissions)} permissions")

    role = await role_crud.upsert_role(
        session, ADMIN_ROLE, description="admin", permissions=permissions
    )
    logger.info("Admin role seeded with all permissions")

    if admin_email:
        member = await member_crud.get_by_email(session, admin_email)
        if member is None:
            member = await member_crud.create(
                session, email=admin_email, display_name=admin_email.split("@")[0]
            )
        await role_crud.add_member(session, role, member)
        logger.info(f"Member {member.id} assigned to the admin role")

    return role


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Seed permission codes and the admin role.",
    )
    parser.add_argument(
        "--admin-email",
        default=None,
        help="Email of a member to assign to the admin role (created if missing)",
    )
    return parser.parse_args()


async def _run(admin_email: str | None) -> None:
    # Imported here so that importing this module does not create an engine
    from cfp.db.config import AsyncSessionLocal, async_engine

    try:
        async with AsyncSessionLocal.begin() as session:
            await seed(session, admin_email=admin_email)
    finally:
        await async_engine.dispose()


def main() -> None:
    logging.basicConfig(level=logging.INFO, format="%(levelname)s %(message)s")
    args = parse_args()
    try:
        asyncio.run(_run(args.admin_email))
    except SQLAlchemyError as exc:
        raise SystemExit(f"Seed failed: {exc}") from exc
    print("Seed data created successfully!")


if __name__ == "__main__":
    main()

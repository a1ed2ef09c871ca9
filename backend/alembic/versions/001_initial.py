"""Initial schema.

Revision ID: 001
Revises:
Create Date: 2026-03-01

"""

from typing import Sequence, Union

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# Revision identifiers, used by Alembic.
revision: str = "001"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    """Upgrade database schema."""
    # Create activities table
    op.create_table(
        "activities",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=255), nullable=False),
        sa.Column("slug", sa.String(length=255), nullable=False),
        sa.Column("start_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("end_at", sa.DateTime(timezone=True), nullable=False),
        sa.Column("closed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("supported_languages", postgresql.ARRAY(sa.Text()), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="activities_pkey"),
        sa.UniqueConstraint("slug", name="activities_slug_key"),
    )

    # Create activity_contents table
    op.create_table(
        "activity_contents",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("activity_id", sa.Uuid(), nullable=False),
        sa.Column("lang", sa.String(length=15), nullable=False),
        sa.Column("title", sa.String(length=255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.ForeignKeyConstraint(["activity_id"], ["activities.id"], name="activity_contents_activity_id_fkey", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="activity_contents_pkey"),
        sa.UniqueConstraint("activity_id", "lang", name="activity_contents_activity_id_lang_key"),
    )
    op.create_index("ix_activity_contents_activity_id", "activity_contents", ["activity_id"], unique=False)

    # Create members table
    op.create_table(
        "members",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("display_name", sa.String(length=255), nullable=True),
        sa.Column("avatar_url", sa.String(length=512), nullable=True),
        sa.Column("organization", sa.String(length=255), nullable=True),
        sa.Column("bio", sa.Text(), nullable=True),
        sa.Column("location", sa.String(length=255), nullable=True),
        sa.Column("token_version", sa.Integer(), nullable=False, server_default=sa.text("0")),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.PrimaryKeyConstraint("id", name="members_pkey"),
        sa.UniqueConstraint("email", name="members_email_key"),
    )

    # Create member_providers table
    op.create_table(
        "member_providers",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("provider", sa.String(length=32), nullable=False),
        sa.Column("provider_user_id", sa.String(length=255), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.text("now()")),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"], name="member_providers_member_id_fkey", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="member_providers_pkey"),
        sa.UniqueConstraint("provider", "provider_user_id", name="member_providers_provider_provider_user_id_key"),
    )
    op.create_index("ix_member_providers_member_id", "member_providers", ["member_id"], unique=False)

    # Create member_links table
    op.create_table(
        "member_links",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.Column("type", sa.String(length=64), nullable=False),
        sa.Column("url", sa.String(length=512), nullable=False),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"], name="member_links_member_id_fkey", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id", name="member_links_pkey"),
    )
    op.create_index("ix_member_links_member_id", "member_links", ["member_id"], unique=False)

    # Create permissions table
    op.create_table(
        "permissions",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("code", sa.String(length=128), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="permissions_pkey"),
        sa.UniqueConstraint("code", name="permissions_code_key"),
    )

    # Create roles table
    op.create_table(
        "roles",
        sa.Column("id", sa.Uuid(), nullable=False),
        sa.Column("name", sa.String(length=64), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.PrimaryKeyConstraint("id", name="roles_pkey"),
        sa.UniqueConstraint("name", name="roles_name_key"),
    )

    # Create role_permissions association table
    op.create_table(
        "role_permissions",
        sa.Column("role_id", sa.Uuid(), nullable=False),
        sa.Column("permission_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name="role_permissions_role_id_fkey", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["permission_id"], ["permissions.id"], name="role_permissions_permission_id_fkey", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("role_id", "permission_id", name="role_permissions_pkey"),
    )

    # Create role_members association table
    op.create_table(
        "role_members",
        sa.Column("role_id", sa.Uuid(), nullable=False),
        sa.Column("member_id", sa.Uuid(), nullable=False),
        sa.ForeignKeyConstraint(["role_id"], ["roles.id"], name="role_members_role_id_fkey", ondelete="CASCADE"),
        sa.ForeignKeyConstraint(["member_id"], ["members.id"], name="role_members_member_id_fkey", ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("role_id", "member_id", name="role_members_pkey"),
    )


def downgrade() -> None:
    """Downgrade database schema."""
    op.drop_table("role_members")
    op.drop_table("role_permissions")
    op.drop_table("roles")
    op.drop_table("permissions")
    op.drop_index("ix_member_links_member_id", table_name="member_links")
    op.drop_table("member_links")
    op.drop_index("ix_member_providers_member_id", table_name="member_providers")
    op.drop_table("member_providers")
    op.drop_table("members")
    op.drop_index("ix_activity_contents_activity_id", table_name="activity_contents")
    op.drop_table("activity_contents")
    op.drop_table("activities")

"""Member model and its linked identities."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    DateTime,
    ForeignKey,
    Integer,
    String,
    Text,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cfp.db.config import Base
from cfp.models.activity import utcnow

if TYPE_CHECKING:
    from cfp.models.role import Role


class Member(Base):
    """Member model representing a person who can sign in.

    A member is identified by a unique email address. External identities
    (GitHub, dev shortcut) are attached through MemberProvider rows, and
    public profile links through MemberLink rows.

    token_version is embedded in issued session tokens ("v" claim).
    """

    __tablename__ = "members"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    email: Mapped[str] = mapped_column(String(255), nullable=False, unique=True)
    display_name: Mapped[str | None] = mapped_column(String(255), nullable=True)
    avatar_url: Mapped[str | None] = mapped_column(String(512), nullable=True)
    organization: Mapped[str | None] = mapped_column(String(255), nullable=True)
    bio: Mapped[str | None] = mapped_column(Text, nullable=True)
    location: Mapped[str | None] = mapped_column(String(255), nullable=True)

    token_version: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    # Audit attributes
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # References
    providers: Mapped[list[MemberProvider]] = relationship(
        "MemberProvider",
        back_populates="member",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    links: Mapped[list[MemberLink]] = relationship(
        "MemberLink",
        back_populates="member",
        cascade="all, delete-orphan",
        passive_deletes=True,
    )
    roles: Mapped[list[Role]] = relationship(
        "Role", secondary="role_members", back_populates="members"
    )

    def __repr__(self) -> str:
        """String representation of Member."""
        return f"<Member(id={self.id}, email='{self.email}')>"


class MemberProvider(Base):
    """External identity (e.g. a GitHub account) linked to a member."""

    __tablename__ = "member_providers"
    __table_args__ = (
        UniqueConstraint(
            "provider",
            "provider_user_id",
            name="member_providers_provider_provider_user_id_key",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    provider: Mapped[str] = mapped_column(String(32), nullable=False)  # "github", "dev"
    provider_user_id: Mapped[str] = mapped_column(String(255), nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )

    member: Mapped[Member] = relationship("Member", back_populates="providers")


class MemberLink(Base):
    """Public profile link of a member (GitHub profile, social accounts)."""

    __tablename__ = "member_links"

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)
    member_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("members.id", ondelete="CASCADE"), nullable=False, index=True
    )
    type: Mapped[str] = mapped_column(String(64), nullable=False)  # "github", "twitter", ...
    url: Mapped[str] = mapped_column(String(512), nullable=False)

    member: Mapped[Member] = relationship("Member", back_populates="links")

"""Activity and ActivityContent models."""

from __future__ import annotations

import json
import uuid
from datetime import UTC, datetime

from sqlalchemy import (
    DateTime,
    ForeignKey,
    String,
    Text,
    TypeDecorator,
    UniqueConstraint,
    Uuid,
)
from sqlalchemy.dialects.postgresql import ARRAY
from sqlalchemy.orm import Mapped, mapped_column, relationship

from cfp.db.config import Base


def utcnow() -> datetime:
    return datetime.now(UTC)


class StringArray(TypeDecorator):
    """Custom type for storing arrays as JSON in SQLite and ARRAY in PostgreSQL."""

    impl = Text
    cache_ok = True

    def load_dialect_impl(self, dialect):
        """Load the appropriate type based on dialect."""
        match dialect.name:
            case "postgresql":
                return dialect.type_descriptor(ARRAY(Text()))
            case "sqlite":
                return dialect.type_descriptor(Text())
            case _:
                raise NotImplementedError(f"StringArray not supported for dialect: {dialect.name}")

    def process_bind_param(self, value, dialect):
        """Convert list to JSON string for SQLite."""
        if value is None:
            return None
        match dialect.name:
            case "postgresql":
                return list(value)
            case "sqlite":
                return json.dumps(list(value))
            case _:
                raise NotImplementedError(f"StringArray not supported for dialect: {dialect.name}")

    def process_result_value(self, value, dialect):
        """Convert JSON string back to list for SQLite."""
        if value is None:
            return None
        match dialect.name:
            case "postgresql":
                return value
            case "sqlite":
                return json.loads(value)
            case _:
                raise NotImplementedError(f"StringArray not supported for dialect: {dialect.name}")


class Activity(Base):
    """Activity model representing a schedulable window with multilingual content.

    A typical activity is a conference call-for-proposals: it opens at
    start_at, ends at end_at, and may be closed manually ahead of its start
    (closed_at < start_at).

    The slug is the public, URL-safe identifier and is globally unique.
    supported_languages is the whitelist of (lowercase) language codes that
    the activity's contents may use; contents in other languages are never
    returned by the public lookup.
    """

    __tablename__ = "activities"

    # Primary key
    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    # Attributes
    name: Mapped[str] = mapped_column(String(255), nullable=False)

    slug: Mapped[str] = mapped_column(
        String(255), nullable=False, unique=True
    )  # Lowercase, hyphenated, e.g. "pycon-2025-cfp"

    start_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    end_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    closed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )  # Optional manual closure

    supported_languages: Mapped[list[str]] = mapped_column(
        StringArray, nullable=False, default=list
    )  # e.g. ["en-us", "zh-tw"]

    # Audit attributes
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, nullable=False
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), default=utcnow, onupdate=utcnow, nullable=False
    )

    # References
    contents: Mapped[list[ActivityContent]] = relationship(
        "ActivityContent",
        back_populates="activity",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="ActivityContent.lang",
    )  # One to many (0..n), one per language

    def __repr__(self) -> str:
        """String representation of Activity."""
        return f"<Activity(id={self.id}, slug='{self.slug}')>"


class ActivityContent(Base):
    """Title and description of an activity in one language.

    At most one content row exists per (activity, lang).
    """

    __tablename__ = "activity_contents"
    __table_args__ = (
        UniqueConstraint(
            "activity_id",
            "lang",
            name="activity_contents_activity_id_lang_key",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(Uuid, primary_key=True, default=uuid.uuid4)

    activity_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("activities.id", ondelete="CASCADE"), nullable=False, index=True
    )

    lang: Mapped[str] = mapped_column(String(15), nullable=False)  # e.g. "zh-tw"
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    activity: Mapped[Activity] = relationship("Activity", back_populates="contents")

    def __repr__(self) -> str:
        """String representation of ActivityContent."""
        return f"<ActivityContent(activity_id={self.activity_id}, lang='{self.lang}')>"

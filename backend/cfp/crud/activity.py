"""Activity CRUD operations.

CRUD Pattern - Transaction Management:
- CRUD layer contains data access logic only (no business logic, no transaction management)
- All CRUD functions use session.flush() instead of session.commit()
- Transaction boundaries are managed by the API layer (via get_async_db dependency)
"""

import uuid
from collections.abc import Iterable
from datetime import datetime
from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from cfp.models.activity import Activity, ActivityContent


async def create(
    session: AsyncSession,
    name: str,
    slug: str,
    start_at: datetime,
    end_at: datetime,
    closed_at: datetime | None,
    supported_languages: list[str],
    contents: Iterable[dict[str, Any]],
) -> Activity:
    """
    Create an activity together with its contents in a single flush.

    Args:
        session: Async database session (transaction managed by API layer)
        name: Activity name
        slug: Unique public identifier (already normalized)
        start_at: Start datetime
        end_at: End datetime
        closed_at: Optional closure datetime
        supported_languages: Lowercase language codes
        contents: Dictionaries with "lang", "title" and "description"

    Returns:
        Created Activity instance with contents loaded

    Raises:
        IntegrityError: If the slug already exists (unique constraint violation)
    """
    activity = Activity(
        name=name,
        slug=slug,
        start_at=start_at,
        end_at=end_at,
        closed_at=closed_at,
        supported_languages=supported_languages,
        contents=[
            ActivityContent(
                lang=content["lang"],
                title=content["title"],
                description=content.get("description"),
            )
            for content in contents
        ],
    )
    session.add(activity)
    await session.flush()
    return activity


async def get_by_id(session: AsyncSession, activity_id: uuid.UUID) -> Activity | None:
    """
    Get an activity by primary key, with all of its contents.

    populate_existing makes a repeated call within the same session reload
    the row and its contents (used to return the refreshed activity after an
    update).

    Args:
        session: Async database session
        activity_id: Activity UUID

    Returns:
        Activity instance if found, None otherwise
    """
    stmt = (
        select(Activity)
        .where(Activity.id == activity_id)
        .options(selectinload(Activity.contents))
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_by_slug(
    session: AsyncSession, slug: str, lang: str | None = None
) -> Activity | None:
    """
    Get an activity by slug, with its contents optionally restricted to one language.

    The returned instance is loaded with populate_existing, so its contents
    collection reflects the language filter. Do not modify it.

    Args:
        session: Async database session
        slug: Activity slug
        lang: Lowercase language code to restrict contents to (optional)

    Returns:
        Activity instance if found, None otherwise
    """
    contents_loader = selectinload(Activity.contents)
    if lang is not None:
        contents_loader = selectinload(
            Activity.contents.and_(ActivityContent.lang == lang)
        )
    stmt = (
        select(Activity)
        .where(Activity.slug == slug)
        .options(contents_loader)
        .execution_options(populate_existing=True)
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def get_all(session: AsyncSession) -> list[Activity]:
    """
    Get all activities, most recently created first (contents not loaded).

    Args:
        session: Async database session

    Returns:
        List of Activity instances
    """
    stmt = select(Activity).order_by(Activity.created_at.desc())
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def exists_by_slug(session: AsyncSession, slug: str) -> bool:
    """
    Check if an activity with the given slug exists.

    Args:
        session: Async database session
        slug: Activity slug

    Returns:
        True if exists, False otherwise
    """
    stmt = select(Activity.id).where(Activity.slug == slug)
    result = await session.execute(stmt)
    return result.scalar_one_or_none() is not None


async def update(
    session: AsyncSession, activity: Activity, values: dict[str, Any]
) -> Activity:
    """
    Apply column values to an activity.

    Args:
        session: Async database session
        activity: Activity instance to update
        values: Mapping of column attribute name to new value

    Returns:
        Updated Activity instance
    """
    for key, value in values.items():
        setattr(activity, key, value)
    await session.flush()
    return activity


"""ActivityContent CRUD operations."""

import uuid

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.models.activity import ActivityContent

_UNSET = object()


async def get_by_activity_and_lang(
    session: AsyncSession, activity_id: uuid.UUID, lang: str
) -> ActivityContent | None:
    """
    Get the content of an activity in one language.

    Args:
        session: Async database session
        activity_id: Activity UUID
        lang: Lowercase language code

    Returns:
        ActivityContent instance if found, None otherwise
    """
    stmt = select(ActivityContent).where(
        ActivityContent.activity_id == activity_id,
        ActivityContent.lang == lang,
    )
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def upsert(
    session: AsyncSession,
    activity_id: uuid.UUID,
    lang: str,
    title: str,
    description: str | None | object = _UNSET,
) -> ActivityContent:
    """
    Insert or update the content keyed on (activity_id, lang).

    An existing row gets the new title, and the new description when one is
    passed (leaving it out keeps the stored description). A missing row is
    inserted.

    Args:
        session: Async database session (transaction managed by API layer)
        activity_id: Activity UUID
        lang: Lowercase language code
        title: Title
        description: Description, None to clear it, omitted to keep it

    Returns:
        The inserted or updated ActivityContent instance
    """
    content = await get_by_activity_and_lang(session, activity_id, lang)
    if content is None:
        content = ActivityContent(
            activity_id=activity_id,
            lang=lang,
            title=title,
            description=None if description is _UNSET else description,
        )
        session.add(content)
    else:
        content.title = title
        if description is not _UNSET:
            content.description = description
    await session.flush()
    return content

"""Activity business service.

Transaction Management Architecture:
- Service layer contains business logic only (no transaction management)
- API layer manages transaction boundaries via get_async_db dependency
- Transaction commits automatically on success, rolls back on exception
- CRUD layer only flushes (session.flush()), never commits

Every rule below is checked before the first write, so a rejected request
leaves the database untouched. An update (parent fields plus per-language
content upserts) runs inside the request transaction and is applied as a
whole or not at all.

Exception Handling:
- ApplicationValidationError for rule violations (HTTP 400)
- DuplicateResourceError for slug collisions (HTTP 409)
- ResourceNotFoundError for unknown ids/slugs (HTTP 404)
"""

import logging
import uuid
from collections.abc import Iterable
from datetime import UTC, datetime
from typing import Any

from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.crud import activity as activity_crud
from cfp.crud import activity_content as activity_content_crud
from cfp.exceptions.business import (
    ApplicationValidationError,
    DuplicateResourceError,
    ResourceNotFoundError,
)
from cfp.models.activity import Activity
from cfp.schemas.activity import (
    ActivityContentRequest,
    ActivityCreateRequest,
    ActivityUpdateRequest,
)

logger = logging.getLogger(__name__)

# Scalar fields an update may change, besides the contents
_UPDATABLE_FIELDS = (
    "name",
    "slug",
    "start_at",
    "end_at",
    "closed_at",
    "supported_languages",
)


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite hands back naive datetimes; they were stored as UTC
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


def validate_dates(
    start_at: datetime, end_at: datetime, closed_at: datetime | None = None
) -> None:
    """
    Validate the schedule of an activity.

    Args:
        start_at: Start datetime
        end_at: End datetime, must be after start_at
        closed_at: Optional closure datetime, must be before start_at

    Raises:
        ApplicationValidationError: If the dates are out of order
    """
    start_at = _as_utc(start_at)
    end_at = _as_utc(end_at)
    closed_at = _as_utc(closed_at)

    if end_at <= start_at:
        raise ApplicationValidationError("End date must be after start date")

    if closed_at is not None and closed_at >= start_at:
        raise ApplicationValidationError("Closed date must be before start date")


def validate_content_languages(
    contents: Iterable[ActivityContentRequest], supported_languages: list[str]
) -> None:
    """
    Validate that every content language is supported and appears only once.

    Language codes are compared lowercase.

    Args:
        contents: Content requests
        supported_languages: Supported language codes of the activity

    Raises:
        ApplicationValidationError: Naming the unsupported or duplicate languages
    """
    supported = {lang.lower() for lang in supported_languages}
    content_langs = [content.lang.lower() for content in contents]

    unsupported = [lang for lang in content_langs if lang not in supported]
    if unsupported:
        raise ApplicationValidationError(
            f"Contents contain unsupported languages: {', '.join(dict.fromkeys(unsupported))}",
            details={"unsupported_languages": list(dict.fromkeys(unsupported))},
        )

    seen: set[str] = set()
    duplicates: list[str] = []
    for lang in content_langs:
        if lang in seen and lang not in duplicates:
            duplicates.append(lang)
        seen.add(lang)
    if duplicates:
        raise ApplicationValidationError(
            f"Duplicate languages in contents: {', '.join(duplicates)}",
            details={"duplicate_languages": duplicates},
        )


async def ensure_slug_available(session: AsyncSession, slug: str) -> None:
    """
    Check that no activity uses the slug yet.

    Raises:
        DuplicateResourceError: If the slug is taken
    """
    if await activity_crud.exists_by_slug(session, slug):
        raise DuplicateResourceError(f'Activity with slug "{slug}" already exists')


async def create_activity(
    session: AsyncSession, activity_data: ActivityCreateRequest
) -> Activity:
    """
    Create an activity with its initial contents.

    Checks, in order: date order, slug uniqueness, content languages
    supported, no duplicate content language.

    Args:
        session: Async database session
        activity_data: Validated create request

    Returns:
        Created Activity with contents

    Raises:
        ApplicationValidationError: If a rule is violated
        DuplicateResourceError: If the slug is taken
    """
    validate_dates(activity_data.start_at, activity_data.end_at, activity_data.closed_at)
    await ensure_slug_available(session, activity_data.slug)
    validate_content_languages(
        activity_data.contents, activity_data.supported_languages
    )

    try:
        activity = await activity_crud.create(
            session=session,
            name=activity_data.name,
            slug=activity_data.slug,
            start_at=activity_data.start_at,
            end_at=activity_data.end_at,
            closed_at=activity_data.closed_at,
            supported_languages=activity_data.supported_languages,
            contents=[content.model_dump() for content in activity_data.contents],
        )
    except IntegrityError as e:
        # Another request took the slug between the check and the insert
        raise DuplicateResourceError(
            f'Activity with slug "{activity_data.slug}" already exists'
        ) from e

    logger.info(f"Created activity {activity.id} (slug '{activity.slug}')")
    return activity


async def get_activities(session: AsyncSession) -> list[Activity]:
    """
    Get all activities, newest first, without contents.

    Args:
        session: Async database session (read-only)

    Returns:
        List of Activity objects
    """
    return await activity_crud.get_all(session)


async def get_activity_by_id(session: AsyncSession, activity_id: uuid.UUID) -> Activity:
    """
    Get an activity with all of its contents, whatever their language (admin view).

    Raises:
        ResourceNotFoundError: If no activity has this id
    """
    activity = await activity_crud.get_by_id(session, activity_id)
    if activity is None:
        raise ResourceNotFoundError("Activity not found")
    return activity


def filter_supported_contents(
    supported_languages: list[str], contents: Iterable[Any]
) -> list[Any]:
    """Keep only the contents whose language is currently supported."""
    supported = set(supported_languages)
    return [content for content in contents if content.lang in supported]


async def get_public_activity_by_slug(
    session: AsyncSession, slug: str, lang: str | None = None
) -> dict:
    """
    Get the public projection of an activity.

    Contents are restricted to `lang` (case-insensitive) in the query when
    given, and always restricted to the activity's current supported
    languages: rows left behind after a language was dropped from
    supportedLanguages are never exposed.

    Args:
        session: Async database session (read-only)
        slug: Activity slug
        lang: Optional language code

    Returns:
        Dictionary with slug, schedule, supported languages and contents

    Raises:
        ResourceNotFoundError: If no activity has this slug
    """
    activity = await activity_crud.get_by_slug(
        session,
        slug.strip().lower(),
        lang=lang.strip().lower() if lang else None,
    )
    if activity is None:
        raise ResourceNotFoundError("Activity not found")

    contents = filter_supported_contents(
        activity.supported_languages, activity.contents
    )

    return {
        "slug": activity.slug,
        "start_at": activity.start_at,
        "end_at": activity.end_at,
        "closed_at": activity.closed_at,
        "supported_languages": activity.supported_languages,
        "contents": [
            {
                "lang": content.lang,
                "title": content.title,
                "description": content.description,
            }
            for content in contents
        ],
    }


async def update_activity(
    session: AsyncSession,
    activity_id: uuid.UUID,
    activity_data: ActivityUpdateRequest,
) -> Activity:
    """
    Partially update an activity and upsert its contents.

    Only fields present in the request are considered. Dates are re-validated
    when any of them is supplied, against the existing values for the ones
    that are not; sending closedAt as null clears the closure. The slug is
    re-checked only when it changes. Contents are re-validated against the
    supplied supportedLanguages, or the stored ones, and each is upserted by
    (activity, lang). Contents not mentioned are kept.

    Args:
        session: Async database session (transaction managed by API layer)
        activity_id: Activity UUID
        activity_data: Validated partial update

    Returns:
        Refreshed Activity with all contents

    Raises:
        ResourceNotFoundError: If no activity has this id
        ApplicationValidationError: If a rule is violated
        DuplicateResourceError: If the new slug is taken
    """
    activity = await get_activity_by_id(session, activity_id)
    supplied = activity_data.model_fields_set

    if supplied & {"start_at", "end_at", "closed_at"}:
        validate_dates(
            activity_data.start_at if "start_at" in supplied else activity.start_at,
            activity_data.end_at if "end_at" in supplied else activity.end_at,
            activity_data.closed_at if "closed_at" in supplied else activity.closed_at,
        )

    if "slug" in supplied and activity_data.slug != activity.slug:
        await ensure_slug_available(session, activity_data.slug)

    if activity_data.contents is not None:
        supported_languages = (
            activity_data.supported_languages
            if "supported_languages" in supplied
            else activity.supported_languages
        )
        validate_content_languages(activity_data.contents, supported_languages)

    values = {
        field: getattr(activity_data, field)
        for field in _UPDATABLE_FIELDS
        if field in supplied
    }
    if values:
        try:
            await activity_crud.update(session, activity, values)
        except IntegrityError as e:
            raise DuplicateResourceError(
                f'Activity with slug "{activity_data.slug}" already exists'
            ) from e

    for content in activity_data.contents or []:
        upsert_kwargs: dict[str, Any] = {}
        if "description" in content.model_fields_set:
            upsert_kwargs["description"] = content.description
        await activity_content_crud.upsert(
            session,
            activity_id=activity.id,
            lang=content.lang,
            title=content.title,
            **upsert_kwargs,
        )

    logger.info(f"Updated activity {activity.id} (fields: {sorted(supplied)})")
    return await get_activity_by_id(session, activity_id)

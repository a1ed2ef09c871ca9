"""Activity endpoints.

The slug lookup is public; everything else requires the `activity:manage`
permission.
"""

import uuid
from typing import Annotated

from fastapi import APIRouter, Depends, Path, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from cfp.api.common.security import require_permissions
from cfp.db.config import get_async_db, get_async_db_read_only
from cfp.schemas.activity import (
    ActivityCreateRequest,
    ActivityDetailResponse,
    ActivityListResponse,
    ActivityPublicResponse,
    ActivityResponse,
    ActivityUpdateRequest,
)
from cfp.schemas.error import ErrorResponse
from cfp.security.tokens import AuthUser
from cfp.services import activity

router = APIRouter(tags=["activities"])

MANAGE_PERMISSION = "activity:manage"

_AUTH_RESPONSES = {
    "401": {"model": ErrorResponse, "description": "Unauthorized - Invalid or missing token"},
    "403": {"model": ErrorResponse, "description": "Forbidden - Insufficient permissions"},
}


@router.get(
    "/activities/slug/{slug}",
    response_model=ActivityPublicResponse,
    status_code=status.HTTP_200_OK,
    summary="Get an activity by slug (public)",
    description="Public view of an activity. With `lang`, only the content in that language is returned. "
    "Contents in languages the activity no longer supports are never returned.\n\n"
    "**Response Codes:**\n"
    "- **200 OK:** Activity found\n"
    "- **404 Not Found:** No activity with this slug",
    operation_id="getActivityBySlug",
    responses={"404": {"model": ErrorResponse, "description": "Activity not found"}},
)
async def get_activity_by_slug(
    slug: Annotated[str, Path(max_length=64, description="Activity slug")],
    lang: Annotated[
        str | None, Query(max_length=15, description="Language code of the content")
    ] = None,
    session: AsyncSession = Depends(get_async_db_read_only),
) -> ActivityPublicResponse:
    result = await activity.get_public_activity_by_slug(session, slug, lang)
    return ActivityPublicResponse.model_validate(result)


@router.post(
    "/activities",
    response_model=ActivityDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create an activity",
    description="Create an activity with its initial multilingual contents.\n\n"
    "**Rules:**\n"
    "- `endAt` must be after `startAt`\n"
    "- `closedAt`, when given, must be before `startAt`\n"
    "- `slug` must be unique\n"
    "- every content language must be listed in `supportedLanguages`, at most once\n\n"
    "**Response Codes:**\n"
    "- **201 Created:** Activity created\n"
    "- **400 Bad Request:** Invalid input or rule violation\n"
    "- **409 Conflict:** Slug already in use",
    operation_id="createActivity",
    responses={
        "400": {"model": ErrorResponse, "description": "Bad Request"},
        "409": {"model": ErrorResponse, "description": "Conflict - slug already in use"},
        **_AUTH_RESPONSES,
    },
)
async def create_activity(
    activity_data: ActivityCreateRequest,
    session: AsyncSession = Depends(get_async_db),
    user: AuthUser = Depends(require_permissions(MANAGE_PERMISSION)),
) -> ActivityDetailResponse:
    created = await activity.create_activity(session, activity_data)
    return ActivityDetailResponse.model_validate(created)


@router.get(
    "/activities",
    response_model=ActivityListResponse,
    status_code=status.HTTP_200_OK,
    summary="List activities",
    description="All activities, newest first, without contents.",
    operation_id="getActivities",
    responses=_AUTH_RESPONSES,
)
async def get_activities(
    session: AsyncSession = Depends(get_async_db_read_only),
    user: AuthUser = Depends(require_permissions(MANAGE_PERMISSION)),
) -> ActivityListResponse:
    activities = await activity.get_activities(session)
    return ActivityListResponse(
        activities=[ActivityResponse.model_validate(item) for item in activities]
    )


@router.get(
    "/activities/{activity_id}",
    response_model=ActivityDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Get an activity by id",
    description="Administrator view of an activity, with contents in every language.",
    operation_id="getActivityById",
    responses={
        "400": {"model": ErrorResponse, "description": "Bad Request - id is not a UUID"},
        "404": {"model": ErrorResponse, "description": "Activity not found"},
        **_AUTH_RESPONSES,
    },
)
async def get_activity(
    activity_id: Annotated[uuid.UUID, Path(description="Activity id")],
    session: AsyncSession = Depends(get_async_db_read_only),
    user: AuthUser = Depends(require_permissions(MANAGE_PERMISSION)),
) -> ActivityDetailResponse:
    found = await activity.get_activity_by_id(session, activity_id)
    return ActivityDetailResponse.model_validate(found)


@router.patch(
    "/activities/{activity_id}",
    response_model=ActivityDetailResponse,
    status_code=status.HTTP_200_OK,
    summary="Update an activity",
    description="Partial update. Only the fields present in the body change; send `closedAt: null` "
    "to reopen an activity. Each item of `contents` is upserted by language, contents not "
    "mentioned are kept.\n\n"
    "**Response Codes:**\n"
    "- **200 OK:** Activity updated\n"
    "- **400 Bad Request:** Invalid input or rule violation\n"
    "- **404 Not Found:** Unknown activity\n"
    "- **409 Conflict:** Slug already in use",
    operation_id="updateActivity",
    responses={
        "400": {"model": ErrorResponse, "description": "Bad Request"},
        "404": {"model": ErrorResponse, "description": "Activity not found"},
        "409": {"model": ErrorResponse, "description": "Conflict - slug already in use"},
        **_AUTH_RESPONSES,
    },
)
async def update_activity(
    activity_id: Annotated[uuid.UUID, Path(description="Activity id")],
    activity_data: ActivityUpdateRequest,
    session: AsyncSession = Depends(get_async_db),
    user: AuthUser = Depends(require_permissions(MANAGE_PERMISSION)),
) -> ActivityDetailResponse:
    updated = await activity.update_activity(session, activity_id, activity_data)
    return ActivityDetailResponse.model_validate(updated)

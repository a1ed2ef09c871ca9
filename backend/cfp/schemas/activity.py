"""Pydantic schemas for Activity API requests and responses."""

from __future__ import annotations

import re
import uuid
from datetime import UTC, datetime
from typing import Annotated

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    Field,
    model_validator,
)

__all__ = [
    "ActivityContentRequest",
    "ActivityContentResponse",
    "ActivityCreateRequest",
    "ActivityDetailResponse",
    "ActivityListResponse",
    "ActivityPublicContentResponse",
    "ActivityPublicResponse",
    "ActivityResponse",
    "ActivityUpdateRequest",
    "SLUG_PATTERN",
]

SLUG_PATTERN = r"^[a-z0-9]+(?:-[a-z0-9]+)*$"

# Language tag: primary subtag (2-3 letters) followed by optional subtags,
# e.g. "en", "en-us", "zh-hant-tw". Checked after lowercasing.
LOCALE_PATTERN = re.compile(r"^[a-z]{2,3}(?:-[a-z0-9]{2,8})*$")


def normalize_token(v: object) -> object:
    """Trim and lowercase string input (slug, language codes)."""
    if isinstance(v, str):
        return v.strip().lower()
    return v


def normalize_token_list(v: object) -> object:
    """Trim and lowercase every string of a list input."""
    if isinstance(v, list):
        return [normalize_token(item) for item in v]
    return v


def to_utc(v: datetime | None) -> datetime | None:
    """Interpret naive datetimes as UTC and convert aware ones to UTC."""
    if v is None:
        return v
    if v.tzinfo is None:
        return v.replace(tzinfo=UTC)
    return v.astimezone(UTC)


def validate_locales(v: list[str] | None) -> list[str] | None:
    """Validate that every entry is a locale tag such as "en-us" or "zh-tw"."""
    if v is None:
        return v
    for code in v:
        if not LOCALE_PATTERN.match(code):
            raise ValueError(
                f"Each language code must be a valid locale (e.g., zh-TW, en-US), got '{code}'"
            )
    return v


UtcDatetime = Annotated[datetime, AfterValidator(to_utc)]
LowercaseToken = Annotated[str, BeforeValidator(normalize_token)]
LanguageList = Annotated[
    list[str],
    BeforeValidator(normalize_token_list),
    AfterValidator(validate_locales),
]


class ActivityContentRequest(BaseModel):
    """Content of an activity in one language.

    The language code is lowercased on input, so "zh-TW" and "zh-tw" are the
    same language.
    """

    model_config = ConfigDict(title="activity.ActivityContentRequest")

    lang: LowercaseToken = Field(
        ...,
        min_length=1,
        max_length=15,
        description="Language code (lowercased)",
        examples=["zh-TW"],
    )

    title: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Title in this language",
        examples=["Call for Proposals"],
    )

    description: str | None = Field(
        None,
        description="Free-text description in this language (optional)",
    )


class ActivityCreateRequest(BaseModel):
    """Activity request schema for creating an activity together with its contents.

    Validation Layer:
    - Syntax (lengths, slug pattern, locale tags, required fields) is checked here
    - Cross-field rules (date order, content languages, slug uniqueness) are
      checked by the service layer
    """

    model_config = ConfigDict(
        title="activity.ActivityCreateRequest",
        populate_by_name=True,  # Allow both snake_case and camelCase
    )

    name: str = Field(
        ...,
        min_length=1,
        max_length=255,
        description="Internal name of the activity",
        examples=["PyCon 2025 Call for Proposals"],
    )

    slug: LowercaseToken = Field(
        ...,
        min_length=3,
        max_length=64,
        pattern=SLUG_PATTERN,
        description="Public identifier: lowercase letters, numbers and hyphens (3-64 chars)",
        examples=["pycon-2025-cfp"],
    )

    start_at: UtcDatetime = Field(
        ...,
        alias="startAt",
        description="Start of the activity",
        examples=["2025-01-10T00:00:00Z"],
    )

    end_at: UtcDatetime = Field(
        ...,
        alias="endAt",
        description="End of the activity (must be after startAt)",
        examples=["2025-01-20T00:00:00Z"],
    )

    closed_at: UtcDatetime | None = Field(
        None,
        alias="closedAt",
        description="Manual closure timestamp (optional, must be before startAt)",
    )

    supported_languages: LanguageList = Field(
        ...,
        alias="supportedLanguages",
        min_length=1,
        description="List of supported language codes",
        examples=[["zh-tw", "en-us"]],
    )

    contents: list[ActivityContentRequest] = Field(
        ...,
        min_length=1,
        description="Contents, at most one per supported language",
    )


class ActivityUpdateRequest(BaseModel):
    """Partial update of an activity.

    Only supplied fields are applied. closedAt may be sent as null to clear
    the closure; null is rejected for every other field.
    """

    model_config = ConfigDict(
        title="activity.ActivityUpdateRequest",
        populate_by_name=True,
    )

    name: str | None = Field(None, min_length=1, max_length=255)

    slug: LowercaseToken | None = Field(
        None,
        min_length=3,
        max_length=64,
        pattern=SLUG_PATTERN,
    )

    start_at: UtcDatetime | None = Field(None, alias="startAt")
    end_at: UtcDatetime | None = Field(None, alias="endAt")
    closed_at: UtcDatetime | None = Field(None, alias="closedAt")

    supported_languages: LanguageList | None = Field(
        None, alias="supportedLanguages", min_length=1
    )

    contents: list[ActivityContentRequest] | None = Field(None)

    @model_validator(mode="after")
    def reject_null_fields(self) -> ActivityUpdateRequest:
        """Only closedAt can be explicitly set to null."""
        for name in self.model_fields_set:
            if name != "closed_at" and getattr(self, name) is None:
                alias = type(self).model_fields[name].alias or name
                raise ValueError(f"{alias} must not be null")
        return self


class ActivityContentResponse(BaseModel):
    """Content row as returned to administrators."""

    model_config = ConfigDict(
        title="activity.ActivityContentResponse",
        from_attributes=True,
    )

    id: uuid.UUID
    activity_id: uuid.UUID = Field(..., serialization_alias="activityId")
    lang: str
    title: str
    description: str | None = None


class ActivityResponse(BaseModel):
    """Activity without contents (list view)."""

    model_config = ConfigDict(
        title="activity.ActivityResponse",
        from_attributes=True,
    )

    id: uuid.UUID
    name: str
    slug: str
    start_at: datetime = Field(..., serialization_alias="startAt")
    end_at: datetime = Field(..., serialization_alias="endAt")
    closed_at: datetime | None = Field(None, serialization_alias="closedAt")
    supported_languages: list[str] = Field(
        ..., serialization_alias="supportedLanguages"
    )
    created_at: datetime = Field(..., serialization_alias="createdAt")
    updated_at: datetime = Field(..., serialization_alias="updatedAt")


class ActivityDetailResponse(ActivityResponse):
    """Activity with every content row, regardless of language."""

    model_config = ConfigDict(title="activity.ActivityDetailResponse")

    contents: list[ActivityContentResponse] = Field(default_factory=list)


class ActivityListResponse(BaseModel):
    """List of activities for GET responses."""

    model_config = ConfigDict(title="activity.ActivityListResponse")

    activities: list[ActivityResponse] = Field(..., description="List of activities")


class ActivityPublicContentResponse(BaseModel):
    """Content as exposed by the public slug lookup."""

    model_config = ConfigDict(title="activity.ActivityPublicContentResponse")

    lang: str
    title: str
    description: str | None = None


class ActivityPublicResponse(BaseModel):
    """Public projection of an activity, looked up by slug."""

    model_config = ConfigDict(title="activity.ActivityPublicResponse")

    slug: str
    start_at: datetime = Field(..., serialization_alias="startAt")
    end_at: datetime = Field(..., serialization_alias="endAt")
    closed_at: datetime | None = Field(None, serialization_alias="closedAt")
    supported_languages: list[str] = Field(
        ..., serialization_alias="supportedLanguages"
    )
    contents: list[ActivityPublicContentResponse]

"""Authentication schemas."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, ConfigDict, EmailStr, Field

__all__ = [
    "DevLoginRequest",
    "DevLoginResponse",
    "DevLoginUser",
    "MeResponse",
]


class DevLoginRequest(BaseModel):
    """Development sign-in request"""

    model_config = ConfigDict(title="auth.DevLoginRequest", str_strip_whitespace=True)

    email: EmailStr = Field(
        ...,
        description="Email of the member to sign in as",
        examples=["dev@example.com"],
    )


class DevLoginUser(BaseModel):
    """Member summary returned with a development token"""

    model_config = ConfigDict(title="auth.DevLoginUser")

    id: uuid.UUID
    email: str
    permissions: list[str]


class DevLoginResponse(BaseModel):
    """Development sign-in response"""

    model_config = ConfigDict(title="auth.DevLoginResponse")

    access_token: str
    user: DevLoginUser


class MeResponse(BaseModel):
    """Identity carried by the caller's session token"""

    model_config = ConfigDict(title="auth.MeResponse")

    id: str
    email: str | None = None
    permissions: list[str]
    token_version: int = Field(..., serialization_alias="tokenVersion")

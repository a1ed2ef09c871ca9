"""CRUD operations for CFP models."""

from cfp.crud import (
    activity,
    activity_content,
    member,
    role,
)

__all__ = [
    "activity",
    "activity_content",
    "member",
    "role",
]

"""Test fixtures and factories."""

from tests.fixtures.factories import (
    ActivityFactory,
    MemberFactory,
    RoleFactory,
)

__all__ = [
    "ActivityFactory",
    "MemberFactory",
    "RoleFactory",
]

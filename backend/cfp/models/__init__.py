"""Models package."""

from cfp.models.activity import Activity, ActivityContent
from cfp.models.member import Member, MemberLink, MemberProvider
from cfp.models.role import Permission, Role, role_members, role_permissions

__all__ = [
    "Activity",
    "ActivityContent",
    "Member",
    "MemberLink",
    "MemberProvider",
    "Permission",
    "Role",
    "role_members",
    "role_permissions",
]

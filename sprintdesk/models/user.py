"""User models"""
from enum import Enum
from pydantic import BaseModel


class UserRole(str, Enum):
    """Roles, most privileged first"""
    SUPER_ADMIN = "super-admin"
    ADMIN = "admin"
    MANAGER = "manager"
    MEMBER = "member"


# Roles allowed to view other users' achievements
ACHIEVEMENT_VIEWER_ROLES = frozenset({UserRole.SUPER_ADMIN, UserRole.ADMIN, UserRole.MANAGER})


class UserIdentity(BaseModel):
    """Subset of the user profile the tracker reads"""
    id: str
    name: str = ""
    department: str = ""
    position: str = ""
    role: UserRole = UserRole.MEMBER

    @property
    def is_super_admin(self) -> bool:
        return self.role == UserRole.SUPER_ADMIN

    @property
    def can_view_others(self) -> bool:
        return self.role in ACHIEVEMENT_VIEWER_ROLES

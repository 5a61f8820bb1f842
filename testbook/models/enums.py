"""
Status and classification values stored in string columns.
"""

from enum import Enum


class UserRole(str, Enum):
    STUDENT = "STUDENT"
    INSTRUCTOR = "INSTRUCTOR"
    ADMIN = "ADMIN"
    SUPER_ADMIN = "SUPER_ADMIN"


# Higher roles include everything a lower role may do
ROLE_HIERARCHY = {
    UserRole.STUDENT: 1,
    UserRole.INSTRUCTOR: 2,
    UserRole.ADMIN: 3,
    UserRole.SUPER_ADMIN: 4,
}


def has_minimum_role(role: str, required: UserRole) -> bool:
    try:
        level = ROLE_HIERARCHY[UserRole(role)]
    except ValueError:
        return False
    return level >= ROLE_HIERARCHY[required]


class UserStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    SUSPENDED = "SUSPENDED"
    PENDING_VERIFICATION = "PENDING_VERIFICATION"


class CourseLevel(str, Enum):
    BEGINNER = "BEGINNER"
    INTERMEDIATE = "INTERMEDIATE"
    ADVANCED = "ADVANCED"


class Language(str, Enum):
    ENGLISH = "ENGLISH"
    HINDI = "HINDI"


class LiveClassStatus(str, Enum):
    SCHEDULED = "SCHEDULED"
    LIVE = "LIVE"
    CANCELLED = "CANCELLED"
    COMPLETED = "COMPLETED"

"""
Dependency Injection

FastAPI dependencies for routes.
"""

from typing import Annotated, Optional

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from testbook.core.errors import AuthenticationError, PermissionError
from testbook.core.token import CurrentUserIdDep, OptionalUserIdDep
from testbook.infra.db import get_db
from testbook.models.enums import UserRole, has_minimum_role
from testbook.models.user import User

# Type aliases for common dependencies
SessionDep = Annotated[AsyncSession, Depends(get_db)]


async def get_current_user(user_id: CurrentUserIdDep, db: SessionDep) -> User:
    """Load the authenticated caller; a token for a deleted user is rejected"""
    user = await db.get(User, user_id)
    if user is None:
        raise AuthenticationError("Could not validate credentials")
    return user


async def get_optional_user(user_id: OptionalUserIdDep, db: SessionDep) -> Optional[User]:
    if user_id is None:
        return None
    return await db.get(User, user_id)


CurrentUserDep = Annotated[User, Depends(get_current_user)]
OptionalUserDep = Annotated[Optional[User], Depends(get_optional_user)]


def require_role(required: UserRole):
    """Build a dependency admitting callers whose role is at least `required`"""

    async def dependency(user: CurrentUserDep) -> User:
        if not has_minimum_role(user.role, required):
            raise PermissionError(f"Insufficient permissions. Required: {required.value}")
        return user

    return dependency


InstructorDep = Annotated[User, Depends(require_role(UserRole.INSTRUCTOR))]


def is_owner_or_admin(user: User, owner_id: str) -> bool:
    """Owners manage their own resources; admins manage everyone's"""
    return user.id == owner_id or has_minimum_role(user.role, UserRole.ADMIN)

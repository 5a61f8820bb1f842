"""
Account lookups, registration and credential checks.
"""

from typing import Optional
from uuid import uuid4

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from testbook.core.errors import ConflictError
from testbook.core.logging import get_logger
from testbook.core.security import get_password_hash, verify_password
from testbook.core.time import utcnow
from testbook.models.enums import UserRole, UserStatus
from testbook.models.user import User

logger = get_logger(__name__)


class AuthService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_email(self, email: str) -> Optional[User]:
        result = await self.db.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def create_user(
        self,
        name: str,
        email: str,
        password: str,
        phone: Optional[str] = None,
        role: UserRole = UserRole.STUDENT,
    ) -> User:
        """Create a user awaiting email verification"""
        if await self.get_user_by_email(email):
            raise ConflictError("A user with this email already exists")

        user = User(
            id=str(uuid4()),
            email=email.lower(),
            name=name,
            phone=phone,
            hashed_password=get_password_hash(password),
            role=role.value,
            status=UserStatus.PENDING_VERIFICATION.value,
            email_verified=False,
        )
        self.db.add(user)
        try:
            await self.db.commit()
        except IntegrityError:
            await self.db.rollback()
            raise ConflictError("A user with this email already exists")
        await self.db.refresh(user)
        logger.info("User registered", user_id=user.id)
        return user

    async def authenticate_user(self, email: str, password: str) -> Optional[User]:
        """
        Return the user when the password matches, None otherwise.
        Account status is left for the caller to judge.
        """
        user = await self.get_user_by_email(email)
        if not user or not user.hashed_password:
            return None
        if not verify_password(password, user.hashed_password):
            return None
        return user

    async def record_login(self, user: User) -> None:
        user.last_login_at = utcnow()
        await self.db.commit()
        await self.db.refresh(user)

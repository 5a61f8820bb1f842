from datetime import timedelta
from typing import Optional

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel, EmailStr, Field, field_validator, model_validator

from testbook.core.config import settings
from testbook.core.deps import SessionDep
from testbook.core.errors import AuthenticationError, PermissionError
from testbook.core.logging import get_logger
from testbook.core.rate_limit import RateLimiter
from testbook.core.token import create_access_token, create_email_verification_token
from testbook.models.enums import UserStatus
from testbook.schemas.common import DataResponse
from testbook.services.auth_service import AuthService

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)

# ============ Schemas ============

class SignInRequest(BaseModel):
    email: EmailStr
    password: str = Field(..., min_length=1)
    remember_me: bool = False

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()


class RegisterRequest(BaseModel):
    name: str = Field(..., min_length=2, max_length=128)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    confirm_password: str
    phone: Optional[str] = Field(None, max_length=32)
    terms_accepted: bool

    @field_validator("email")
    @classmethod
    def lower_email(cls, v: str) -> str:
        return v.lower()

    @model_validator(mode="after")
    def check_consistency(self):
        if self.password != self.confirm_password:
            raise ValueError("Passwords do not match")
        if not self.terms_accepted:
            raise ValueError("You must accept the Terms of Service")
        return self


class AuthUser(BaseModel):
    id: str
    name: str
    email: str
    avatar: Optional[str] = None
    role: str
    status: str
    email_verified: bool
    phone_verified: bool

    class Config:
        from_attributes = True


class SignInData(BaseModel):
    user: AuthUser
    remember_me: bool
    access_token: str
    token_type: str = "bearer"
    expires_in: int


class RegisteredUser(BaseModel):
    id: str
    name: str
    email: str
    requires_email_verification: bool = True


class RegisterData(BaseModel):
    user: RegisteredUser
    message: str
    verification_token: Optional[str] = None

# ============ Endpoints ============

@router.post(
    "/signin",
    response_model=DataResponse[SignInData],
    dependencies=[Depends(RateLimiter(requests=5, window_seconds=15 * 60))],
)
async def signin(data: SignInRequest, db: SessionDep):
    """
    Email/password sign-in.
    Suspended and unverified accounts are refused even with a correct password.
    """
    auth_service = AuthService(db)
    user = await auth_service.authenticate_user(data.email, data.password)
    if not user:
        raise AuthenticationError("Invalid email or password")

    if user.status == UserStatus.SUSPENDED.value:
        raise PermissionError("Account has been suspended")

    if user.status == UserStatus.PENDING_VERIFICATION.value:
        raise PermissionError("Please verify your email address before signing in")

    await auth_service.record_login(user)

    if data.remember_me:
        lifetime = timedelta(days=settings.remember_me_expire_days)
    else:
        lifetime = timedelta(minutes=settings.access_token_expire_minutes)
    access_token = create_access_token(data={"sub": user.id}, expires_delta=lifetime)

    logger.info("User signed in", user_id=user.id, remember_me=data.remember_me)
    return DataResponse(
        data=SignInData(
            user=AuthUser.model_validate(user),
            remember_me=data.remember_me,
            access_token=access_token,
            expires_in=int(lifetime.total_seconds()),
        )
    )


@router.post(
    "/register",
    response_model=DataResponse[RegisterData],
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(RateLimiter(requests=3, window_seconds=15 * 60))],
)
async def register(data: RegisterRequest, db: SessionDep):
    """
    General Sign-up.
    The account stays PENDING_VERIFICATION until the emailed token is confirmed.
    """
    user = await AuthService(db).create_user(
        name=data.name,
        email=data.email,
        password=data.password,
        phone=data.phone,
    )
    token = create_email_verification_token(user.id, user.email)

    # Mail delivery lives outside this service; the token is echoed in debug builds only
    return DataResponse(
        data=RegisterData(
            user=RegisteredUser(id=user.id, name=user.name, email=user.email),
            message="User registered successfully. Please check your email for verification.",
            verification_token=token if settings.debug else None,
        )
    )

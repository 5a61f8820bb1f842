from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from testbook.core.deps import SessionDep
from testbook.core.errors import NotFoundError, ValidationError
from testbook.core.logging import get_logger
from testbook.core.rate_limit import RateLimiter
from testbook.core.token import EMAIL_VERIFICATION, decode_token
from testbook.models.enums import UserStatus
from testbook.models.user import User
from testbook.schemas.common import DataResponse

router = APIRouter(prefix="/auth", tags=["auth"])
logger = get_logger(__name__)


class VerifyEmailRequest(BaseModel):
    token: str = Field(..., min_length=1)


class VerifiedUser(BaseModel):
    id: str
    name: str
    email: str
    email_verified: bool


class VerifyEmailData(BaseModel):
    message: str
    user: VerifiedUser


@router.post(
    "/verify-email",
    response_model=DataResponse[VerifyEmailData],
    dependencies=[Depends(RateLimiter(requests=10, window_seconds=15 * 60))],
)
async def verify_email(data: VerifyEmailRequest, db: SessionDep):
    """
    Confirm a user's email address from the signed verification token.
    """
    payload = decode_token(data.token)
    if not payload or payload.get("type") != EMAIL_VERIFICATION or not payload.get("user_id"):
        raise ValidationError("Invalid or expired verification token")

    user = await db.get(User, payload["user_id"])
    if not user:
        raise NotFoundError("User not found")

    if user.email != payload.get("email"):
        raise ValidationError("Invalid verification token")

    if user.email_verified:
        raise ValidationError("Email is already verified")

    user.email_verified = True
    if user.status == UserStatus.PENDING_VERIFICATION.value:
        user.status = UserStatus.ACTIVE.value
    await db.commit()

    logger.info("Email verified", user_id=user.id)
    return DataResponse(
        data=VerifyEmailData(
            message="Email verified successfully",
            user=VerifiedUser(id=user.id, name=user.name, email=user.email, email_verified=True),
        )
    )

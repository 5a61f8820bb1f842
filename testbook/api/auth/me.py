from fastapi import APIRouter
from pydantic import BaseModel

from testbook.api.auth.login import AuthUser
from testbook.core.deps import CurrentUserDep
from testbook.schemas.common import DataResponse

router = APIRouter(prefix="/auth", tags=["auth"])


class MeData(BaseModel):
    user: AuthUser


@router.get("/me", response_model=DataResponse[MeData])
async def me(current_user: CurrentUserDep):
    """Profile of the bearer token's owner"""
    return DataResponse(data=MeData(user=AuthUser.model_validate(current_user)))

from fastapi import APIRouter, Depends

from ..models.profile import MeRead, ProfileRead
from ..models.user import User, UserRead
from ..utils.auth import get_current_user

router = APIRouter()


# Get current user's information
@router.get("/me", response_model=MeRead)
async def get_me(current_user: User = Depends(get_current_user)):
    profile = current_user.profile
    return MeRead(
        **UserRead.model_validate(current_user).model_dump(),
        profile=ProfileRead.model_validate(profile) if profile else None,
    )

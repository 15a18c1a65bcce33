from fastapi import APIRouter, Depends

from curated.core.auth import get_current_user
from curated.domains.identity.entities import User
from curated.domains.identity.schemas import UserResponse

router = APIRouter(prefix="/users", tags=["users"])


@router.get("/me", response_model=UserResponse)
async def get_me(current_user: User = Depends(get_current_user)):
    """Данные текущего пользователя"""
    return UserResponse.model_validate(current_user)

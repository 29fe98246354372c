from __future__ import annotations

from fastapi import APIRouter, Depends

from app.core.deps import get_current_user
from app.models.users import UserAuth
from app.schemas.auth import UserMeResponse

router = APIRouter(tags=["users"])


@router.get("/me", response_model=UserMeResponse)
def me(current: UserAuth = Depends(get_current_user)) -> UserMeResponse:
    return UserMeResponse(
        id=current.id,
        email=current.email,
        display_name=current.display_name,
        is_guest=current.is_guest,
        is_active=current.is_active,
    )

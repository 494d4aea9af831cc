"""Current-user profile endpoints."""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_current_user
from app.database import get_db
from app.domains.user.service import UserService
from app.schemas.base import ResponseSchema
from app.schemas.user import UserResponse, UserUpdateRequest
from models.user import User

router = APIRouter(prefix=f"{settings.api_prefix}/users", tags=["users"])


@router.get("/me", response_model=ResponseSchema)
async def get_current_user_info(current_user: User = Depends(get_current_user)):
    """Get current authenticated user information.

    The user row is provisioned from the access token on first use.
    """
    return ResponseSchema(success=True, data=UserResponse.model_validate(current_user).model_dump())


@router.patch("/me", response_model=ResponseSchema)
async def update_current_user(
    update_data: UserUpdateRequest,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Update the display name or avatar of the current user."""
    user = await UserService(db).update_user(current_user.id, update_data)

    return ResponseSchema(
        success=True,
        message="Profile updated successfully",
        data=UserResponse.model_validate(user).model_dump(),
    )

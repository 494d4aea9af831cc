# app/domains/user/service.py
import logging
from typing import Optional
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import InternalServiceError
from app.schemas.user import UserUpdateRequest
from models import User

logger = logging.getLogger(__name__)


class UserService:
    def __init__(self, db: AsyncSession):
        self.db = db

    async def get_user_by_id(self, user_id: UUID) -> Optional[User]:
        """Get a user by ID."""
        result = await self.db.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_user_by_email(self, email: str) -> Optional[User]:
        """Get a user by email, ignoring case."""
        result = await self.db.execute(
            select(User).where(func.lower(User.email) == email.strip().lower())
        )
        return result.scalar_one_or_none()

    async def create_user(self, user_id: UUID, email: str, name: str = "") -> User:
        """Create a new user."""
        user = User(id=user_id, email=email, name=name)

        try:
            self.db.add(user)
            await self.db.commit()
            await self.db.refresh(user)
            return user
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to create user %s: %s", user_id, e)
            raise InternalServiceError("Failed to create user") from e

    async def get_or_create_user(self, user_id: UUID, token_payload: dict) -> User:
        """Get existing user or provision one from the token claims."""
        user = await self.get_user_by_id(user_id)
        if not user:
            metadata = token_payload.get("user_metadata") or {}
            email = token_payload.get("email") or f"{user_id}@users.invalid"
            name = metadata.get("name") or metadata.get("full_name") or email.split("@")[0]
            user = await self.create_user(user_id=user_id, email=email, name=name)
            logger.info("Provisioned user %s from token", user_id)
        return user

    async def update_user(self, user_id: UUID, user_data: UserUpdateRequest) -> Optional[User]:
        """Update the user's profile fields."""
        user = await self.get_user_by_id(user_id)
        if not user:
            return None

        try:
            for field, value in user_data.model_dump(exclude_unset=True).items():
                setattr(user, field, value)

            await self.db.commit()
            await self.db.refresh(user)
            return user
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update user %s: %s", user_id, e)
            raise InternalServiceError("Failed to update user") from e

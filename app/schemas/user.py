"""User-related Pydantic schemas for request/response validation."""

from typing import Optional
from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseModelSchema, BaseSchema


class UserSummary(BaseSchema):
    """Compact user representation embedded in tasks, comments and members."""

    id: UUID
    email: str
    name: str
    avatar_url: Optional[str] = None


class UserResponse(BaseModelSchema):
    """Schema for user response data."""

    email: str
    name: str
    avatar_url: Optional[str] = None
    role: str
    is_active: bool


class UserUpdateRequest(BaseSchema):
    """Schema for updating the current user's profile."""

    name: Optional[str] = Field(None, min_length=1, max_length=255, description="Display name")
    avatar_url: Optional[str] = Field(None, max_length=1024, description="Avatar image URL")

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: Optional[str]) -> Optional[str]:
        """Validate that the display name is not blank."""
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Name cannot be empty or only whitespace")
        return v

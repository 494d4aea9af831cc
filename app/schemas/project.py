"""Project and membership schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import EmailStr, Field, field_validator

from .base import BaseModelSchema, BaseSchema
from .user import UserSummary

PROJECT_TEMPLATE_PATTERN = "^(kanban|scrum)$"
PROJECT_VISIBILITY_PATTERN = "^(private|public)$"
MEMBER_ROLE_PATTERN = "^(manager|member)$"


class ProjectBase(BaseSchema):
    """Base project schema with common fields."""

    name: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    template: str = Field(default="kanban", pattern=PROJECT_TEMPLATE_PATTERN)
    visibility: str = Field(default="private", pattern=PROJECT_VISIBILITY_PATTERN)
    deadline: datetime | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        """Validate and clean the project name."""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Project name cannot be empty or only whitespace")
        return v


class ProjectCreate(ProjectBase):
    """Schema for creating a new project."""

    key: str | None = Field(None, min_length=1, max_length=10, pattern="^[A-Za-z0-9]+$")


class ProjectUpdate(BaseSchema):
    """Schema for updating a project."""

    name: str | None = Field(None, min_length=1, max_length=255)
    description: str | None = None
    template: str | None = Field(None, pattern=PROJECT_TEMPLATE_PATTERN)
    visibility: str | None = Field(None, pattern=PROJECT_VISIBILITY_PATTERN)
    deadline: datetime | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        """Validate and clean the project name."""
        if v is not None and isinstance(v, str):
            v = v.strip()
            if not v:
                raise ValueError("Project name cannot be empty or only whitespace")
        return v


class ProjectResponse(BaseModelSchema):
    """Schema for project response."""

    owner_id: UUID | None = None
    name: str
    key: str
    description: str | None = None
    template: str
    visibility: str
    deadline: datetime | None = None


class ProjectListResponse(BaseSchema):
    """Schema for project list response."""

    projects: list[ProjectResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool


class MemberAdd(BaseSchema):
    """Schema for adding a member by email."""

    email: EmailStr
    role: str = Field(default="member", pattern=MEMBER_ROLE_PATTERN)


class MemberResponse(BaseSchema):
    """Schema for a project member."""

    project_id: UUID
    user_id: UUID
    role: str
    joined_at: datetime | None = None
    user: UserSummary | None = None

"""Label schemas for request/response serialization."""

from uuid import UUID

from pydantic import Field, field_validator

from .base import BaseModelSchema, BaseSchema

COLOR_PATTERN = "^#[0-9A-Fa-f]{6}$"


class LabelCreate(BaseSchema):
    """Schema for creating a label."""

    name: str = Field(..., min_length=1, max_length=50)
    color: str = Field(..., pattern=COLOR_PATTERN)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Label name cannot be empty or only whitespace")
        return v


class LabelUpdate(BaseSchema):
    """Schema for updating a label."""

    name: str | None = Field(None, min_length=1, max_length=50)
    color: str | None = Field(None, pattern=COLOR_PATTERN)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Label name cannot be empty or only whitespace")
        return v


class LabelResponse(BaseModelSchema):
    """Schema for label response."""

    project_id: UUID
    name: str
    color: str

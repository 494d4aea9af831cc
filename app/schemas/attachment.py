"""Attachment metadata schemas.

Files are uploaded straight to object storage by the client; the API only
records where they live.
"""

from __future__ import annotations

from uuid import UUID

from pydantic import Field, field_validator

from app.core.config import settings

from .base import BaseModelSchema, BaseSchema

ALLOWED_ATTACHMENT_TYPES = frozenset(
    {
        "image/jpeg",
        "image/png",
        "image/gif",
        "image/webp",
        "application/pdf",
        "application/msword",
        "application/vnd.openxmlformats-officedocument.wordprocessingml.document",
        "application/vnd.ms-excel",
        "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
        "text/plain",
        "text/csv",
        "application/zip",
        "application/json",
    }
)


class AttachmentCreate(BaseSchema):
    """Metadata of a file already stored at ``url``."""

    name: str = Field(..., min_length=1, max_length=255)
    url: str = Field(..., max_length=2048, pattern=r"^https?://")
    type: str = Field(..., max_length=255, description="MIME type")
    file_size: int = Field(..., ge=0, le=settings.max_attachment_size)
    comment_id: UUID | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("File name cannot be empty or only whitespace")
        return v

    @field_validator("type")
    @classmethod
    def validate_type(cls, v: str) -> str:
        v = v.strip().lower()
        if v not in ALLOWED_ATTACHMENT_TYPES:
            raise ValueError(f"Unsupported file type: {v}")
        return v


class AttachmentResponse(BaseModelSchema):
    """Schema for attachment metadata."""

    task_id: UUID | None = None
    comment_id: UUID | None = None
    name: str
    url: str
    type: str
    file_size: int
    uploaded_by: UUID | None = None


class StorageUsage(BaseSchema):
    task_id: UUID
    total_bytes: int
    count: int

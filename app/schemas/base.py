"""Base schemas for the application."""

from datetime import datetime
from typing import Any, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict


class BaseSchema(BaseModel):
    """Base schema class with common configuration."""
    model_config = ConfigDict(from_attributes=True)


class BaseModelSchema(BaseSchema):
    """Base schema for database models."""
    id: UUID
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None


class ResponseSchema(BaseSchema):
    """Standard API response envelope."""
    success: bool = True
    message: Optional[str] = None
    data: Optional[Any] = None
    error: Optional[str] = None

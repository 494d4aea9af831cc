"""Notification schemas."""

from typing import Any, Optional
from uuid import UUID

from .base import BaseModelSchema, BaseSchema


class NotificationResponse(BaseModelSchema):
    """Schema for notification response."""

    user_id: UUID
    type: str
    title: str
    message: Optional[str] = None
    data: Optional[dict[str, Any]] = None
    is_read: bool


class NotificationListResponse(BaseSchema):
    """Paginated notifications."""

    notifications: list[NotificationResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool


class UnreadCountResponse(BaseSchema):
    count: int

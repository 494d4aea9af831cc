"""Notification API controller."""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_current_user, get_db, validate_token
from app.domains.notification.service import NotificationService
from app.schemas.base import ResponseSchema
from app.schemas.notification import NotificationListResponse, NotificationResponse
from app.shared.pagination import PaginationParams
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=f"{settings.api_prefix}/notifications",
    tags=["notifications"],
    dependencies=[Depends(validate_token)],
)


@router.get("", response_model=ResponseSchema)
async def get_notifications(
    unread_only: bool = Query(False),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the caller's notifications, newest first."""
    result = await NotificationService(db).get_notifications(
        current_user.id, PaginationParams(page=page, size=size), unread_only=unread_only
    )

    notifications = NotificationListResponse(
        notifications=[NotificationResponse.model_validate(n) for n in result["items"]],
        total=result["total"],
        page=result["page"],
        size=result["size"],
        has_next=result["has_next"],
        has_prev=result["has_prev"],
    )
    return ResponseSchema(success=True, data=notifications.model_dump())


@router.get("/unread-count", response_model=ResponseSchema)
async def get_unread_count(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    count = await NotificationService(db).get_unread_count(current_user.id)
    return ResponseSchema(success=True, data={"count": count})


@router.patch("/read-all", response_model=ResponseSchema)
async def mark_all_as_read(
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    updated = await NotificationService(db).mark_all_as_read(current_user.id)
    return ResponseSchema(
        success=True, message="All notifications marked as read", data={"updated": updated}
    )


@router.patch("/{notification_id}/read", response_model=ResponseSchema)
async def mark_as_read(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    notification = await NotificationService(db).mark_as_read(notification_id, current_user.id)
    return ResponseSchema(
        success=True,
        message="Notification marked as read",
        data=NotificationResponse.model_validate(notification).model_dump(),
    )


@router.delete("/{notification_id}", response_model=ResponseSchema)
async def delete_notification(
    notification_id: UUID,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    await NotificationService(db).delete_notification(notification_id, current_user.id)
    return ResponseSchema(success=True, message="Notification deleted")

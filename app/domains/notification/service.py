"""Notification service for in-app user notifications."""

import logging
from typing import Any, Dict, Iterable, List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import InternalServiceError, NotFoundError
from app.shared.pagination import PaginationParams, paginate
from models.notification import Notification

logger = logging.getLogger(__name__)

TASK_ASSIGNED = "task_assigned"


class NotificationService:
    """Service for storing and reading user notifications."""

    def __init__(self, db: AsyncSession):
        """Initialize notification service.

        Args:
            db: Async database session
        """
        self.db = db

    async def get_notifications(
        self, user_id: UUID, pagination: PaginationParams, unread_only: bool = False
    ) -> Dict[str, Any]:
        """Get the user's notifications, newest first."""
        stmt = select(Notification).where(Notification.user_id == user_id)
        if unread_only:
            stmt = stmt.where(Notification.is_read.is_(False))
        stmt = stmt.order_by(desc(Notification.created_at))

        return await paginate(self.db, stmt, pagination)

    async def get_unread_count(self, user_id: UUID) -> int:
        result = await self.db.execute(
            select(func.count(Notification.id)).where(
                Notification.user_id == user_id, Notification.is_read.is_(False)
            )
        )
        return result.scalar() or 0

    async def mark_as_read(self, notification_id: UUID, user_id: UUID) -> Notification:
        notification = await self._get_own(notification_id, user_id)

        try:
            notification.is_read = True
            await self.db.commit()
            return notification
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to mark notification %s as read: %s", notification_id, e)
            raise InternalServiceError("Failed to mark notification as read") from e

    async def mark_all_as_read(self, user_id: UUID) -> int:
        """Mark every unread notification of the user as read; returns how many changed."""
        try:
            result = await self.db.execute(
                select(Notification).where(
                    Notification.user_id == user_id, Notification.is_read.is_(False)
                )
            )
            unread = result.scalars().all()
            for notification in unread:
                notification.is_read = True
            await self.db.commit()
            return len(unread)
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to mark all notifications as read for %s: %s", user_id, e)
            raise InternalServiceError("Failed to mark all notifications as read") from e

    async def delete_notification(self, notification_id: UUID, user_id: UUID) -> bool:
        await self._get_own(notification_id, user_id)

        try:
            await self.db.execute(delete(Notification).where(Notification.id == notification_id))
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete notification %s: %s", notification_id, e)
            raise InternalServiceError("Failed to delete notification") from e

    async def notify_assignment(
        self,
        task: Any,
        recipient_ids: Iterable[UUID],
        actor_id: UUID,
        actor_name: Optional[str] = None,
    ) -> List[Notification]:
        """Record a ``task_assigned`` notification for each recipient except the actor.

        Notifications are a side effect of the assignment: failures are logged
        and an empty list is returned instead of failing the request.
        """
        recipients = [uid for uid in dict.fromkeys(recipient_ids) if uid != actor_id]
        if not recipients:
            return []

        task_id = task.id
        who = actor_name or "Someone"
        notifications = [
            Notification(
                user_id=user_id,
                type=TASK_ASSIGNED,
                title="New task assigned",
                message=f'{who} assigned you to "{task.title}"',
                data={
                    "task_id": str(task_id),
                    "project_id": str(task.project_id),
                    "task_number": task.task_number,
                    "assigned_by": str(actor_id),
                },
            )
            for user_id in recipients
        ]

        try:
            self.db.add_all(notifications)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to create assignment notifications for task %s: %s", task_id, e)
            return []

        return notifications

    async def _get_own(self, notification_id: UUID, user_id: UUID) -> Notification:
        result = await self.db.execute(
            select(Notification).where(
                Notification.id == notification_id, Notification.user_id == user_id
            )
        )
        notification = result.scalar_one_or_none()
        if not notification:
            raise NotFoundError("Notification not found", error_code="NOTIFICATION_NOT_FOUND")
        return notification

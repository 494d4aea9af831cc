"""Attachment metadata service."""

import logging
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import AppPermissionError, InternalServiceError, ValidationError
from app.exceptions.task import AttachmentNotFoundError, TaskNotFoundError
from app.schemas.attachment import AttachmentCreate
from models.attachment import Attachment
from models.comment import Comment
from models.task import Task

logger = logging.getLogger(__name__)


class AttachmentService:
    """Records, lists and removes the files attached to tasks."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_task_attachments(self, task_id: UUID) -> List[Attachment]:
        """Attachments of a task, newest first."""
        await self._get_live_task(task_id)
        result = await self.db.execute(
            select(Attachment)
            .where(Attachment.task_id == task_id)
            .order_by(desc(Attachment.created_at))
        )
        return list(result.scalars().all())

    async def get_attachment(self, attachment_id: UUID) -> Optional[Attachment]:
        result = await self.db.execute(select(Attachment).where(Attachment.id == attachment_id))
        return result.scalar_one_or_none()

    async def create_attachment(
        self, task_id: UUID, uploader_id: UUID, attachment_data: AttachmentCreate
    ) -> Attachment:
        """Record a file stored for a live task, optionally tied to one of its comments."""
        task = await self._get_live_task(task_id)

        if attachment_data.comment_id:
            result = await self.db.execute(
                select(Comment.id).where(
                    Comment.id == attachment_data.comment_id,
                    Comment.task_id == task.id,
                    Comment.deleted_at.is_(None),
                )
            )
            if result.scalar_one_or_none() is None:
                raise ValidationError("Comment does not belong to this task")

        attachment = Attachment(
            task_id=task.id,
            comment_id=attachment_data.comment_id,
            name=attachment_data.name,
            url=attachment_data.url,
            type=attachment_data.type,
            file_size=attachment_data.file_size,
            uploaded_by=uploader_id,
        )

        try:
            self.db.add(attachment)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to record attachment for task %s: %s", task_id, e)
            raise InternalServiceError("Failed to upload attachment") from e

        logger.info("Attachment %s recorded for task %s", attachment.id, task_id)
        return attachment

    async def delete_attachment(
        self, attachment_id: UUID, actor_id: UUID, can_moderate: bool = False
    ) -> Attachment:
        """Delete the record. Only the uploader or a project manager may do so."""
        attachment = await self.get_attachment(attachment_id)
        if not attachment:
            raise AttachmentNotFoundError()
        if attachment.uploaded_by != actor_id and not can_moderate:
            raise AppPermissionError("Not authorized to delete this attachment")

        try:
            await self.db.delete(attachment)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete attachment %s: %s", attachment_id, e)
            raise InternalServiceError("Failed to delete attachment") from e

        return attachment

    async def get_task_storage_usage(self, task_id: UUID) -> Dict[str, int]:
        await self._get_live_task(task_id)
        result = await self.db.execute(
            select(func.coalesce(func.sum(Attachment.file_size), 0), func.count(Attachment.id))
            .where(Attachment.task_id == task_id)
        )
        total_bytes, count = result.one()
        return {"total_bytes": int(total_bytes), "count": count}

    async def _get_live_task(self, task_id: UUID) -> Task:
        result = await self.db.execute(
            select(Task).where(Task.id == task_id, Task.deleted_at.is_(None))
        )
        task = result.scalar_one_or_none()
        if not task:
            raise TaskNotFoundError()
        return task

"""Label service layer."""

import logging
from typing import List, Optional
from uuid import UUID

from sqlalchemy import delete, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import InternalServiceError
from app.exceptions.project import DuplicateLabelError, LabelNotFoundError
from app.schemas.label import LabelCreate, LabelUpdate
from models.label import Label
from models.task import TaskLabel

logger = logging.getLogger(__name__)


class LabelService:
    """Service class for project labels. Names are unique per project, ignoring case."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_labels(self, project_id: UUID) -> List[Label]:
        result = await self.db.execute(
            select(Label).where(Label.project_id == project_id).order_by(Label.name)
        )
        return list(result.scalars().all())

    async def get_label(self, label_id: UUID) -> Optional[Label]:
        result = await self.db.execute(select(Label).where(Label.id == label_id))
        return result.scalar_one_or_none()

    async def create_label(self, project_id: UUID, label_data: LabelCreate) -> Label:
        if await self._name_taken(project_id, label_data.name):
            raise DuplicateLabelError()

        label = Label(project_id=project_id, name=label_data.name, color=label_data.color)
        try:
            self.db.add(label)
            await self.db.commit()
            await self.db.refresh(label)
            return label
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to create label in project %s: %s", project_id, e)
            raise InternalServiceError("Failed to create label") from e

    async def update_label(self, label_id: UUID, label_data: LabelUpdate) -> Label:
        label = await self.get_label(label_id)
        if not label:
            raise LabelNotFoundError()

        update_data = label_data.model_dump(exclude_unset=True, exclude_none=True)
        if "name" in update_data and await self._name_taken(
            label.project_id, update_data["name"], exclude_id=label.id
        ):
            raise DuplicateLabelError()

        try:
            for field, value in update_data.items():
                setattr(label, field, value)
            await self.db.commit()
            await self.db.refresh(label)
            return label
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update label %s: %s", label_id, e)
            raise InternalServiceError("Failed to update label") from e

    async def delete_label(self, label_id: UUID) -> bool:
        """Delete a label and detach it from every task."""
        label = await self.get_label(label_id)
        if not label:
            raise LabelNotFoundError()

        try:
            await self.db.execute(delete(TaskLabel).where(TaskLabel.label_id == label.id))
            await self.db.delete(label)
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete label %s: %s", label_id, e)
            raise InternalServiceError("Failed to delete label") from e

    async def _name_taken(
        self, project_id: UUID, name: str, exclude_id: Optional[UUID] = None
    ) -> bool:
        stmt = select(Label.id).where(
            Label.project_id == project_id, func.lower(Label.name) == name.lower()
        )
        if exclude_id:
            stmt = stmt.where(Label.id != exclude_id)
        result = await self.db.execute(stmt)
        return result.first() is not None

"""
Admin console service.

Platform-wide user management, statistics and project cleanup. Every query
here ignores project membership; the controller restricts callers to admins.
"""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import delete, desc, func, or_, select, update
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.exceptions.base import InternalServiceError, ValidationError
from app.exceptions.project import ProjectNotFoundError
from app.exceptions.user import UserNotFoundError
from app.schemas.admin import UserRole, UserStatus
from app.shared.pagination import PaginationParams, paginate
from app.shared.workflow import TaskStatus
from models.attachment import Attachment
from models.comment import Comment
from models.label import Label
from models.notification import Notification
from models.project import Project, ProjectMember
from models.sprint import Sprint
from models.task import Task, TaskAssignee, TaskLabel
from models.user import User

logger = logging.getLogger(__name__)


class AdminService:
    """Service class for admin console operations."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_users(
        self,
        search: Optional[str] = None,
        status: Optional[UserStatus] = None,
        role: Optional[UserRole] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Dict[str, Any]:
        """List all users, newest first, filtered by name/email, status and role."""
        query = select(User)

        if search:
            search_term = f"%{search}%"
            query = query.where(or_(User.email.ilike(search_term), User.name.ilike(search_term)))
        if status is not None:
            query = query.where(User.is_active.is_(status == UserStatus.ACTIVE))
        if role is not None:
            query = query.where(User.role == role.value)

        query = query.order_by(desc(User.created_at))
        return await paginate(self.db, query, pagination or PaginationParams())

    async def update_user_status(self, user_id: UUID, status: UserStatus, actor_id: UUID) -> User:
        """Suspend or reactivate an account."""
        if user_id == actor_id:
            raise ValidationError("You cannot change your own status")
        user = await self._get_user(user_id)
        user.is_active = status == UserStatus.ACTIVE

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update status of user %s: %s", user_id, e)
            raise InternalServiceError("Failed to update user status") from e

        logger.info("User %s marked %s by admin %s", user_id, status.value, actor_id)
        return user

    async def update_user_role(self, user_id: UUID, role: UserRole, actor_id: UUID) -> User:
        if user_id == actor_id:
            raise ValidationError("You cannot change your own role")
        user = await self._get_user(user_id)
        user.role = role.value

        try:
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update role of user %s: %s", user_id, e)
            raise InternalServiceError("Failed to update user role") from e

        logger.info("User %s given role %s by admin %s", user_id, role.value, actor_id)
        return user

    async def delete_user(self, user_id: UUID, actor_id: UUID) -> None:
        """
        Delete an account.

        Memberships, assignments and notifications of the user go with it.
        Authored tasks, comments, attachments and owned projects stay, with
        the author reference cleared.
        """
        if user_id == actor_id:
            raise ValidationError("You cannot delete your own account")
        await self._get_user(user_id)

        try:
            await self.db.execute(delete(ProjectMember).where(ProjectMember.user_id == user_id))
            await self.db.execute(delete(TaskAssignee).where(TaskAssignee.user_id == user_id))
            await self.db.execute(delete(Notification).where(Notification.user_id == user_id))
            await self.db.execute(
                update(TaskAssignee)
                .where(TaskAssignee.assigned_by == user_id)
                .values(assigned_by=None)
            )
            await self.db.execute(
                update(Task).where(Task.reporter_id == user_id).values(reporter_id=None)
            )
            await self.db.execute(
                update(Comment).where(Comment.author_id == user_id).values(author_id=None)
            )
            await self.db.execute(
                update(Attachment).where(Attachment.uploaded_by == user_id).values(uploaded_by=None)
            )
            await self.db.execute(
                update(Project).where(Project.owner_id == user_id).values(owner_id=None)
            )
            await self.db.execute(delete(User).where(User.id == user_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete user %s: %s", user_id, e)
            raise InternalServiceError("Failed to delete user") from e

        logger.info("User %s deleted by admin %s", user_id, actor_id)

    async def get_system_stats(self) -> Dict[str, int]:
        async def count(model, *criteria) -> int:
            result = await self.db.execute(select(func.count()).select_from(model).where(*criteria))
            return result.scalar() or 0

        return {
            "total_users": await count(User),
            "active_users": await count(User, User.is_active.is_(True)),
            "total_projects": await count(Project, Project.deleted_at.is_(None)),
            "total_tasks": await count(Task, Task.deleted_at.is_(None)),
            "completed_tasks": await count(
                Task, Task.deleted_at.is_(None), Task.status == TaskStatus.DONE.value
            ),
        }

    async def get_recent_activity(self, limit: int = 50) -> List[Dict[str, Any]]:
        """
        Newest created projects, sprints, tasks and comments, merged into one
        feed ordered by creation time.
        """
        sources = [
            (
                "project",
                Project.created_at,
                select(Project.id, Project.name, Project.id.label("project_id")),
            ),
            ("sprint", Sprint.created_at, select(Sprint.id, Sprint.name, Sprint.project_id)),
            ("task", Task.created_at, select(Task.id, Task.title, Task.project_id)),
            (
                "comment",
                Comment.created_at,
                select(Comment.id, Comment.content, Task.project_id).join(
                    Task, Comment.task_id == Task.id
                ),
            ),
        ]

        entries: List[Dict[str, Any]] = []
        for kind, created_at, query in sources:
            result = await self.db.execute(
                query.add_columns(created_at).order_by(desc(created_at)).limit(limit)
            )
            for entry_id, title, project_id, created in result.all():
                entries.append(
                    {
                        "type": kind,
                        "id": entry_id,
                        "title": title if len(title) <= 120 else title[:117] + "...",
                        "project_id": project_id,
                        "created_at": created,
                    }
                )

        entries.sort(key=lambda e: _aware(e["created_at"]), reverse=True)
        return entries[:limit]

    async def list_projects(
        self,
        search: Optional[str] = None,
        include_deleted: bool = False,
        pagination: Optional[PaginationParams] = None,
    ) -> Dict[str, Any]:
        """List every project on the platform, newest first."""
        query = select(Project)

        if not include_deleted:
            query = query.where(Project.deleted_at.is_(None))
        if search:
            search_term = f"%{search}%"
            query = query.where(
                or_(Project.name.ilike(search_term), Project.key.ilike(search_term))
            )

        query = query.order_by(desc(Project.created_at))
        return await paginate(self.db, query, pagination or PaginationParams())

    async def force_delete_project(self, project_id: UUID, actor_id: UUID) -> None:
        """Remove a project and everything in it, soft-deleted rows included."""
        result = await self.db.execute(select(Project).where(Project.id == project_id))
        if result.scalar_one_or_none() is None:
            raise ProjectNotFoundError()

        task_ids = select(Task.id).where(Task.project_id == project_id)
        comment_ids = select(Comment.id).where(Comment.task_id.in_(task_ids))

        try:
            await self.db.execute(
                delete(Attachment).where(
                    or_(Attachment.task_id.in_(task_ids), Attachment.comment_id.in_(comment_ids))
                )
            )
            await self.db.execute(delete(Comment).where(Comment.task_id.in_(task_ids)))
            await self.db.execute(delete(TaskAssignee).where(TaskAssignee.task_id.in_(task_ids)))
            await self.db.execute(delete(TaskLabel).where(TaskLabel.task_id.in_(task_ids)))
            await self.db.execute(
                update(Task)
                .where(Task.project_id == project_id)
                .values(parent_id=None, sprint_id=None)
            )
            await self.db.execute(delete(Task).where(Task.project_id == project_id))
            await self.db.execute(delete(Label).where(Label.project_id == project_id))
            await self.db.execute(delete(Sprint).where(Sprint.project_id == project_id))
            await self.db.execute(
                delete(ProjectMember).where(ProjectMember.project_id == project_id)
            )
            await self.db.execute(delete(Project).where(Project.id == project_id))
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to force delete project %s: %s", project_id, e)
            raise InternalServiceError("Failed to delete project") from e

        logger.info("Project %s force deleted by admin %s", project_id, actor_id)

    async def _get_user(self, user_id: UUID) -> User:
        result = await self.db.execute(select(User).where(User.id == user_id))
        user = result.scalar_one_or_none()
        if not user:
            raise UserNotFoundError()
        return user


def _aware(value: datetime) -> datetime:
    # SQLite hands back naive datetimes
    return value if value.tzinfo else value.replace(tzinfo=timezone.utc)

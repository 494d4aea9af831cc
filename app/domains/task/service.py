"""Task service layer with business logic."""

import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set
from uuid import UUID

from sqlalchemy import delete, desc, func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions.base import AppPermissionError, InternalServiceError, ValidationError
from app.exceptions.task import CommentNotFoundError, TaskNotFoundError
from app.schemas.task import TaskCreate, TaskFilter, TaskUpdate
from app.shared.pagination import PaginationParams, paginate
from models.attachment import Attachment
from models.comment import Comment
from models.label import Label
from models.sprint import Sprint
from models.task import Task, TaskAssignee, TaskLabel
from models.user import User

logger = logging.getLogger(__name__)

# Fields written straight onto the row by Update
SCALAR_FIELDS = (
    "title",
    "description",
    "type",
    "status",
    "priority",
    "story_points",
    "time_estimate",
    "time_spent",
    "due_date",
    "position_index",
    "sprint_id",
    "parent_id",
)


class TaskService:
    """Service class for the task lifecycle: creation, board moves, cascades and comments."""

    def __init__(self, db: AsyncSession):
        self.db = db

    # ------------------------------------------------------------------ reads

    async def get_task(self, task_id: UUID, include_deleted: bool = False) -> Optional[Task]:
        """Get a hydrated task, or None when it is missing or soft-deleted."""
        query = self._hydrated_query().where(Task.id == task_id)
        if not include_deleted:
            query = query.where(Task.deleted_at.is_(None))

        result = await self.db.execute(query)
        return result.scalar_one_or_none()

    async def list_project_tasks(
        self,
        project_id: UUID,
        filters: Optional[TaskFilter] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Dict[str, Any]:
        """List a project's live tasks in board order."""
        query = self._hydrated_query().where(
            Task.project_id == project_id, Task.deleted_at.is_(None)
        )

        if filters:
            if filters.status:
                query = query.where(Task.status == filters.status)
            if filters.priority:
                query = query.where(Task.priority == filters.priority)
            if filters.type:
                query = query.where(Task.type == filters.type)
            if filters.sprint_id:
                query = query.where(Task.sprint_id == filters.sprint_id)
            elif filters.backlog_only:
                query = query.where(Task.sprint_id.is_(None))
            if filters.parent_id:
                query = query.where(Task.parent_id == filters.parent_id)
            if filters.assignee_id:
                query = query.where(
                    Task.id.in_(
                        select(TaskAssignee.task_id).where(
                            TaskAssignee.user_id == filters.assignee_id
                        )
                    )
                )

        # NULL positions sort last on both backends
        query = query.order_by(
            Task.position_index.is_(None), Task.position_index, Task.task_number
        )

        if pagination:
            return await paginate(self.db, query, pagination)

        result = await self.db.execute(query)
        tasks = result.scalars().all()
        return {"items": tasks, "total": len(tasks)}

    async def list_deleted_tasks(self, project_id: UUID) -> List[Task]:
        """List the project's soft-deleted tasks, most recently deleted first."""
        query = (
            self._hydrated_query()
            .where(Task.project_id == project_id, Task.deleted_at.is_not(None))
            .order_by(desc(Task.deleted_at))
        )
        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_comment(self, comment_id: UUID) -> Optional[Comment]:
        """Get a live comment with its author."""
        result = await self.db.execute(
            select(Comment)
            .options(selectinload(Comment.author))
            .where(Comment.id == comment_id, Comment.deleted_at.is_(None))
        )
        return result.scalar_one_or_none()

    async def get_assignee_ids(self, task_id: UUID) -> set[UUID]:
        result = await self.db.execute(
            select(TaskAssignee.user_id).where(TaskAssignee.task_id == task_id)
        )
        return set(result.scalars().all())

    # -------------------------------------------------------------- mutations

    async def create_task(self, project_id: UUID, reporter_id: UUID, task_data: TaskCreate) -> Task:
        """Create a task with its initial assignees and labels.

        The task number is one past the highest number ever used in the
        project, deleted tasks included, so numbers are never reused.
        """
        title = (task_data.title or "").strip()
        if not title:
            raise ValidationError("Task title is required")

        if task_data.sprint_id:
            await self._validate_sprint(project_id, task_data.sprint_id)
        if task_data.parent_id:
            await self._validate_parent(project_id, task_data.parent_id)
        await self._validate_assignees(task_data.assignees)
        await self._validate_labels(project_id, task_data.labels)

        try:
            task = Task(
                project_id=project_id,
                reporter_id=reporter_id,
                task_number=await self._next_task_number(project_id),
                title=title,
                description=task_data.description,
                type=task_data.type,
                status=task_data.status,
                priority=task_data.priority,
                story_points=task_data.story_points,
                time_estimate=task_data.time_estimate,
                time_spent=task_data.time_spent,
                due_date=self._normalize_datetime(task_data.due_date),
                position_index=task_data.position_index,
                sprint_id=task_data.sprint_id,
                parent_id=task_data.parent_id,
            )
            self.db.add(task)
            await self.db.flush()

            self._add_assignees(task.id, task_data.assignees, reporter_id)
            self._add_labels(task.id, task_data.labels)

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to create task in project %s: %s", project_id, e)
            raise InternalServiceError("Failed to create task") from e

        return await self.get_task(task.id)

    async def update_task(self, task_id: UUID, task_data: TaskUpdate, updater_id: UUID) -> Task:
        """Update a task.

        Scalar fields present in the payload are written as given. A present
        ``assignees`` or ``labels`` list replaces the whole association set.
        """
        task = await self._get_live_task(task_id)
        update_data = task_data.model_dump(exclude_unset=True)

        if "title" in update_data:
            title = (update_data["title"] or "").strip()
            if not title:
                raise ValidationError("Task title is required")
            update_data["title"] = title
        if update_data.get("sprint_id"):
            await self._validate_sprint(task.project_id, update_data["sprint_id"])
        if update_data.get("parent_id"):
            if update_data["parent_id"] == task.id:
                raise ValidationError("A task cannot be its own parent")
            await self._validate_parent(task.project_id, update_data["parent_id"])
            await self._ensure_not_descendant(task.id, update_data["parent_id"])

        assignees = update_data.pop("assignees", None)
        labels = update_data.pop("labels", None)
        if assignees is not None:
            await self._validate_assignees(assignees)
        if labels is not None:
            await self._validate_labels(task.project_id, labels)

        try:
            for field in SCALAR_FIELDS:
                if field in update_data:
                    value = update_data[field]
                    if field == "due_date":
                        value = self._normalize_datetime(value)
                    setattr(task, field, value)

            if assignees is not None:
                await self.db.execute(delete(TaskAssignee).where(TaskAssignee.task_id == task.id))
                self._add_assignees(task.id, assignees, updater_id)

            if labels is not None:
                await self.db.execute(delete(TaskLabel).where(TaskLabel.task_id == task.id))
                self._add_labels(task.id, labels)

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update task %s: %s", task_id, e)
            raise InternalServiceError("Failed to update task") from e

        return await self.get_task(task_id)

    async def move_task(
        self, task_id: UUID, status: str, position_index: Optional[int] = None
    ) -> Task:
        """Move a task to any column, optionally at a given position."""
        task = await self._get_live_task(task_id)

        try:
            task.status = status
            if position_index is not None:
                task.position_index = position_index
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to move task %s: %s", task_id, e)
            raise InternalServiceError("Failed to move task") from e

        return await self.get_task(task_id)

    async def soft_delete_task(self, task_id: UUID) -> Task:
        """Mark a task and its direct children as deleted.

        Grandchildren are not touched; they stay reachable through the
        list filters until deleted on their own.
        """
        task = await self._get_live_task(task_id)
        now = datetime.now(timezone.utc)

        try:
            children = await self.db.execute(
                select(Task).where(Task.parent_id == task.id, Task.deleted_at.is_(None))
            )
            task.deleted_at = now
            for child in children.scalars().all():
                child.deleted_at = now
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete task %s: %s", task_id, e)
            raise InternalServiceError("Failed to delete task") from e

        return await self.get_task(task_id, include_deleted=True)

    async def restore_task(self, task_id: UUID) -> Task:
        """Clear the deletion marker on this task only."""
        task = await self._get_any_task(task_id)

        try:
            task.deleted_at = None
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to restore task %s: %s", task_id, e)
            raise InternalServiceError("Failed to restore task") from e

        return await self.get_task(task_id)

    async def permanently_delete_task(self, task_id: UUID) -> List[UUID]:
        """Remove a task and every descendant from storage.

        Descendants are purged before their parents. For each task its
        attachments, comments, assignee and label rows go before the task row.
        Everything happens in one transaction. Returns the purged ids.
        """
        task = await self._get_any_task(task_id)

        try:
            purged = await self._collect_subtree(task.id)
            for doomed_id in purged:
                await self._purge_one(doomed_id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to permanently delete task %s: %s", task_id, e)
            raise InternalServiceError("Failed to permanently delete task") from e

        return purged

    # --------------------------------------------------------------- comments

    async def add_comment(
        self, task_id: UUID, author_id: UUID, content: str, parent_id: Optional[UUID] = None
    ) -> Comment:
        task = await self._get_live_task(task_id)

        if parent_id:
            parent = await self.get_comment(parent_id)
            if not parent or parent.task_id != task.id:
                raise ValidationError("Parent comment does not belong to this task")

        comment = Comment(task_id=task.id, author_id=author_id, content=content, parent_id=parent_id)
        try:
            self.db.add(comment)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to add comment to task %s: %s", task_id, e)
            raise InternalServiceError("Failed to add comment") from e

        return await self.get_comment(comment.id)

    async def update_comment(self, comment_id: UUID, content: str, editor_id: UUID) -> Comment:
        """Edit a comment; only its author may do so."""
        comment = await self.get_comment(comment_id)
        if not comment:
            raise CommentNotFoundError()
        if comment.author_id != editor_id:
            raise AppPermissionError("Only the author can edit this comment")

        try:
            comment.content = content
            comment.is_edited = True
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update comment %s: %s", comment_id, e)
            raise InternalServiceError("Failed to update comment") from e

        return comment

    async def delete_comment(
        self, comment_id: UUID, actor_id: UUID, can_moderate: bool = False
    ) -> Comment:
        """Soft-delete a comment. Authors delete their own; moderators delete any."""
        comment = await self.get_comment(comment_id)
        if not comment:
            raise CommentNotFoundError()
        if comment.author_id != actor_id and not can_moderate:
            raise AppPermissionError("You can only delete your own comments")

        try:
            comment.deleted_at = datetime.now(timezone.utc)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete comment %s: %s", comment_id, e)
            raise InternalServiceError("Failed to delete comment") from e

        return comment

    # ---------------------------------------------------------------- helpers

    def _hydrated_query(self):
        return select(Task).options(
            selectinload(Task.reporter),
            selectinload(Task.assignee_links).selectinload(TaskAssignee.user),
            selectinload(Task.labels),
            selectinload(Task.comments).selectinload(Comment.author),
            selectinload(Task.attachments),
        ).execution_options(populate_existing=True)

    async def _get_any_task(self, task_id: UUID) -> Task:
        result = await self.db.execute(select(Task).where(Task.id == task_id))
        task = result.scalar_one_or_none()
        if not task:
            raise TaskNotFoundError()
        return task

    async def _get_live_task(self, task_id: UUID) -> Task:
        task = await self._get_any_task(task_id)
        if task.deleted_at is not None:
            raise TaskNotFoundError()
        return task

    async def _next_task_number(self, project_id: UUID) -> int:
        result = await self.db.execute(
            select(func.max(Task.task_number)).where(Task.project_id == project_id)
        )
        return (result.scalar() or 0) + 1

    async def _collect_subtree(self, root_id: UUID) -> List[UUID]:
        """Return the ids under ``root_id`` in post-order, root last."""
        ordered: List[UUID] = []
        visited: Set[UUID] = set()

        async def visit(task_id: UUID) -> None:
            if task_id in visited:
                return
            visited.add(task_id)
            result = await self.db.execute(select(Task.id).where(Task.parent_id == task_id))
            for child_id in result.scalars().all():
                await visit(child_id)
            ordered.append(task_id)

        await visit(root_id)
        return ordered

    async def _purge_one(self, task_id: UUID) -> None:
        comment_ids = select(Comment.id).where(Comment.task_id == task_id)
        await self.db.execute(
            delete(Attachment).where(
                (Attachment.task_id == task_id) | Attachment.comment_id.in_(comment_ids)
            )
        )
        await self.db.execute(delete(Comment).where(Comment.task_id == task_id))
        await self.db.execute(delete(TaskAssignee).where(TaskAssignee.task_id == task_id))
        await self.db.execute(delete(TaskLabel).where(TaskLabel.task_id == task_id))
        await self.db.execute(delete(Task).where(Task.id == task_id))

    def _add_assignees(self, task_id: UUID, user_ids: List[UUID], assigned_by: UUID) -> None:
        for user_id in dict.fromkeys(user_ids):
            self.db.add(TaskAssignee(task_id=task_id, user_id=user_id, assigned_by=assigned_by))

    def _add_labels(self, task_id: UUID, label_ids: List[UUID]) -> None:
        for label_id in dict.fromkeys(label_ids):
            self.db.add(TaskLabel(task_id=task_id, label_id=label_id))

    async def _validate_sprint(self, project_id: UUID, sprint_id: UUID) -> None:
        result = await self.db.execute(
            select(Sprint.id).where(Sprint.id == sprint_id, Sprint.project_id == project_id)
        )
        if result.scalar_one_or_none() is None:
            raise ValidationError("Sprint does not belong to this project")

    async def _validate_parent(self, project_id: UUID, parent_id: UUID) -> None:
        result = await self.db.execute(
            select(Task.id).where(
                Task.id == parent_id,
                Task.project_id == project_id,
                Task.deleted_at.is_(None),
            )
        )
        if result.scalar_one_or_none() is None:
            raise ValidationError("Parent task does not belong to this project")

    async def _ensure_not_descendant(self, task_id: UUID, parent_id: UUID) -> None:
        """Reject a parent that sits below ``task_id`` in the hierarchy."""
        seen: Set[UUID] = set()
        current: Optional[UUID] = parent_id
        while current is not None and current not in seen:
            if current == task_id:
                raise ValidationError("A task cannot be moved under its own subtask")
            seen.add(current)
            result = await self.db.execute(select(Task.parent_id).where(Task.id == current))
            current = result.scalar_one_or_none()

    async def _validate_assignees(self, user_ids: List[UUID]) -> None:
        wanted = set(user_ids)
        if not wanted:
            return
        result = await self.db.execute(select(User.id).where(User.id.in_(wanted)))
        missing = wanted - set(result.scalars().all())
        if missing:
            raise ValidationError(
                "Unknown assignees", details={"user_ids": sorted(str(uid) for uid in missing)}
            )

    async def _validate_labels(self, project_id: UUID, label_ids: List[UUID]) -> None:
        wanted = set(label_ids)
        if not wanted:
            return
        result = await self.db.execute(
            select(Label.id).where(Label.id.in_(wanted), Label.project_id == project_id)
        )
        missing = wanted - set(result.scalars().all())
        if missing:
            raise ValidationError(
                "Labels do not belong to this project",
                details={"label_ids": sorted(str(lid) for lid in missing)},
            )

    def _normalize_datetime(self, dt: Optional[datetime]) -> Optional[datetime]:
        """Store datetimes as UTC-aware values."""
        if dt is None:
            return None
        if dt.tzinfo is None:
            return dt.replace(tzinfo=timezone.utc)
        return dt.astimezone(timezone.utc)

"""Sprint service layer with business logic."""

import logging
from datetime import datetime, timezone
from typing import Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.exceptions.base import InternalServiceError, ValidationError
from app.exceptions.sprint import (
    SprintAlreadyActiveError,
    SprintAlreadyCompletedError,
    SprintNotFoundError,
)
from app.schemas.sprint import SprintCreate, SprintUpdate, as_utc
from app.shared.workflow import (
    SprintStatus,
    close_out_task,
    release_to_backlog,
    schedule_into_sprint,
    summarize_sprint,
)
from models.sprint import Sprint
from models.task import Task

logger = logging.getLogger(__name__)


class SprintService:
    """Service class for the sprint lifecycle.

    A project has at most one active sprint. Ending a sprint redistributes its
    tasks; deleting one returns every task to the backlog.
    """

    def __init__(self, db: AsyncSession):
        self.db = db

    async def list_project_sprints(
        self, project_id: UUID, status: Optional[str] = None
    ) -> List[Sprint]:
        """List a project's sprints, newest first."""
        query = select(Sprint).where(Sprint.project_id == project_id)
        if status:
            query = query.where(Sprint.status == status)
        query = query.order_by(desc(Sprint.created_at))

        result = await self.db.execute(query)
        return list(result.scalars().all())

    async def get_sprint(self, sprint_id: UUID) -> Optional[Sprint]:
        """Get a sprint with its live tasks."""
        result = await self.db.execute(
            self._with_tasks().where(Sprint.id == sprint_id)
        )
        return result.scalar_one_or_none()

    async def get_current_sprint(self, project_id: UUID) -> Optional[Sprint]:
        """Get the project's active sprint, if any."""
        result = await self.db.execute(
            self._with_tasks().where(
                Sprint.project_id == project_id,
                Sprint.status == SprintStatus.ACTIVE.value,
            )
        )
        return result.scalars().first()

    async def create_sprint(self, project_id: UUID, sprint_data: SprintCreate) -> Sprint:
        """Start a new active sprint and schedule the listed tasks into it.

        Raises:
            SprintAlreadyActiveError: another sprint of the project is active,
                either found up front or reported by the unique index when a
                concurrent create wins the race.
        """
        if await self._has_active_sprint(project_id):
            raise SprintAlreadyActiveError()

        tasks = await self._load_schedulable_tasks(project_id, sprint_data.task_ids)

        sprint = Sprint(
            project_id=project_id,
            name=sprint_data.name,
            goal=sprint_data.goal,
            start_date=sprint_data.start_date or datetime.now(timezone.utc),
            end_date=sprint_data.end_date,
            status=SprintStatus.ACTIVE.value,
        )

        try:
            self.db.add(sprint)
            await self.db.flush()

            for task in tasks:
                schedule_into_sprint(task, sprint.id)

            await self.db.commit()
        except IntegrityError as e:
            await self.db.rollback()
            logger.warning("Concurrent active sprint for project %s: %s", project_id, e)
            raise SprintAlreadyActiveError() from e
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to create sprint in project %s: %s", project_id, e)
            raise InternalServiceError("Failed to create sprint") from e

        logger.info("Sprint %s started in project %s with %d tasks", sprint.id, project_id, len(tasks))
        return await self.get_sprint(sprint.id)

    async def update_sprint(self, sprint_id: UUID, sprint_data: SprintUpdate) -> Sprint:
        """Update name, goal or dates. The status only changes through end_sprint."""
        sprint = await self._get_sprint_or_raise(sprint_id)
        update_data = sprint_data.model_dump(exclude_unset=True)

        start_date = update_data.get("start_date", sprint.start_date)
        end_date = update_data.get("end_date", sprint.end_date)
        if start_date and end_date and as_utc(end_date) < as_utc(start_date):
            raise ValidationError("end_date must not be before start_date")

        try:
            for field in ("name", "goal", "start_date", "end_date"):
                if field in update_data:
                    setattr(sprint, field, update_data[field])
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update sprint %s: %s", sprint_id, e)
            raise InternalServiceError("Failed to update sprint") from e

        return await self.get_sprint(sprint_id)

    async def end_sprint(self, sprint_id: UUID, move_incomplete_to_backlog: bool = True) -> Sprint:
        """Complete a sprint and redistribute its tasks.

        Done tasks always leave the sprint and stay done. Unfinished tasks go
        back to the backlog only when ``move_incomplete_to_backlog`` is set.
        """
        sprint = await self._get_sprint_or_raise(sprint_id)
        if sprint.status == SprintStatus.COMPLETED.value:
            raise SprintAlreadyCompletedError()

        try:
            sprint.status = SprintStatus.COMPLETED.value
            sprint.end_date = datetime.now(timezone.utc)

            moved = 0
            for task in await self._tasks_in_sprint(sprint.id):
                if close_out_task(task, move_incomplete_to_backlog):
                    moved += 1

            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to end sprint %s: %s", sprint_id, e)
            raise InternalServiceError("Failed to end sprint") from e

        logger.info("Sprint %s ended, %d tasks released", sprint_id, moved)
        return await self.get_sprint(sprint_id)

    async def add_tasks_to_sprint(self, sprint_id: UUID, task_ids: List[UUID]) -> Sprint:
        """Schedule tasks into a sprint; each one restarts at ``todo``."""
        sprint = await self._get_sprint_or_raise(sprint_id)
        if sprint.status == SprintStatus.COMPLETED.value:
            raise SprintAlreadyCompletedError("Cannot add tasks to a completed sprint")

        tasks = await self._load_schedulable_tasks(sprint.project_id, task_ids)

        try:
            for task in tasks:
                schedule_into_sprint(task, sprint.id)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to add tasks to sprint %s: %s", sprint_id, e)
            raise InternalServiceError("Failed to add tasks to sprint") from e

        return await self.get_sprint(sprint_id)

    async def remove_tasks_from_sprint(self, sprint_id: UUID, task_ids: List[UUID]) -> Sprint:
        """Send tasks back to the backlog. Ids outside this sprint are ignored."""
        sprint = await self._get_sprint_or_raise(sprint_id)

        try:
            result = await self.db.execute(
                select(Task).where(Task.id.in_(set(task_ids)), Task.sprint_id == sprint.id)
            )
            for task in result.scalars().all():
                release_to_backlog(task)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to remove tasks from sprint %s: %s", sprint_id, e)
            raise InternalServiceError("Failed to remove tasks from sprint") from e

        return await self.get_sprint(sprint_id)

    async def delete_sprint(self, sprint_id: UUID) -> bool:
        """Return every task of the sprint to the backlog, then delete the sprint."""
        sprint = await self._get_sprint_or_raise(sprint_id)

        try:
            for task in await self._tasks_in_sprint(sprint.id):
                release_to_backlog(task)
            await self.db.flush()
            await self.db.delete(sprint)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete sprint %s: %s", sprint_id, e)
            raise InternalServiceError("Failed to delete sprint") from e

        return True

    async def get_sprint_stats(self, sprint_id: UUID) -> Dict[str, int]:
        """Task counts per status and story point totals over the sprint's live tasks."""
        sprint = await self._get_sprint_or_raise(sprint_id)
        result = await self.db.execute(
            select(Task).where(Task.sprint_id == sprint.id, Task.deleted_at.is_(None))
        )
        return summarize_sprint(result.scalars().all())

    # ---------------------------------------------------------------- helpers

    def _with_tasks(self):
        return (
            select(Sprint)
            .options(selectinload(Sprint.tasks))
            .execution_options(populate_existing=True)
        )

    async def _get_sprint_or_raise(self, sprint_id: UUID) -> Sprint:
        result = await self.db.execute(select(Sprint).where(Sprint.id == sprint_id))
        sprint = result.scalar_one_or_none()
        if not sprint:
            raise SprintNotFoundError()
        return sprint

    async def _has_active_sprint(self, project_id: UUID) -> bool:
        result = await self.db.execute(
            select(Sprint.id).where(
                Sprint.project_id == project_id,
                Sprint.status == SprintStatus.ACTIVE.value,
            )
        )
        return result.first() is not None

    async def _tasks_in_sprint(self, sprint_id: UUID) -> List[Task]:
        """Every task pointing at the sprint, soft-deleted ones included."""
        result = await self.db.execute(select(Task).where(Task.sprint_id == sprint_id))
        return list(result.scalars().all())

    async def _load_schedulable_tasks(self, project_id: UUID, task_ids: List[UUID]) -> List[Task]:
        wanted = set(task_ids)
        if not wanted:
            return []

        result = await self.db.execute(
            select(Task).where(
                Task.id.in_(wanted),
                Task.project_id == project_id,
                Task.deleted_at.is_(None),
            )
        )
        tasks = list(result.scalars().all())

        missing = wanted - {task.id for task in tasks}
        if missing:
            raise ValidationError(
                "Some tasks do not exist in this project",
                details={"task_ids": sorted(str(tid) for tid in missing)},
            )
        return tasks

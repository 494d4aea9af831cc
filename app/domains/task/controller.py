"""Task API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import (
    ProjectAccess,
    get_current_user,
    get_db,
    get_emitter,
    require_comment_member,
    require_project_manager,
    require_project_member,
    require_task_member,
    validate_token,
)
from app.domains.notification.service import NotificationService
from app.domains.task.service import TaskService
from app.exceptions.task import TaskNotFoundError
from app.realtime.hub import RealtimeEmitter
from app.schemas.base import ResponseSchema
from app.schemas.notification import NotificationResponse
from app.schemas.task import (
    CommentCreate,
    CommentResponse,
    CommentUpdate,
    TaskCreate,
    TaskDetail,
    TaskFilter,
    TaskMove,
    TaskResponse,
    TaskUpdate,
)
from app.shared.pagination import PaginationParams
from app.shared.workflow import TASK_PRIORITY_PATTERN, TASK_STATUS_PATTERN, TASK_TYPE_PATTERN
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=settings.api_prefix,
    tags=["tasks"],
    dependencies=[Depends(validate_token)],  # Global token validation for all routes
)


async def notify_new_assignees(
    db: AsyncSession,
    emitter: RealtimeEmitter,
    task,
    previous_ids: set[UUID],
    actor: User,
) -> None:
    """Notify users who were not assigned before this change."""
    newly_assigned = [user.id for user in task.assignees if user.id not in previous_ids]
    if not newly_assigned:
        return

    notifications = await NotificationService(db).notify_assignment(
        task, newly_assigned, actor_id=actor.id, actor_name=actor.name
    )
    for notification in notifications:
        await emitter.emit_to_user(
            notification.user_id,
            "notification:new",
            NotificationResponse.model_validate(notification).model_dump(),
        )


@router.post("/projects/{project_id}/tasks", response_model=ResponseSchema, status_code=201)
async def create_task(
    project_id: UUID,
    task_data: TaskCreate,
    access: ProjectAccess = Depends(require_project_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Create a task in the project backlog (or directly in a sprint)."""
    actor = access.user
    actor_id = actor.id
    task = await TaskService(db).create_task(project_id, actor_id, task_data)
    data = TaskResponse.model_validate(task).model_dump()

    await notify_new_assignees(db, emitter, task, set(), actor)
    await emitter.emit_to_project(project_id, "task:created", data)

    return ResponseSchema(success=True, message="Task created successfully", data=data)


@router.get("/projects/{project_id}/tasks", response_model=ResponseSchema)
async def list_tasks(
    project_id: UUID,
    status: str | None = Query(None, pattern=TASK_STATUS_PATTERN),
    priority: str | None = Query(None, pattern=TASK_PRIORITY_PATTERN),
    type: str | None = Query(None, pattern=TASK_TYPE_PATTERN),
    sprint_id: UUID | None = Query(None),
    parent_id: UUID | None = Query(None),
    assignee_id: UUID | None = Query(None),
    backlog: bool = Query(False, description="Only tasks without a sprint"),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    _access: ProjectAccess = Depends(require_project_member),
    db: AsyncSession = Depends(get_db),
):
    """Get the project's tasks in board order with optional filters."""
    filters = TaskFilter(
        status=status,
        priority=priority,
        type=type,
        sprint_id=sprint_id,
        parent_id=parent_id,
        assignee_id=assignee_id,
        backlog_only=backlog,
    )
    result = await TaskService(db).list_project_tasks(
        project_id, filters=filters, pagination=PaginationParams(page=page, size=size)
    )

    return ResponseSchema(
        success=True,
        data={
            "tasks": [TaskResponse.model_validate(t).model_dump() for t in result["items"]],
            "total": result["total"],
            "page": result["page"],
            "size": result["size"],
            "has_next": result["has_next"],
            "has_prev": result["has_prev"],
        },
    )


@router.get("/projects/{project_id}/tasks/trash", response_model=ResponseSchema)
async def list_deleted_tasks(
    project_id: UUID,
    _access: ProjectAccess = Depends(require_project_manager),
    db: AsyncSession = Depends(get_db),
):
    """Soft-deleted tasks of the project, most recently deleted first."""
    tasks = await TaskService(db).list_deleted_tasks(project_id)
    return ResponseSchema(
        success=True,
        data=[TaskResponse.model_validate(task).model_dump() for task in tasks],
    )


@router.get("/tasks/{task_id}", response_model=ResponseSchema)
async def get_task(
    task_id: UUID,
    _access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
):
    """Get a task with its comments and attachments."""
    task = await TaskService(db).get_task(task_id)
    if not task:
        raise TaskNotFoundError()

    return ResponseSchema(success=True, data=TaskDetail.model_validate(task).model_dump())


@router.patch("/tasks/{task_id}", response_model=ResponseSchema)
async def update_task(
    task_id: UUID,
    task_data: TaskUpdate = Body(...),
    access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Update a task. ``assignees`` and ``labels`` replace the current sets."""
    actor = access.user
    actor_id = actor.id
    service = TaskService(db)
    previous_ids = await service.get_assignee_ids(task_id)

    task = await service.update_task(task_id, task_data, actor_id)
    data = TaskResponse.model_validate(task).model_dump()

    if task_data.assignees is not None:
        await notify_new_assignees(db, emitter, task, previous_ids, actor)
    await emitter.emit_to_project(access.project_id, "task:updated", data)

    return ResponseSchema(success=True, message="Task updated successfully", data=data)


@router.patch("/tasks/{task_id}/move", response_model=ResponseSchema)
async def move_task(
    task_id: UUID,
    move: TaskMove,
    access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Move a task to another column or position."""
    actor_id = access.user.id
    task = await TaskService(db).move_task(task_id, move.status, move.position_index)
    data = TaskResponse.model_validate(task).model_dump()

    await emitter.emit_to_project(
        access.project_id,
        "task:moved",
        {
            "task_id": task_id,
            "status": data["status"],
            "position_index": data["position_index"],
            "moved_by": actor_id,
        },
    )

    return ResponseSchema(success=True, message="Task moved successfully", data=data)


@router.delete("/tasks/{task_id}", response_model=ResponseSchema)
async def delete_task(
    task_id: UUID,
    access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Move a task (and its direct subtasks) to the trash."""
    actor_id = access.user.id
    await TaskService(db).soft_delete_task(task_id)
    await emitter.emit_to_project(
        access.project_id, "task:deleted", {"task_id": task_id, "deleted_by": actor_id}
    )

    return ResponseSchema(success=True, message="Task deleted successfully")


@router.post("/tasks/{task_id}/restore", response_model=ResponseSchema)
async def restore_task(
    task_id: UUID,
    access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Bring a task back from the trash."""
    task = await TaskService(db).restore_task(task_id)
    data = TaskResponse.model_validate(task).model_dump()
    await emitter.emit_to_project(access.project_id, "task:restored", data)

    return ResponseSchema(success=True, message="Task restored successfully", data=data)


@router.delete("/tasks/{task_id}/permanent", response_model=ResponseSchema)
async def permanently_delete_task(
    task_id: UUID,
    access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Remove a task and all of its subtasks for good."""
    purged = await TaskService(db).permanently_delete_task(task_id)
    await emitter.emit_to_project(
        access.project_id, "task:purged", {"task_id": task_id, "purged_ids": purged}
    )

    return ResponseSchema(
        success=True,
        message="Task permanently deleted",
        data={"purged_ids": purged},
    )


@router.post("/tasks/{task_id}/comments", response_model=ResponseSchema, status_code=201)
async def add_comment(
    task_id: UUID,
    comment_data: CommentCreate,
    access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    comment = await TaskService(db).add_comment(
        task_id, access.user.id, comment_data.content, comment_data.parent_id
    )
    data = CommentResponse.model_validate(comment).model_dump()
    await emitter.emit_to_project(
        access.project_id, "comment:added", {"task_id": task_id, "comment": data}
    )

    return ResponseSchema(success=True, message="Comment added successfully", data=data)


@router.patch("/comments/{comment_id}", response_model=ResponseSchema)
async def update_comment(
    comment_id: UUID,
    comment_data: CommentUpdate,
    access: ProjectAccess = Depends(require_comment_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    comment = await TaskService(db).update_comment(comment_id, comment_data.content, access.user.id)
    data = CommentResponse.model_validate(comment).model_dump()
    await emitter.emit_to_project(
        access.project_id, "comment:updated", {"task_id": data["task_id"], "comment": data}
    )

    return ResponseSchema(success=True, message="Comment updated successfully", data=data)


@router.delete("/comments/{comment_id}", response_model=ResponseSchema)
async def delete_comment(
    comment_id: UUID,
    access: ProjectAccess = Depends(require_comment_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    comment = await TaskService(db).delete_comment(
        comment_id, access.user.id, can_moderate=access.is_manager
    )
    await emitter.emit_to_project(
        access.project_id,
        "comment:deleted",
        {"task_id": comment.task_id, "comment_id": comment_id},
    )

    return ResponseSchema(success=True, message="Comment deleted successfully")

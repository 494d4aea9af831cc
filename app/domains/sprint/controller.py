"""Sprint API controller with FastAPI endpoints."""

import logging
from uuid import UUID

from fastapi import APIRouter, Body, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import (
    ProjectAccess,
    get_db,
    get_emitter,
    require_project_manager,
    require_project_member,
    require_sprint_manager,
    require_sprint_member,
    validate_token,
)
from app.domains.sprint.service import SprintService
from app.exceptions.sprint import SprintNotFoundError
from app.realtime.hub import RealtimeEmitter
from app.schemas.base import ResponseSchema
from app.schemas.sprint import (
    SprintCreate,
    SprintEnd,
    SprintResponse,
    SprintStats,
    SprintTaskIds,
    SprintUpdate,
    SprintWithTasks,
)
from app.shared.workflow import SPRINT_STATUS_PATTERN

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=settings.api_prefix,
    tags=["sprints"],
    dependencies=[Depends(validate_token)],
)


@router.post("/projects/{project_id}/sprints", response_model=ResponseSchema, status_code=201)
async def create_sprint(
    project_id: UUID,
    sprint_data: SprintCreate,
    _access: ProjectAccess = Depends(require_project_manager),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Start a new sprint. Fails with 409 while another sprint is active."""
    sprint = await SprintService(db).create_sprint(project_id, sprint_data)
    data = SprintWithTasks.model_validate(sprint).model_dump()
    await emitter.emit_to_project(project_id, "sprint:created", data)

    return ResponseSchema(success=True, message="Sprint created successfully", data=data)


@router.get("/projects/{project_id}/sprints", response_model=ResponseSchema)
async def list_sprints(
    project_id: UUID,
    status: str | None = Query(None, pattern=SPRINT_STATUS_PATTERN),
    _access: ProjectAccess = Depends(require_project_member),
    db: AsyncSession = Depends(get_db),
):
    sprints = await SprintService(db).list_project_sprints(project_id, status=status)
    return ResponseSchema(
        success=True,
        data=[SprintResponse.model_validate(sprint).model_dump() for sprint in sprints],
    )


@router.get("/projects/{project_id}/sprints/current", response_model=ResponseSchema)
async def get_current_sprint(
    project_id: UUID,
    _access: ProjectAccess = Depends(require_project_member),
    db: AsyncSession = Depends(get_db),
):
    """The active sprint, or ``data: null`` when none is running."""
    sprint = await SprintService(db).get_current_sprint(project_id)
    data = SprintWithTasks.model_validate(sprint).model_dump() if sprint else None
    return ResponseSchema(success=True, data=data)


@router.get("/sprints/{sprint_id}", response_model=ResponseSchema)
async def get_sprint(
    sprint_id: UUID,
    _access: ProjectAccess = Depends(require_sprint_member),
    db: AsyncSession = Depends(get_db),
):
    sprint = await SprintService(db).get_sprint(sprint_id)
    if not sprint:
        raise SprintNotFoundError()
    return ResponseSchema(success=True, data=SprintWithTasks.model_validate(sprint).model_dump())


@router.patch("/sprints/{sprint_id}", response_model=ResponseSchema)
async def update_sprint(
    sprint_id: UUID,
    sprint_data: SprintUpdate,
    access: ProjectAccess = Depends(require_sprint_manager),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    sprint = await SprintService(db).update_sprint(sprint_id, sprint_data)
    data = SprintWithTasks.model_validate(sprint).model_dump()
    await emitter.emit_to_project(access.project_id, "sprint:updated", data)

    return ResponseSchema(success=True, message="Sprint updated successfully", data=data)


@router.patch("/sprints/{sprint_id}/end", response_model=ResponseSchema)
async def end_sprint(
    sprint_id: UUID,
    options: SprintEnd | None = Body(None),
    access: ProjectAccess = Depends(require_sprint_manager),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Complete the sprint. Done tasks leave it; unfinished ones go to the backlog
    unless ``move_incomplete_to_backlog`` is false."""
    move_incomplete = options.move_incomplete_to_backlog if options else True
    sprint = await SprintService(db).end_sprint(sprint_id, move_incomplete_to_backlog=move_incomplete)
    data = SprintWithTasks.model_validate(sprint).model_dump()
    await emitter.emit_to_project(
        access.project_id,
        "sprint:ended",
        {"sprint": data, "move_incomplete_to_backlog": move_incomplete},
    )

    return ResponseSchema(success=True, message="Sprint ended successfully", data=data)


@router.post("/sprints/{sprint_id}/tasks", response_model=ResponseSchema)
async def add_tasks_to_sprint(
    sprint_id: UUID,
    payload: SprintTaskIds,
    access: ProjectAccess = Depends(require_sprint_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    sprint = await SprintService(db).add_tasks_to_sprint(sprint_id, payload.task_ids)
    data = SprintWithTasks.model_validate(sprint).model_dump()
    await emitter.emit_to_project(
        access.project_id,
        "sprint:tasks-added",
        {"sprint_id": sprint_id, "task_ids": payload.task_ids},
    )

    return ResponseSchema(success=True, message="Tasks added to sprint", data=data)


@router.delete("/sprints/{sprint_id}/tasks", response_model=ResponseSchema)
async def remove_tasks_from_sprint(
    sprint_id: UUID,
    payload: SprintTaskIds = Body(...),
    access: ProjectAccess = Depends(require_sprint_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    sprint = await SprintService(db).remove_tasks_from_sprint(sprint_id, payload.task_ids)
    data = SprintWithTasks.model_validate(sprint).model_dump()
    await emitter.emit_to_project(
        access.project_id,
        "sprint:tasks-removed",
        {"sprint_id": sprint_id, "task_ids": payload.task_ids},
    )

    return ResponseSchema(success=True, message="Tasks removed from sprint", data=data)


@router.delete("/sprints/{sprint_id}", response_model=ResponseSchema)
async def delete_sprint(
    sprint_id: UUID,
    access: ProjectAccess = Depends(require_sprint_manager),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Delete the sprint; all of its tasks return to the backlog."""
    await SprintService(db).delete_sprint(sprint_id)
    await emitter.emit_to_project(access.project_id, "sprint:deleted", {"sprint_id": sprint_id})

    return ResponseSchema(success=True, message="Sprint deleted successfully")


@router.get("/sprints/{sprint_id}/stats", response_model=ResponseSchema)
async def get_sprint_stats(
    sprint_id: UUID,
    _access: ProjectAccess = Depends(require_sprint_member),
    db: AsyncSession = Depends(get_db),
):
    stats = await SprintService(db).get_sprint_stats(sprint_id)
    return ResponseSchema(success=True, data=SprintStats(**stats).model_dump())

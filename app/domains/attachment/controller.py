"""Attachment API controller."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import (
    ProjectAccess,
    get_db,
    get_emitter,
    require_attachment_member,
    require_task_member,
    validate_token,
)
from app.domains.attachment.service import AttachmentService
from app.exceptions.task import AttachmentNotFoundError
from app.realtime.hub import RealtimeEmitter
from app.schemas.attachment import AttachmentCreate, AttachmentResponse, StorageUsage
from app.schemas.base import ResponseSchema

router = APIRouter(
    prefix=settings.api_prefix,
    tags=["attachments"],
    dependencies=[Depends(validate_token)],
)


@router.get("/tasks/{task_id}/attachments", response_model=ResponseSchema)
async def list_attachments(
    task_id: UUID,
    _access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
):
    attachments = await AttachmentService(db).list_task_attachments(task_id)
    return ResponseSchema(
        success=True,
        data=[AttachmentResponse.model_validate(a).model_dump() for a in attachments],
    )


@router.post("/tasks/{task_id}/attachments", response_model=ResponseSchema, status_code=201)
async def create_attachment(
    task_id: UUID,
    attachment_data: AttachmentCreate,
    access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Record a file the client has already put in object storage."""
    attachment = await AttachmentService(db).create_attachment(
        task_id, access.user.id, attachment_data
    )
    data = AttachmentResponse.model_validate(attachment).model_dump()
    await emitter.emit_to_project(
        access.project_id, "attachment:added", {"task_id": task_id, "attachment": data}
    )

    return ResponseSchema(success=True, message="Attachment uploaded successfully", data=data)


@router.get("/tasks/{task_id}/attachments/storage", response_model=ResponseSchema)
async def get_storage_usage(
    task_id: UUID,
    _access: ProjectAccess = Depends(require_task_member),
    db: AsyncSession = Depends(get_db),
):
    usage = await AttachmentService(db).get_task_storage_usage(task_id)
    return ResponseSchema(success=True, data=StorageUsage(task_id=task_id, **usage).model_dump())


@router.get("/attachments/{attachment_id}", response_model=ResponseSchema)
async def get_attachment(
    attachment_id: UUID,
    _access: ProjectAccess = Depends(require_attachment_member),
    db: AsyncSession = Depends(get_db),
):
    attachment = await AttachmentService(db).get_attachment(attachment_id)
    if not attachment:
        raise AttachmentNotFoundError()
    return ResponseSchema(
        success=True, data=AttachmentResponse.model_validate(attachment).model_dump()
    )


@router.delete("/attachments/{attachment_id}", response_model=ResponseSchema)
async def delete_attachment(
    attachment_id: UUID,
    access: ProjectAccess = Depends(require_attachment_member),
    db: AsyncSession = Depends(get_db),
    emitter: RealtimeEmitter = Depends(get_emitter),
):
    """Only the uploader or a project manager may delete an attachment."""
    attachment = await AttachmentService(db).delete_attachment(
        attachment_id, access.user.id, can_moderate=access.is_manager
    )
    await emitter.emit_to_project(
        access.project_id,
        "attachment:deleted",
        {"task_id": attachment.task_id, "attachment_id": attachment_id},
    )

    return ResponseSchema(success=True, message="Attachment deleted successfully")

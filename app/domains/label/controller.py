"""Label API controller."""

from uuid import UUID

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import (
    ProjectAccess,
    get_db,
    require_label_member,
    require_project_member,
    validate_token,
)
from app.domains.label.service import LabelService
from app.schemas.base import ResponseSchema
from app.schemas.label import LabelCreate, LabelResponse, LabelUpdate

router = APIRouter(
    prefix=settings.api_prefix,
    tags=["labels"],
    dependencies=[Depends(validate_token)],
)


@router.get("/projects/{project_id}/labels", response_model=ResponseSchema)
async def list_labels(
    project_id: UUID,
    _access: ProjectAccess = Depends(require_project_member),
    db: AsyncSession = Depends(get_db),
):
    labels = await LabelService(db).list_labels(project_id)
    return ResponseSchema(
        success=True, data=[LabelResponse.model_validate(label).model_dump() for label in labels]
    )


@router.post("/projects/{project_id}/labels", response_model=ResponseSchema, status_code=201)
async def create_label(
    project_id: UUID,
    label_data: LabelCreate,
    _access: ProjectAccess = Depends(require_project_member),
    db: AsyncSession = Depends(get_db),
):
    label = await LabelService(db).create_label(project_id, label_data)
    return ResponseSchema(
        success=True,
        message="Label created successfully",
        data=LabelResponse.model_validate(label).model_dump(),
    )


@router.patch("/labels/{label_id}", response_model=ResponseSchema)
async def update_label(
    label_id: UUID,
    label_data: LabelUpdate,
    _access: ProjectAccess = Depends(require_label_member),
    db: AsyncSession = Depends(get_db),
):
    label = await LabelService(db).update_label(label_id, label_data)
    return ResponseSchema(
        success=True,
        message="Label updated successfully",
        data=LabelResponse.model_validate(label).model_dump(),
    )


@router.delete("/labels/{label_id}", response_model=ResponseSchema)
async def delete_label(
    label_id: UUID,
    _access: ProjectAccess = Depends(require_label_member),
    db: AsyncSession = Depends(get_db),
):
    await LabelService(db).delete_label(label_id)
    return ResponseSchema(success=True, message="Label deleted successfully")

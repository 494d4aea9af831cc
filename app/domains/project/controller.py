"""Project API controller with FastAPI endpoints."""

import logging
from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import (
    ProjectAccess,
    get_current_user,
    get_db,
    require_project_manager,
    require_project_member,
    validate_token,
)
from app.domains.project.service import ProjectService
from app.exceptions.project import ProjectNotFoundError
from app.schemas.base import ResponseSchema
from app.schemas.project import (
    MemberAdd,
    MemberResponse,
    ProjectCreate,
    ProjectListResponse,
    ProjectResponse,
    ProjectUpdate,
)
from app.shared.pagination import PaginationParams
from models.user import User

logger = logging.getLogger(__name__)

router = APIRouter(
    prefix=f"{settings.api_prefix}/projects",
    tags=["projects"],
    dependencies=[Depends(validate_token)],  # Global token validation for all routes
)


@router.post("", response_model=ResponseSchema, status_code=201)
async def create_project(
    project_data: ProjectCreate,
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Create a new project with the caller as its manager."""
    service = ProjectService(db)
    project = await service.create_project(project_data=project_data, user_id=current_user.id)

    return ResponseSchema(
        success=True,
        message="Project created successfully",
        data=ProjectResponse.model_validate(project).model_dump(),
    )


@router.get("", response_model=ResponseSchema)
async def get_projects(
    search: Optional[str] = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
):
    """Get the projects the caller belongs to."""
    service = ProjectService(db)
    result = await service.get_projects_list(
        user_id=current_user.id, search=search, pagination=PaginationParams(page=page, size=size)
    )

    projects = ProjectListResponse(
        projects=[ProjectResponse.model_validate(p) for p in result["items"]],
        total=result["total"],
        page=result["page"],
        size=result["size"],
        has_next=result["has_next"],
        has_prev=result["has_prev"],
    )
    return ResponseSchema(success=True, data=projects.model_dump())


@router.get("/{project_id}", response_model=ResponseSchema)
async def get_project(
    project_id: UUID,
    _access: ProjectAccess = Depends(require_project_member),
    db: AsyncSession = Depends(get_db),
):
    project = await ProjectService(db).get_project(project_id)
    if not project:
        raise ProjectNotFoundError()

    return ResponseSchema(success=True, data=ProjectResponse.model_validate(project).model_dump())


@router.patch("/{project_id}", response_model=ResponseSchema)
async def update_project(
    project_id: UUID,
    project_data: ProjectUpdate,
    _access: ProjectAccess = Depends(require_project_manager),
    db: AsyncSession = Depends(get_db),
):
    project = await ProjectService(db).update_project(project_id, project_data)

    return ResponseSchema(
        success=True,
        message="Project updated successfully",
        data=ProjectResponse.model_validate(project).model_dump(),
    )


@router.delete("/{project_id}", response_model=ResponseSchema)
async def delete_project(
    project_id: UUID,
    _access: ProjectAccess = Depends(require_project_manager),
    db: AsyncSession = Depends(get_db),
):
    await ProjectService(db).delete_project(project_id)
    return ResponseSchema(success=True, message="Project deleted successfully")


@router.get("/{project_id}/members", response_model=ResponseSchema)
async def list_members(
    project_id: UUID,
    _access: ProjectAccess = Depends(require_project_member),
    db: AsyncSession = Depends(get_db),
):
    members = await ProjectService(db).list_members(project_id)
    return ResponseSchema(
        success=True,
        data=[MemberResponse.model_validate(member).model_dump() for member in members],
    )


@router.post("/{project_id}/members", response_model=ResponseSchema, status_code=201)
async def add_member(
    project_id: UUID,
    member_data: MemberAdd,
    _access: ProjectAccess = Depends(require_project_manager),
    db: AsyncSession = Depends(get_db),
):
    """Add a registered user to the project by email."""
    member = await ProjectService(db).add_member(project_id, member_data)

    return ResponseSchema(
        success=True,
        message="Member added successfully",
        data=MemberResponse.model_validate(member).model_dump(),
    )


@router.delete("/{project_id}/members/{user_id}", response_model=ResponseSchema)
async def remove_member(
    project_id: UUID,
    user_id: UUID,
    _access: ProjectAccess = Depends(require_project_manager),
    db: AsyncSession = Depends(get_db),
):
    await ProjectService(db).remove_member(project_id, user_id)
    return ResponseSchema(success=True, message="Member removed successfully")

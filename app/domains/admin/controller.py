"""Admin console API controller."""

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import get_db, require_admin, validate_token
from app.domains.admin.service import AdminService
from app.schemas.admin import (
    ActivityEntry,
    AdminProjectListResponse,
    AdminProjectResponse,
    AdminUserListResponse,
    SystemStats,
    UserRole,
    UserRoleUpdate,
    UserStatus,
    UserStatusUpdate,
)
from app.schemas.base import ResponseSchema
from app.schemas.user import UserResponse
from app.shared.pagination import PaginationParams
from models.user import User

router = APIRouter(
    prefix=f"{settings.api_prefix}/admin",
    tags=["admin"],
    dependencies=[Depends(validate_token)],
)


@router.get("/users", response_model=ResponseSchema)
async def list_users(
    search: Optional[str] = Query(None),
    status: Optional[UserStatus] = Query(None),
    role: Optional[UserRole] = Query(None),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """List every user on the platform."""
    result = await AdminService(db).list_users(
        search=search, status=status, role=role, pagination=PaginationParams(page=page, size=size)
    )

    users = AdminUserListResponse(
        users=[UserResponse.model_validate(u) for u in result["items"]],
        total=result["total"],
        page=result["page"],
        size=result["size"],
        has_next=result["has_next"],
        has_prev=result["has_prev"],
    )
    return ResponseSchema(success=True, data=users.model_dump())


@router.patch("/users/{user_id}/status", response_model=ResponseSchema)
async def update_user_status(
    user_id: UUID,
    status_data: UserStatusUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await AdminService(db).update_user_status(user_id, status_data.status, admin.id)
    return ResponseSchema(
        success=True,
        message="User status updated successfully",
        data=UserResponse.model_validate(user).model_dump(),
    )


@router.patch("/users/{user_id}/role", response_model=ResponseSchema)
async def update_user_role(
    user_id: UUID,
    role_data: UserRoleUpdate,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    user = await AdminService(db).update_user_role(user_id, role_data.role, admin.id)
    return ResponseSchema(
        success=True,
        message="User role updated successfully",
        data=UserResponse.model_validate(user).model_dump(),
    )


@router.delete("/users/{user_id}", response_model=ResponseSchema)
async def delete_user(
    user_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    await AdminService(db).delete_user(user_id, admin.id)
    return ResponseSchema(success=True, message="User deleted successfully")


@router.get("/stats", response_model=ResponseSchema)
async def get_stats(
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    stats = await AdminService(db).get_system_stats()
    return ResponseSchema(success=True, data=SystemStats(**stats).model_dump())


@router.get("/activity", response_model=ResponseSchema)
async def get_activity(
    limit: int = Query(50, ge=1, le=200),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Recently created projects, sprints, tasks and comments."""
    entries = await AdminService(db).get_recent_activity(limit=limit)
    return ResponseSchema(
        success=True, data=[ActivityEntry(**entry).model_dump() for entry in entries]
    )


@router.get("/projects", response_model=ResponseSchema)
async def list_projects(
    search: Optional[str] = Query(None),
    include_deleted: bool = Query(False),
    page: int = Query(1, ge=1),
    size: int = Query(settings.default_page_size, ge=1, le=settings.max_page_size),
    _admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    result = await AdminService(db).list_projects(
        search=search,
        include_deleted=include_deleted,
        pagination=PaginationParams(page=page, size=size),
    )

    projects = AdminProjectListResponse(
        projects=[AdminProjectResponse.model_validate(p) for p in result["items"]],
        total=result["total"],
        page=result["page"],
        size=result["size"],
        has_next=result["has_next"],
        has_prev=result["has_prev"],
    )
    return ResponseSchema(success=True, data=projects.model_dump())


@router.delete("/projects/{project_id}", response_model=ResponseSchema)
async def force_delete_project(
    project_id: UUID,
    admin: User = Depends(require_admin),
    db: AsyncSession = Depends(get_db),
):
    """Permanently remove a project and all of its content."""
    await AdminService(db).force_delete_project(project_id, admin.id)
    return ResponseSchema(success=True, message="Project deleted successfully")

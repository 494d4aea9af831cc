"""Admin console schemas."""

from datetime import datetime
from enum import Enum
from typing import List, Optional
from uuid import UUID

from .base import BaseSchema
from .project import ProjectResponse
from .user import UserResponse


class UserStatus(str, Enum):
    ACTIVE = "active"
    SUSPENDED = "suspended"


class UserRole(str, Enum):
    USER = "user"
    ADMIN = "admin"


class UserStatusUpdate(BaseSchema):
    status: UserStatus


class UserRoleUpdate(BaseSchema):
    role: UserRole


class AdminUserListResponse(BaseSchema):
    """Schema for the paginated user directory."""

    users: List[UserResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool


class AdminProjectResponse(ProjectResponse):
    deleted_at: Optional[datetime] = None


class AdminProjectListResponse(BaseSchema):
    projects: List[AdminProjectResponse]
    total: int
    page: int
    size: int
    has_next: bool
    has_prev: bool


class SystemStats(BaseSchema):
    """Platform-wide counters. Deleted projects and tasks are not counted."""

    total_users: int
    active_users: int
    total_projects: int
    total_tasks: int
    completed_tasks: int


class ActivityEntry(BaseSchema):
    """One item of the recent activity feed."""

    type: str
    id: UUID
    title: str
    project_id: Optional[UUID] = None
    created_at: datetime

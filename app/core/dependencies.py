# app/core/dependencies.py
import logging
from dataclasses import dataclass
from uuid import UUID

from fastapi import Depends, HTTPException, Path, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.security import TokenAuthenticator
from app.database import get_db
from app.domains.project.service import ProjectService
from app.domains.user.service import UserService
from app.exceptions.base import AppPermissionError
from app.exceptions.project import (
    LabelNotFoundError,
    ProjectAccessDeniedError,
    ProjectNotFoundError,
)
from app.exceptions.sprint import SprintNotFoundError
from app.exceptions.task import AttachmentNotFoundError, CommentNotFoundError, TaskNotFoundError
from app.realtime.hub import get_emitter  # noqa: F401
from models import Attachment, Comment, Label, Sprint, Task, User

logger = logging.getLogger(__name__)

security = HTTPBearer(auto_error=False)
auth = TokenAuthenticator()


async def validate_token(
    token: HTTPAuthorizationCredentials | None = Depends(security),
) -> dict:
    """Validate and decode the bearer JWT.

    Returns:
        dict: Decoded token payload

    Raises:
        HTTPException: If token is missing, invalid or expired
    """
    if not token or not token.credentials:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token is required",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return await auth.verify_token(token.credentials)
    except HTTPException as e:
        e.headers = {"WWW-Authenticate": "Bearer"}
        raise


def subject_to_user_id(payload: dict) -> UUID:
    """The ``sub`` claim is the user's primary key."""
    try:
        return UUID(str(payload.get("sub")))
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token payload - malformed user ID",
        ) from e


async def get_current_user(
    request: Request,
    payload: dict = Depends(validate_token),
    db: AsyncSession = Depends(get_db),
) -> User:
    """Get current authenticated user from JWT payload.

    Returns:
        User: Current authenticated user

    Raises:
        HTTPException: If the token subject is malformed or the user is inactive
    """
    user_id = subject_to_user_id(payload)

    # Get or create user in local database
    user = await UserService(db).get_or_create_user(user_id, payload)

    if not user.is_active:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="User account is inactive")

    # Add user info to request state for logging
    request.state.user_id = user.id
    return user


@dataclass
class ProjectAccess:
    """Outcome of a project access check, handed to the route."""

    project_id: UUID
    user: User
    role: str | None

    @property
    def is_manager(self) -> bool:
        return self.role in ("manager", "owner", "admin")


async def check_project_access(
    db: AsyncSession, user: User, project_id: UUID, require_manager: bool = False
) -> ProjectAccess:
    """Resolve the caller's role in a project.

    Admins pass every check. The project owner always counts as a manager.
    """
    service = ProjectService(db)
    project = await service.get_project(project_id)
    if not project:
        raise ProjectNotFoundError()

    if user.is_admin:
        return ProjectAccess(project_id=project.id, user=user, role="admin")

    if project.owner_id == user.id:
        role = "owner"
    else:
        membership = await service.get_membership(project.id, user.id)
        if not membership:
            raise ProjectAccessDeniedError("You are not a member of this project")
        role = membership.role

    access = ProjectAccess(project_id=project.id, user=user, role=role)
    if require_manager and not access.is_manager:
        raise ProjectAccessDeniedError("Manager access required for this action")
    return access


async def _project_of(db: AsyncSession, column, key_column, key: UUID, not_found: Exception) -> UUID:
    result = await db.execute(select(column).where(key_column == key))
    project_id = result.scalar_one_or_none()
    if project_id is None:
        raise not_found
    return project_id


async def require_project_member(
    project_id: UUID = Path(..., description="Project ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectAccess:
    return await check_project_access(db, current_user, project_id)


async def require_project_manager(
    project_id: UUID = Path(..., description="Project ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectAccess:
    return await check_project_access(db, current_user, project_id, require_manager=True)


async def require_task_member(
    task_id: UUID = Path(..., description="Task ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectAccess:
    """Membership check for routes addressing a task, deleted or not."""
    project_id = await _project_of(db, Task.project_id, Task.id, task_id, TaskNotFoundError())
    return await check_project_access(db, current_user, project_id)


async def require_sprint_member(
    sprint_id: UUID = Path(..., description="Sprint ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectAccess:
    project_id = await _project_of(
        db, Sprint.project_id, Sprint.id, sprint_id, SprintNotFoundError()
    )
    return await check_project_access(db, current_user, project_id)


async def require_sprint_manager(
    sprint_id: UUID = Path(..., description="Sprint ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectAccess:
    project_id = await _project_of(
        db, Sprint.project_id, Sprint.id, sprint_id, SprintNotFoundError()
    )
    return await check_project_access(db, current_user, project_id, require_manager=True)


async def require_comment_member(
    comment_id: UUID = Path(..., description="Comment ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectAccess:
    result = await db.execute(
        select(Task.project_id)
        .join(Comment, Comment.task_id == Task.id)
        .where(Comment.id == comment_id, Comment.deleted_at.is_(None))
    )
    project_id = result.scalar_one_or_none()
    if project_id is None:
        raise CommentNotFoundError()
    return await check_project_access(db, current_user, project_id)


async def require_label_member(
    label_id: UUID = Path(..., description="Label ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectAccess:
    project_id = await _project_of(db, Label.project_id, Label.id, label_id, LabelNotFoundError())
    return await check_project_access(db, current_user, project_id)


async def require_attachment_member(
    attachment_id: UUID = Path(..., description="Attachment ID"),
    current_user: User = Depends(get_current_user),
    db: AsyncSession = Depends(get_db),
) -> ProjectAccess:
    result = await db.execute(
        select(Task.project_id)
        .join(Attachment, Attachment.task_id == Task.id)
        .where(Attachment.id == attachment_id)
    )
    project_id = result.scalar_one_or_none()
    if project_id is None:
        raise AttachmentNotFoundError()
    return await check_project_access(db, current_user, project_id)


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
    """Gate for the admin console."""
    if not current_user.is_admin:
        raise AppPermissionError("Admin access required")
    return current_user

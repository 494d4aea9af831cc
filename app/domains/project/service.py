"""Project service layer with business logic."""

import logging
import re
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional
from uuid import UUID

from sqlalchemy import desc, or_, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from app.domains.user.service import UserService
from app.exceptions.base import InternalServiceError, NotFoundError, ValidationError
from app.exceptions.project import MemberAlreadyExistsError, ProjectNotFoundError
from app.schemas.project import MemberAdd, ProjectCreate, ProjectUpdate
from app.shared.pagination import PaginationParams, paginate
from models.project import Project, ProjectMember

logger = logging.getLogger(__name__)


def derive_project_key(name: str) -> str:
    """Build a short board key from a project name, e.g. "Mobile App" -> "MA"."""
    words = re.findall(r"[A-Za-z0-9]+", name)
    if not words:
        return "PRJ"
    if len(words) == 1:
        return words[0][:4].upper()
    return "".join(word[0] for word in words)[:10].upper()


class ProjectService:
    """Service class for projects and their membership."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def create_project(self, project_data: ProjectCreate, user_id: UUID) -> Project:
        """Create a new project; the creator becomes its manager."""
        project = Project(
            owner_id=user_id,
            name=project_data.name,
            key=(project_data.key or derive_project_key(project_data.name)).upper(),
            description=project_data.description,
            template=project_data.template,
            visibility=project_data.visibility,
            deadline=project_data.deadline,
        )

        try:
            self.db.add(project)
            await self.db.flush()
            self.db.add(ProjectMember(project_id=project.id, user_id=user_id, role="manager"))
            await self.db.commit()
            await self.db.refresh(project)
            return project
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to create project for user %s: %s", user_id, e)
            raise InternalServiceError("Failed to create project") from e

    async def get_project(self, project_id: UUID) -> Optional[Project]:
        """Get a live project by ID."""
        stmt = select(Project).where(Project.id == project_id, Project.deleted_at.is_(None))
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def get_projects_list(
        self,
        user_id: UUID,
        search: Optional[str] = None,
        pagination: Optional[PaginationParams] = None,
    ) -> Dict[str, Any]:
        """Get the projects the user is a member of."""
        stmt = select(Project).where(
            Project.deleted_at.is_(None),
            Project.id.in_(select(ProjectMember.project_id).where(ProjectMember.user_id == user_id)),
        )

        if search:
            search_term = f"%{search}%"
            stmt = stmt.where(
                or_(Project.name.ilike(search_term), Project.description.ilike(search_term))
            )

        stmt = stmt.order_by(desc(Project.updated_at))

        return await paginate(self.db, stmt, pagination or PaginationParams())

    async def update_project(self, project_id: UUID, project_data: ProjectUpdate) -> Project:
        """Update a project."""
        project = await self.get_project(project_id)
        if not project:
            raise ProjectNotFoundError()

        try:
            for field, value in project_data.model_dump(exclude_unset=True).items():
                setattr(project, field, value)
            await self.db.commit()
            await self.db.refresh(project)
            return project
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to update project %s: %s", project_id, e)
            raise InternalServiceError("Failed to update project") from e

    async def delete_project(self, project_id: UUID) -> bool:
        """Soft-delete a project. Its sprints and tasks stay in storage."""
        project = await self.get_project(project_id)
        if not project:
            raise ProjectNotFoundError()

        try:
            project.deleted_at = datetime.now(timezone.utc)
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to delete project %s: %s", project_id, e)
            raise InternalServiceError("Failed to delete project") from e

    # ------------------------------------------------------------- membership

    async def get_membership(self, project_id: UUID, user_id: UUID) -> Optional[ProjectMember]:
        stmt = select(ProjectMember).where(
            ProjectMember.project_id == project_id, ProjectMember.user_id == user_id
        )
        result = await self.db.execute(stmt)
        return result.scalar_one_or_none()

    async def list_members(self, project_id: UUID) -> List[ProjectMember]:
        stmt = (
            select(ProjectMember)
            .options(selectinload(ProjectMember.user))
            .where(ProjectMember.project_id == project_id)
            .order_by(ProjectMember.joined_at)
        )
        result = await self.db.execute(stmt)
        return list(result.scalars().all())

    async def add_member(self, project_id: UUID, member_data: MemberAdd) -> ProjectMember:
        """Add an existing user, found by email, to the project."""
        user = await UserService(self.db).get_user_by_email(str(member_data.email))
        if not user:
            raise NotFoundError("No user with this email", error_code="USER_NOT_FOUND")

        if await self.get_membership(project_id, user.id):
            raise MemberAlreadyExistsError()

        member = ProjectMember(project_id=project_id, user_id=user.id, role=member_data.role)
        try:
            self.db.add(member)
            await self.db.commit()
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to add member to project %s: %s", project_id, e)
            raise InternalServiceError("Failed to add member") from e

        return await self._get_member_with_user(project_id, user.id)

    async def remove_member(self, project_id: UUID, user_id: UUID) -> bool:
        project = await self.get_project(project_id)
        if not project:
            raise ProjectNotFoundError()
        if project.owner_id == user_id:
            raise ValidationError("The project owner cannot be removed")

        member = await self.get_membership(project_id, user_id)
        if not member:
            raise NotFoundError("Member not found", error_code="MEMBER_NOT_FOUND")

        try:
            await self.db.delete(member)
            await self.db.commit()
            return True
        except SQLAlchemyError as e:
            await self.db.rollback()
            logger.error("Failed to remove member %s from project %s: %s", user_id, project_id, e)
            raise InternalServiceError("Failed to remove member") from e

    async def _get_member_with_user(self, project_id: UUID, user_id: UUID) -> ProjectMember:
        stmt = (
            select(ProjectMember)
            .options(selectinload(ProjectMember.user))
            .where(ProjectMember.project_id == project_id, ProjectMember.user_id == user_id)
            .execution_options(populate_existing=True)
        )
        result = await self.db.execute(stmt)
        return result.scalar_one()

"""
Project and membership models.

A project owns sprints, tasks and labels. Membership rows carry the per-project
role (``manager`` or ``member``) used by the access checks.
"""

from sqlalchemy import Column, DateTime, ForeignKey, String, Text
from sqlalchemy.orm import relationship

from .base import UUID, Base, BaseModel, utcnow


class Project(BaseModel):
    """
    Represents a project entity in the application.
    """

    __tablename__ = "projects"

    owner_id = Column(UUID(), ForeignKey("users.id"))
    name = Column(String(255), nullable=False)
    key = Column(String(10), nullable=False)
    description = Column(Text)
    template = Column(String(20), nullable=False, default="kanban")  # kanban, scrum
    visibility = Column(String(20), nullable=False, default="private")  # private, public
    deadline = Column(DateTime(timezone=True))
    deleted_at = Column(DateTime(timezone=True))

    # Relationships
    owner = relationship("User")
    members = relationship("ProjectMember", back_populates="project")
    sprints = relationship("Sprint", back_populates="project")
    labels = relationship("Label", back_populates="project")


class ProjectMember(Base):
    """Association between a user and a project with a role."""

    __tablename__ = "project_members"

    project_id = Column(UUID(), ForeignKey("projects.id"), primary_key=True)
    user_id = Column(UUID(), ForeignKey("users.id"), primary_key=True)
    role = Column(String(20), nullable=False, default="member")  # manager, member
    joined_at = Column(DateTime(timezone=True), default=utcnow)

    project = relationship("Project", back_populates="members")
    user = relationship("User", back_populates="memberships")

    @property
    def is_manager(self) -> bool:
        return self.role == "manager"

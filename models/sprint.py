"""
Sprint model.

A sprint is a time-boxed grouping of tasks. Only ``active`` and ``completed``
are persisted; the partial unique index below allows at most one active sprint
per project at the storage level, so concurrent creates cannot both succeed.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import relationship

from .base import UUID, BaseModel


class Sprint(BaseModel):
    __tablename__ = "sprints"
    __table_args__ = (
        Index(
            "uq_sprints_one_active_per_project",
            "project_id",
            unique=True,
            postgresql_where=text("status = 'active'"),
            sqlite_where=text("status = 'active'"),
        ),
    )

    project_id = Column(UUID(), ForeignKey("projects.id"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    goal = Column(Text)
    start_date = Column(DateTime(timezone=True))
    end_date = Column(DateTime(timezone=True))
    status = Column(String(20), nullable=False, default="active")  # active, completed

    # Relationships
    project = relationship("Project", back_populates="sprints")
    tasks = relationship(
        "Task",
        primaryjoin="and_(Sprint.id == foreign(Task.sprint_id), Task.deleted_at.is_(None))",
        order_by="Task.task_number",
        viewonly=True,
    )

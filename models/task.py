"""
A module defining the `Task` ORM model and its association tables.

Classes:
    Task: A unit of work on a project board, with status, priority, story
    points and an optional sprint and parent task.
    TaskAssignee: Many-to-many link between tasks and users, recording who
    made the assignment.
    TaskLabel: Many-to-many link between tasks and labels.
"""

from sqlalchemy import Column, DateTime, ForeignKey, Integer, String, Text, UniqueConstraint
from sqlalchemy.orm import backref, relationship

from .base import UUID, Base, BaseModel, utcnow


class Task(BaseModel):
    __tablename__ = "tasks"
    __table_args__ = (
        UniqueConstraint("project_id", "task_number", name="uq_tasks_project_number"),
    )

    project_id = Column(UUID(), ForeignKey("projects.id"), nullable=False, index=True)
    sprint_id = Column(UUID(), ForeignKey("sprints.id"), index=True)
    parent_id = Column(UUID(), ForeignKey("tasks.id"), index=True)
    reporter_id = Column(UUID(), ForeignKey("users.id"))

    task_number = Column(Integer, nullable=False)
    title = Column(String(500), nullable=False)
    description = Column(Text)
    type = Column(String(20), nullable=False, default="task")  # task, user-story
    status = Column(String(20), nullable=False, default="backlog")  # backlog, todo, in-progress, done
    priority = Column(String(20), nullable=False, default="medium")  # low, medium, high, urgent
    story_points = Column(Integer)
    time_estimate = Column(Integer)
    time_spent = Column(Integer)
    due_date = Column(DateTime(timezone=True))
    position_index = Column(Integer)
    deleted_at = Column(DateTime(timezone=True))

    # Relationships
    reporter = relationship("User", foreign_keys=[reporter_id])
    sprint = relationship("Sprint", foreign_keys=[sprint_id])
    subtasks = relationship(
        "Task",
        backref=backref("parent", remote_side="Task.id"),
        foreign_keys=[parent_id],
    )
    assignee_links = relationship("TaskAssignee", back_populates="task")
    labels = relationship("Label", secondary="task_labels", viewonly=True, order_by="Label.name")
    comments = relationship(
        "Comment",
        primaryjoin="and_(Task.id == foreign(Comment.task_id), Comment.deleted_at.is_(None))",
        order_by="Comment.created_at",
        viewonly=True,
    )
    attachments = relationship("Attachment", back_populates="task")

    @property
    def is_deleted(self) -> bool:
        return self.deleted_at is not None

    @property
    def assignees(self) -> list:
        return [link.user for link in self.assignee_links]


class TaskAssignee(Base):
    __tablename__ = "task_assignees"

    task_id = Column(UUID(), ForeignKey("tasks.id"), primary_key=True)
    user_id = Column(UUID(), ForeignKey("users.id"), primary_key=True)
    assigned_by = Column(UUID(), ForeignKey("users.id"))
    assigned_at = Column(DateTime(timezone=True), default=utcnow)

    task = relationship("Task", back_populates="assignee_links")
    user = relationship("User", foreign_keys=[user_id])


class TaskLabel(Base):
    __tablename__ = "task_labels"

    task_id = Column(UUID(), ForeignKey("tasks.id"), primary_key=True)
    label_id = Column(UUID(), ForeignKey("labels.id"), primary_key=True)

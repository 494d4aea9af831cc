"""Task and comment schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime
from uuid import UUID

from pydantic import Field, field_validator

from app.core.config import settings
from app.shared.workflow import (
    TASK_PRIORITY_PATTERN,
    TASK_STATUS_PATTERN,
    TASK_TYPE_PATTERN,
)

from .attachment import AttachmentResponse
from .base import BaseModelSchema, BaseSchema
from .label import LabelResponse
from .user import UserSummary


def _clean_title(v: str | None) -> str | None:
    if v is not None:
        v = v.strip()
        if not v:
            raise ValueError("Task title cannot be empty or only whitespace")
    return v


class TaskBase(BaseSchema):
    """Base task schema with common fields."""

    title: str = Field(..., min_length=1, max_length=500)
    description: str | None = None
    type: str = Field(default="task", pattern=TASK_TYPE_PATTERN)
    status: str = Field(default="backlog", pattern=TASK_STATUS_PATTERN)
    priority: str = Field(default="medium", pattern=TASK_PRIORITY_PATTERN)
    story_points: int | None = Field(None, ge=0, le=settings.max_story_points)
    time_estimate: int | None = Field(None, ge=0)
    time_spent: int | None = Field(None, ge=0)
    due_date: datetime | None = None
    position_index: int | None = Field(None, ge=0)

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str) -> str:
        return _clean_title(v)


class TaskCreate(TaskBase):
    """Schema for creating a task inside a project."""

    sprint_id: UUID | None = None
    parent_id: UUID | None = None
    assignees: list[UUID] = Field(default_factory=list)
    labels: list[UUID] = Field(default_factory=list)


class TaskUpdate(BaseSchema):
    """Schema for updating a task.

    ``assignees`` and ``labels`` carry the complete desired set: when present
    they replace whatever the task had, when absent they are left alone.
    """

    title: str | None = Field(None, min_length=1, max_length=500)
    description: str | None = None
    type: str | None = Field(None, pattern=TASK_TYPE_PATTERN)
    status: str | None = Field(None, pattern=TASK_STATUS_PATTERN)
    priority: str | None = Field(None, pattern=TASK_PRIORITY_PATTERN)
    story_points: int | None = Field(None, ge=0, le=settings.max_story_points)
    time_estimate: int | None = Field(None, ge=0)
    time_spent: int | None = Field(None, ge=0)
    due_date: datetime | None = None
    position_index: int | None = Field(None, ge=0)
    sprint_id: UUID | None = None
    parent_id: UUID | None = None
    assignees: list[UUID] | None = None
    labels: list[UUID] | None = None

    @field_validator("title")
    @classmethod
    def validate_title(cls, v: str | None) -> str | None:
        return _clean_title(v)


class TaskMove(BaseSchema):
    """Schema for moving a task on the board."""

    status: str = Field(..., pattern=TASK_STATUS_PATTERN)
    position_index: int | None = Field(None, ge=0)


class TaskFilter(BaseSchema):
    """Schema for filtering project tasks."""

    status: str | None = None
    priority: str | None = None
    type: str | None = None
    sprint_id: UUID | None = None
    parent_id: UUID | None = None
    assignee_id: UUID | None = None
    backlog_only: bool = False


class TaskSummary(BaseModelSchema):
    """Task fields without relationships, used inside sprint payloads."""

    project_id: UUID
    sprint_id: UUID | None = None
    parent_id: UUID | None = None
    task_number: int
    title: str
    type: str
    status: str
    priority: str
    story_points: int | None = None
    position_index: int | None = None


class TaskResponse(TaskSummary):
    """Schema for task response."""

    reporter_id: UUID | None = None
    description: str | None = None
    time_estimate: int | None = None
    time_spent: int | None = None
    due_date: datetime | None = None
    deleted_at: datetime | None = None

    reporter: UserSummary | None = None
    assignees: list[UserSummary] = []
    labels: list[LabelResponse] = []


class CommentCreate(BaseSchema):
    """Schema for adding a comment to a task."""

    content: str = Field(..., min_length=1, max_length=10000)
    parent_id: UUID | None = None

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Comment cannot be empty")
        return v


class CommentUpdate(BaseSchema):
    """Schema for editing a comment."""

    content: str = Field(..., min_length=1, max_length=10000)

    @field_validator("content")
    @classmethod
    def validate_content(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Comment cannot be empty")
        return v


class CommentResponse(BaseModelSchema):
    """Schema for comment response."""

    task_id: UUID
    author_id: UUID | None = None
    parent_id: UUID | None = None
    content: str
    is_edited: bool = False
    author: UserSummary | None = None


class TaskDetail(TaskResponse):
    """Task with its discussion and attachments."""

    comments: list[CommentResponse] = []
    attachments: list[AttachmentResponse] = []


class TaskListResponse(BaseSchema):
    """Schema for task list response."""

    tasks: list[TaskResponse]
    total: int

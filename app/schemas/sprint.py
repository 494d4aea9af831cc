"""Sprint schemas for request/response serialization."""

from __future__ import annotations

from datetime import datetime, timezone
from uuid import UUID

from pydantic import Field, field_validator, model_validator

from .base import BaseModelSchema, BaseSchema
from .task import TaskSummary


def as_utc(value: datetime | None) -> datetime | None:
    """Read naive datetimes as UTC so naive and aware inputs compare."""
    if value is not None and value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value


class SprintCreate(BaseSchema):
    """Schema for starting a new sprint."""

    name: str = Field(..., min_length=1, max_length=255)
    goal: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    task_ids: list[UUID] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("Sprint name cannot be empty or only whitespace")
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class SprintUpdate(BaseSchema):
    """Schema for updating sprint details. The status is never changed here."""

    name: str | None = Field(None, min_length=1, max_length=255)
    goal: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None

    @field_validator("name")
    @classmethod
    def validate_name(cls, v: str | None) -> str | None:
        if v is not None:
            v = v.strip()
            if not v:
                raise ValueError("Sprint name cannot be empty or only whitespace")
        return v

    @field_validator("start_date", "end_date")
    @classmethod
    def normalize_dates(cls, v: datetime | None) -> datetime | None:
        return as_utc(v)

    @model_validator(mode="after")
    def validate_dates(self):
        if self.start_date and self.end_date and self.end_date < self.start_date:
            raise ValueError("end_date must not be before start_date")
        return self


class SprintEnd(BaseSchema):
    """Options for ending a sprint."""

    move_incomplete_to_backlog: bool = True


class SprintTaskIds(BaseSchema):
    """Tasks to schedule into or release from a sprint."""

    task_ids: list[UUID] = Field(..., min_length=1)


class SprintResponse(BaseModelSchema):
    """Schema for sprint response."""

    project_id: UUID
    name: str
    goal: str | None = None
    start_date: datetime | None = None
    end_date: datetime | None = None
    status: str


class SprintWithTasks(SprintResponse):
    """Sprint together with its non-deleted tasks."""

    tasks: list[TaskSummary] = []


class SprintStats(BaseSchema):
    """Task counts per status bucket and story point totals."""

    total: int
    backlog: int
    todo: int
    inProgress: int
    done: int
    totalPoints: int
    completedPoints: int

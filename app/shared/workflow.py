"""Board vocabulary and the sprint/task status rules.

The board is free-form: any task status may move to any other. The only
rules are the ones applied when tasks enter or leave a sprint, collected
here so both lifecycle services apply them the same way.
"""

from collections.abc import Iterable
from enum import Enum
from typing import Any
from uuid import UUID


class TaskStatus(str, Enum):
    BACKLOG = "backlog"
    TODO = "todo"
    IN_PROGRESS = "in-progress"
    DONE = "done"


class TaskPriority(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    URGENT = "urgent"


class TaskType(str, Enum):
    TASK = "task"
    USER_STORY = "user-story"


class SprintStatus(str, Enum):
    ACTIVE = "active"
    COMPLETED = "completed"


def enum_pattern(enum_cls: type[Enum]) -> str:
    """Regex accepting exactly the values of ``enum_cls``."""
    return "^(" + "|".join(member.value for member in enum_cls) + ")$"


TASK_STATUS_PATTERN = enum_pattern(TaskStatus)
TASK_PRIORITY_PATTERN = enum_pattern(TaskPriority)
TASK_TYPE_PATTERN = enum_pattern(TaskType)
SPRINT_STATUS_PATTERN = enum_pattern(SprintStatus)

# Stats keys per status; statuses outside this map are not bucketed
STATUS_BUCKETS = {
    TaskStatus.BACKLOG.value: "backlog",
    TaskStatus.TODO.value: "todo",
    TaskStatus.IN_PROGRESS.value: "inProgress",
    TaskStatus.DONE.value: "done",
}


def schedule_into_sprint(task: Any, sprint_id: UUID) -> None:
    """A task entering a sprint always restarts at ``todo``."""
    task.sprint_id = sprint_id
    task.status = TaskStatus.TODO.value


def release_to_backlog(task: Any) -> None:
    task.sprint_id = None
    task.status = TaskStatus.BACKLOG.value


def close_out_task(task: Any, move_incomplete_to_backlog: bool) -> bool:
    """Apply the end-of-sprint rule to one task of the ending sprint.

    Done tasks are always detached and keep ``done``. Other tasks are released
    to the backlog only when ``move_incomplete_to_backlog`` is set, otherwise
    they are left untouched. Returns True when the task changed.
    """
    if task.status == TaskStatus.DONE.value:
        task.sprint_id = None
        return True
    if move_incomplete_to_backlog:
        release_to_backlog(task)
        return True
    return False


def summarize_sprint(tasks: Iterable[Any]) -> dict[str, int]:
    """Count tasks per status bucket and sum story points.

    Unknown statuses still count toward ``total`` and ``totalPoints``.
    """
    stats = {
        "total": 0,
        "backlog": 0,
        "todo": 0,
        "inProgress": 0,
        "done": 0,
        "totalPoints": 0,
        "completedPoints": 0,
    }
    for task in tasks:
        points = task.story_points or 0
        stats["total"] += 1
        stats["totalPoints"] += points

        bucket = STATUS_BUCKETS.get(task.status)
        if bucket is None:
            continue
        stats[bucket] += 1
        if task.status == TaskStatus.DONE.value:
            stats["completedPoints"] += points
    return stats

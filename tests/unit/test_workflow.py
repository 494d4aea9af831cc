"""
Unit tests for the board vocabulary and sprint/task status rules.
"""

from types import SimpleNamespace
from uuid import uuid4

from app.shared.workflow import (
    SPRINT_STATUS_PATTERN,
    TASK_STATUS_PATTERN,
    TaskStatus,
    close_out_task,
    enum_pattern,
    release_to_backlog,
    schedule_into_sprint,
    summarize_sprint,
)


def make_task(status="backlog", story_points=None, sprint_id=None):
    return SimpleNamespace(status=status, story_points=story_points, sprint_id=sprint_id)


class TestVocabulary:
    """Test cases for the status vocabulary helpers."""

    def test_task_status_values(self):
        assert [s.value for s in TaskStatus] == ["backlog", "todo", "in-progress", "done"]

    def test_enum_pattern_matches_values_only(self):
        assert TASK_STATUS_PATTERN == "^(backlog|todo|in-progress|done)$"
        assert SPRINT_STATUS_PATTERN == "^(active|completed)$"
        assert enum_pattern(TaskStatus).startswith("^(")


class TestSprintMembershipRules:
    """Test cases for tasks entering and leaving sprints."""

    def test_schedule_into_sprint_resets_status_to_todo(self):
        sprint_id = uuid4()
        task = make_task(status="done")

        schedule_into_sprint(task, sprint_id)

        assert task.sprint_id == sprint_id
        assert task.status == "todo"

    def test_release_to_backlog(self):
        task = make_task(status="in-progress", sprint_id=uuid4())

        release_to_backlog(task)

        assert task.sprint_id is None
        assert task.status == "backlog"

    def test_close_out_done_task_keeps_done(self):
        task = make_task(status="done", sprint_id=uuid4())

        changed = close_out_task(task, move_incomplete_to_backlog=False)

        assert changed is True
        assert task.sprint_id is None
        assert task.status == "done"

    def test_close_out_incomplete_task_moves_to_backlog(self):
        task = make_task(status="in-progress", sprint_id=uuid4())

        changed = close_out_task(task, move_incomplete_to_backlog=True)

        assert changed is True
        assert task.sprint_id is None
        assert task.status == "backlog"

    def test_close_out_incomplete_task_left_alone_without_flag(self):
        sprint_id = uuid4()
        task = make_task(status="todo", sprint_id=sprint_id)

        changed = close_out_task(task, move_incomplete_to_backlog=False)

        assert changed is False
        assert task.sprint_id == sprint_id
        assert task.status == "todo"


class TestSummarizeSprint:
    """Test cases for sprint statistics."""

    def test_empty_sprint(self):
        assert summarize_sprint([]) == {
            "total": 0,
            "backlog": 0,
            "todo": 0,
            "inProgress": 0,
            "done": 0,
            "totalPoints": 0,
            "completedPoints": 0,
        }

    def test_counts_and_points(self):
        tasks = [
            make_task("todo", 3),
            make_task("in-progress", 5),
            make_task("done", 2),
            make_task("done", None),
            make_task("backlog", 1),
        ]

        stats = summarize_sprint(tasks)

        assert stats["total"] == 5
        assert stats["todo"] == 1
        assert stats["inProgress"] == 1
        assert stats["done"] == 2
        assert stats["backlog"] == 1
        assert stats["totalPoints"] == 11
        assert stats["completedPoints"] == 2

    def test_unknown_status_counts_toward_totals_only(self):
        stats = summarize_sprint([make_task("review", 8), make_task("done", 1)])

        assert stats["total"] == 2
        assert stats["totalPoints"] == 9
        assert stats["done"] == 1
        assert stats["backlog"] + stats["todo"] + stats["inProgress"] == 0
        assert stats["completedPoints"] == 1

"""
API tests for Sprint controller.

This module contains API endpoint tests for the sprint lifecycle routes and
the events they broadcast to the project room.
"""

import uuid

import pytest
from fastapi import status
from httpx import AsyncClient


async def start_sprint(client: AsyncClient, project_id, **fields):
    payload = {"name": "Sprint 1", "goal": "Ship onboarding", **fields}
    response = await client.post(f"/api/projects/{project_id}/sprints", json=payload)
    assert response.status_code == status.HTTP_201_CREATED, response.text
    return response.json()["data"]


class TestSprintCreation:
    """Test cases for POST /api/projects/{id}/sprints."""

    @pytest.mark.asyncio
    async def test_create_sprint_with_tasks(
        self, client: AsyncClient, test_project, make_task, emitter
    ):
        task = await make_task(status="backlog")

        data = await start_sprint(client, test_project.id, task_ids=[str(task.id)])

        assert data["status"] == "active"
        assert [(t["id"], t["status"]) for t in data["tasks"]] == [(str(task.id), "todo")]
        assert emitter.project_event_names() == ["sprint:created"]

    @pytest.mark.asyncio
    async def test_second_active_sprint_conflicts(self, client: AsyncClient, test_project):
        await start_sprint(client, test_project.id)

        response = await client.post(
            f"/api/projects/{test_project.id}/sprints", json={"name": "Sprint 2"}
        )

        assert response.status_code == status.HTTP_409_CONFLICT
        assert response.json()["error"] == "SPRINT_ALREADY_ACTIVE"

    @pytest.mark.asyncio
    async def test_end_before_start_rejected(self, client: AsyncClient, test_project):
        response = await client.post(
            f"/api/projects/{test_project.id}/sprints",
            json={
                "name": "Backwards",
                "start_date": "2026-05-10T00:00:00Z",
                "end_date": "2026-05-01T00:00:00Z",
            },
        )

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_mixed_naive_and_aware_dates_accepted(self, client: AsyncClient, test_project):
        data = await start_sprint(
            client,
            test_project.id,
            start_date="2026-01-01T00:00:00",
            end_date="2026-01-10T00:00:00Z",
        )

        assert data["start_date"].startswith("2026-01-01T00:00:00")

    @pytest.mark.asyncio
    async def test_member_cannot_start_sprint(
        self, client: AsyncClient, test_project, member_user, login
    ):
        login(member_user)

        response = await client.post(
            f"/api/projects/{test_project.id}/sprints", json={"name": "Sprint 1"}
        )

        assert response.status_code == status.HTTP_403_FORBIDDEN


class TestSprintQueries:
    """Test cases for the read routes."""

    @pytest.mark.asyncio
    async def test_current_sprint_is_null_without_active(self, client: AsyncClient, test_project):
        response = await client.get(f"/api/projects/{test_project.id}/sprints/current")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] is None

    @pytest.mark.asyncio
    async def test_get_and_list_sprints(self, client: AsyncClient, test_project, member_user, login):
        sprint = await start_sprint(client, test_project.id)
        login(member_user)

        single = await client.get(f"/api/sprints/{sprint['id']}")
        listing = await client.get(
            f"/api/projects/{test_project.id}/sprints", params={"status": "active"}
        )
        current = await client.get(f"/api/projects/{test_project.id}/sprints/current")

        assert single.json()["data"]["name"] == "Sprint 1"
        assert [s["id"] for s in listing.json()["data"]] == [sprint["id"]]
        assert current.json()["data"]["id"] == sprint["id"]

    @pytest.mark.asyncio
    async def test_unknown_sprint(self, client: AsyncClient, test_project):
        response = await client.get(f"/api/sprints/{uuid.uuid4()}")

        assert response.status_code == status.HTTP_404_NOT_FOUND
        assert response.json()["error"] == "SPRINT_NOT_FOUND"

    @pytest.mark.asyncio
    async def test_stats(self, client: AsyncClient, test_project, make_sprint, make_task):
        sprint = await make_sprint()
        await make_task(sprint_id=sprint.id, status="done", story_points=5)
        await make_task(sprint_id=sprint.id, status="in-progress", story_points=3)

        response = await client.get(f"/api/sprints/{sprint.id}/stats")

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"] == {
            "total": 2,
            "backlog": 0,
            "todo": 0,
            "inProgress": 1,
            "done": 1,
            "totalPoints": 8,
            "completedPoints": 5,
        }


class TestSprintMutations:
    """Test cases for update, end, task membership and delete."""

    @pytest.mark.asyncio
    async def test_update_sprint(self, client: AsyncClient, test_project, emitter):
        sprint = await start_sprint(client, test_project.id)

        response = await client.patch(f"/api/sprints/{sprint['id']}", json={"goal": "Ship search"})

        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["goal"] == "Ship search"
        assert "sprint:updated" in emitter.project_event_names()

    @pytest.mark.asyncio
    async def test_end_sprint_default_moves_incomplete(
        self, client: AsyncClient, make_sprint, make_task, emitter
    ):
        sprint = await make_sprint()
        await make_task(sprint_id=sprint.id, status="todo")

        response = await client.patch(f"/api/sprints/{sprint.id}/end")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["status"] == "completed"
        assert data["tasks"] == []
        _, event, payload = emitter.project_events[-1]
        assert event == "sprint:ended"
        assert payload["move_incomplete_to_backlog"] is True

    @pytest.mark.asyncio
    async def test_end_sprint_keeping_incomplete(self, client: AsyncClient, make_sprint, make_task):
        sprint = await make_sprint()
        todo = await make_task(sprint_id=sprint.id, status="todo")
        await make_task(sprint_id=sprint.id, status="done")

        response = await client.patch(
            f"/api/sprints/{sprint.id}/end", json={"move_incomplete_to_backlog": False}
        )

        assert [t["id"] for t in response.json()["data"]["tasks"]] == [str(todo.id)]

    @pytest.mark.asyncio
    async def test_end_completed_sprint_conflicts(self, client: AsyncClient, make_sprint):
        sprint = await make_sprint(status="completed")

        response = await client.patch(f"/api/sprints/{sprint.id}/end")

        assert response.status_code == status.HTTP_409_CONFLICT

    @pytest.mark.asyncio
    async def test_member_adds_and_removes_tasks(
        self, client: AsyncClient, make_sprint, make_task, member_user, login, emitter
    ):
        sprint = await make_sprint()
        task = await make_task(status="done")
        login(member_user)

        added = await client.post(
            f"/api/sprints/{sprint.id}/tasks", json={"task_ids": [str(task.id)]}
        )
        removed = await client.request(
            "DELETE", f"/api/sprints/{sprint.id}/tasks", json={"task_ids": [str(task.id)]}
        )

        assert added.status_code == status.HTTP_200_OK
        assert [t["status"] for t in added.json()["data"]["tasks"]] == ["todo"]
        assert removed.status_code == status.HTTP_200_OK
        assert removed.json()["data"]["tasks"] == []
        assert emitter.project_event_names() == ["sprint:tasks-added", "sprint:tasks-removed"]

    @pytest.mark.asyncio
    async def test_add_tasks_requires_ids(self, client: AsyncClient, make_sprint):
        sprint = await make_sprint()

        response = await client.post(f"/api/sprints/{sprint.id}/tasks", json={"task_ids": []})

        assert response.status_code == 422

    @pytest.mark.asyncio
    async def test_delete_sprint(self, client: AsyncClient, make_sprint, make_task, emitter):
        sprint = await make_sprint()
        task = await make_task(sprint_id=sprint.id, status="in-progress")

        response = await client.delete(f"/api/sprints/{sprint.id}")
        task_response = await client.get(f"/api/tasks/{task.id}")

        assert response.status_code == status.HTTP_200_OK
        assert task_response.json()["data"]["sprint_id"] is None
        assert task_response.json()["data"]["status"] == "backlog"
        assert emitter.project_event_names() == ["sprint:deleted"]

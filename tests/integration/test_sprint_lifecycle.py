"""
Integration tests for a complete sprint cycle driven through the API.

A manager sets up a board, plans a sprint with a teammate, the team works
the tasks, and the sprint is closed so the next one can start.
"""

import pytest
from fastapi import status
from httpx import AsyncClient


@pytest.mark.slow
class TestSprintLifecycle:
    """End-to-end flow across projects, tasks, labels, sprints and notifications."""

    @pytest.mark.asyncio
    async def test_full_sprint_cycle(
        self, client: AsyncClient, manager_user, outsider_user, login, emitter
    ):
        # Board setup
        response = await client.post("/api/projects", json={"name": "Payments Gateway"})
        assert response.status_code == status.HTTP_201_CREATED
        project_id = response.json()["data"]["id"]
        assert response.json()["data"]["key"] == "PG"

        response = await client.post(
            f"/api/projects/{project_id}/members", json={"email": outsider_user.email}
        )
        assert response.status_code == status.HTTP_201_CREATED

        response = await client.post(
            f"/api/projects/{project_id}/labels", json={"name": "api", "color": "#336699"}
        )
        label_id = response.json()["data"]["id"]

        # Backlog grooming
        task_ids = []
        for title, points in [("Card tokenization", 5), ("Refund flow", 3), ("Audit log", 2)]:
            response = await client.post(
                f"/api/projects/{project_id}/tasks",
                json={
                    "title": title,
                    "story_points": points,
                    "labels": [label_id],
                    "assignees": [str(outsider_user.id)],
                },
            )
            assert response.status_code == status.HTTP_201_CREATED
            task_ids.append(response.json()["data"]["id"])

        numbers = []
        for task_id in task_ids:
            response = await client.get(f"/api/tasks/{task_id}")
            numbers.append(response.json()["data"]["task_number"])
        assert numbers == [1, 2, 3]
        assert emitter.user_event_names() == ["notification:new"] * 3

        # Sprint planning
        response = await client.post(
            f"/api/projects/{project_id}/sprints",
            json={"name": "Sprint 1", "goal": "Take card payments", "task_ids": task_ids[:2]},
        )
        assert response.status_code == status.HTTP_201_CREATED
        sprint_id = response.json()["data"]["id"]

        response = await client.get(f"/api/projects/{project_id}/tasks", params={"backlog": True})
        assert [t["id"] for t in response.json()["data"]["tasks"]] == [task_ids[2]]

        # The team works the sprint
        login(outsider_user)
        response = await client.patch(f"/api/tasks/{task_ids[0]}/move", json={"status": "done"})
        assert response.status_code == status.HTTP_200_OK
        response = await client.patch(
            f"/api/tasks/{task_ids[1]}/move", json={"status": "in-progress"}
        )
        assert response.status_code == status.HTTP_200_OK

        notifications = await client.get("/api/notifications/unread-count")
        assert notifications.json()["data"]["count"] == 3

        response = await client.get(f"/api/sprints/{sprint_id}/stats")
        stats = response.json()["data"]
        assert (stats["total"], stats["done"], stats["inProgress"]) == (2, 1, 1)
        assert (stats["totalPoints"], stats["completedPoints"]) == (8, 5)

        # Only a manager can close the sprint
        response = await client.patch(f"/api/sprints/{sprint_id}/end")
        assert response.status_code == status.HTTP_403_FORBIDDEN

        login(manager_user)
        response = await client.patch(f"/api/sprints/{sprint_id}/end")
        assert response.status_code == status.HTTP_200_OK
        assert response.json()["data"]["status"] == "completed"

        response = await client.get(f"/api/projects/{project_id}/tasks", params={"backlog": True})
        backlog = {t["id"]: t["status"] for t in response.json()["data"]["tasks"]}
        assert backlog == {
            task_ids[0]: "done",
            task_ids[1]: "backlog",
            task_ids[2]: "backlog",
        }

        # The next sprint can start once the previous one is closed
        response = await client.post(
            f"/api/projects/{project_id}/sprints",
            json={"name": "Sprint 2", "task_ids": [task_ids[1]]},
        )
        assert response.status_code == status.HTTP_201_CREATED

        response = await client.get(f"/api/projects/{project_id}/sprints/current")
        assert response.json()["data"]["name"] == "Sprint 2"
        assert [t["status"] for t in response.json()["data"]["tasks"]] == ["todo"]

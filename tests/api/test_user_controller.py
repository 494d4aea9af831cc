"""
API tests for User controller.

This module contains API endpoint tests for the current-user profile routes.
"""

import pytest
from fastapi import status
from httpx import AsyncClient


class TestUserController:
    """Test cases for /api/users/me."""

    @pytest.mark.asyncio
    async def test_get_me(self, client: AsyncClient, manager_user):
        response = await client.get("/api/users/me")

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["id"] == str(manager_user.id)
        assert data["name"] == "Maya Manager"
        assert data["role"] == "user"

    @pytest.mark.asyncio
    async def test_update_me(self, client: AsyncClient):
        response = await client.patch(
            "/api/users/me",
            json={"name": "  Maya M.  ", "avatar_url": "https://cdn.example.com/maya.png"},
        )

        assert response.status_code == status.HTTP_200_OK
        data = response.json()["data"]
        assert data["name"] == "Maya M."
        assert data["avatar_url"] == "https://cdn.example.com/maya.png"

    @pytest.mark.asyncio
    async def test_update_me_rejects_blank_name(self, client: AsyncClient):
        response = await client.patch("/api/users/me", json={"name": "   "})

        assert response.status_code == 422
        assert response.json()["error"] == "VALIDATION_ERROR"

    @pytest.mark.asyncio
    async def test_requires_authentication(self, anonymous_client: AsyncClient):
        response = await anonymous_client.get("/api/users/me")

        assert response.status_code == status.HTTP_401_UNAUTHORIZED
        assert response.json()["success"] is False

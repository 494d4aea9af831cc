"""In-process realtime fan-out over WebSockets.

Connections are grouped in rooms: every socket sits in its user's room
``user:<id>`` and in the ``project:<id>`` rooms it joined. Broadcasts are
fire-and-forget; a socket that fails to receive is dropped from every room.
"""

import asyncio
import logging
from collections import defaultdict
from typing import Any, Protocol
from uuid import UUID

from fastapi import WebSocket
from fastapi.encoders import jsonable_encoder

from app.core.config import settings

logger = logging.getLogger(__name__)


def project_room(project_id: UUID | str) -> str:
    return f"project:{project_id}"


def user_room(user_id: UUID | str) -> str:
    return f"user:{user_id}"


class RealtimeEmitter(Protocol):
    """What controllers need from the realtime layer."""

    async def emit_to_project(self, project_id: UUID, event: str, payload: Any) -> None: ...

    async def emit_to_user(self, user_id: UUID, event: str, payload: Any) -> None: ...


class ConnectionHub:
    """Tracks live sockets per room and broadcasts events to them."""

    def __init__(self, max_connections: int | None = None):
        self.max_connections = max_connections
        self._rooms: dict[str, set[WebSocket]] = defaultdict(set)
        self._memberships: dict[WebSocket, set[str]] = {}
        self._lock = asyncio.Lock()

    @property
    def connection_count(self) -> int:
        return len(self._memberships)

    def has_capacity(self) -> bool:
        return self.max_connections is None or self.connection_count < self.max_connections

    def rooms_of(self, websocket: WebSocket) -> set[str]:
        return set(self._memberships.get(websocket, ()))

    def room_size(self, room: str) -> int:
        return len(self._rooms.get(room, ()))

    async def register(self, websocket: WebSocket, user_id: UUID) -> None:
        """Track an accepted socket and put it in its user room."""
        async with self._lock:
            self._memberships[websocket] = set()
        await self.join(websocket, user_room(user_id))

    async def join(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            if websocket not in self._memberships:
                return
            self._rooms[room].add(websocket)
            self._memberships[websocket].add(room)

    async def leave(self, websocket: WebSocket, room: str) -> None:
        async with self._lock:
            self._discard(websocket, room)

    async def unregister(self, websocket: WebSocket) -> None:
        async with self._lock:
            for room in self._memberships.pop(websocket, set()):
                self._discard(websocket, room)

    async def emit_to_project(self, project_id: UUID, event: str, payload: Any) -> None:
        await self.broadcast(project_room(project_id), event, payload)

    async def emit_to_user(self, user_id: UUID, event: str, payload: Any) -> None:
        await self.broadcast(user_room(user_id), event, payload)

    async def broadcast(self, room: str, event: str, payload: Any) -> None:
        message = {"event": event, "data": jsonable_encoder(payload)}
        targets = list(self._rooms.get(room, ()))

        dead = []
        for websocket in targets:
            try:
                await websocket.send_json(message)
            except Exception as e:  # any transport failure means the peer is gone
                logger.warning("Dropping socket in %s after failed send of %s: %s", room, event, e)
                dead.append(websocket)

        for websocket in dead:
            await self.unregister(websocket)

    def _discard(self, websocket: WebSocket, room: str) -> None:
        members = self._rooms.get(room)
        if members is not None:
            members.discard(websocket)
            if not members:
                del self._rooms[room]
        if websocket in self._memberships:
            self._memberships[websocket].discard(room)


hub = ConnectionHub(max_connections=settings.websocket_max_connections)


def get_emitter() -> RealtimeEmitter:
    """FastAPI dependency returning the process-wide hub."""
    return hub

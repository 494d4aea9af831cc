"""WebSocket endpoint feeding the realtime hub."""

import asyncio
import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, WebSocket, WebSocketDisconnect, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.config import settings
from app.core.dependencies import auth, check_project_access, subject_to_user_id
from app.database import get_db
from app.domains.user.service import UserService
from app.realtime.hub import hub, project_room

logger = logging.getLogger(__name__)

router = APIRouter(tags=["realtime"])


async def _handle_message(websocket: WebSocket, message: dict, user, db: AsyncSession) -> None:
    kind = message.get("type")

    if kind == "ping":
        await websocket.send_json({"event": "pong"})
        return

    if kind not in ("join:project", "leave:project"):
        await websocket.send_json({"event": "error", "data": {"message": f"Unknown message type: {kind}"}})
        return

    try:
        project_id = UUID(str(message.get("project_id")))
    except ValueError:
        await websocket.send_json({"event": "error", "data": {"message": "Invalid project_id"}})
        return

    if kind == "leave:project":
        await hub.leave(websocket, project_room(project_id))
        logger.info("User %s left project room %s", user.id, project_id)
        return

    try:
        await check_project_access(db, user, project_id)
    except HTTPException as e:
        await websocket.send_json(
            {"event": "error", "data": {"message": "Cannot join project", "project_id": str(project_id)}}
        )
        logger.info("User %s refused project room %s: %s", user.id, project_id, e.detail)
        return
    finally:
        # Release the connection between messages
        await db.commit()

    await hub.join(websocket, project_room(project_id))
    await websocket.send_json({"event": "joined:project", "data": {"project_id": str(project_id)}})
    logger.info("User %s joined project room %s", user.id, project_id)


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    token: str = Query(...),
    db: AsyncSession = Depends(get_db),
):
    """Authenticated event stream.

    The socket joins its user room on connect; clients send
    ``{"type": "join:project", "project_id": ...}`` to follow a board.
    """
    try:
        payload = await auth.verify_token(token)
        user_id = subject_to_user_id(payload)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    user = await UserService(db).get_or_create_user(user_id, payload)
    await db.commit()
    if not user.is_active:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    if not hub.has_capacity():
        await websocket.close(code=status.WS_1013_TRY_AGAIN_LATER)
        return

    await websocket.accept()
    await hub.register(websocket, user.id)
    logger.info("Realtime client connected for user %s", user.id)

    try:
        while True:
            try:
                message = await asyncio.wait_for(
                    websocket.receive_json(), timeout=settings.websocket_heartbeat_interval
                )
            except asyncio.TimeoutError:
                await websocket.send_json({"event": "ping"})
                continue
            except ValueError:
                await websocket.send_json({"event": "error", "data": {"message": "Malformed message"}})
                continue

            if isinstance(message, dict):
                await _handle_message(websocket, message, user, db)
    except WebSocketDisconnect:
        logger.info("Realtime client disconnected for user %s", user.id)
    finally:
        await hub.unregister(websocket)

"""
Push channel
Clients connect to /ws and send {"event": "join", "userId": <id>} to start
receiving their notifications as {"event": <type>, "data": {...}} frames.
"""
import asyncio
import json

from fastapi import APIRouter, WebSocket, WebSocketDisconnect

from app.core.config import settings
from app.core.exceptions import InvalidSession
from app.core.logging import get_logger
from app.core.security import validate_session
from app.services.notifications import NotificationDispatcher, WebSocketConnection

router = APIRouter(tags=["Notifications"])
logger = get_logger(__name__)


def _join_user_id(frame: dict):
    """User id a join frame is allowed to bind to, or None if refused"""
    try:
        user_id = int(frame.get("userId"))
    except (TypeError, ValueError):
        return None

    token = frame.get("token")
    if token is None:
        return None if settings.WS_REQUIRE_TOKEN else user_id

    try:
        identity = validate_session(token)
    except InvalidSession:
        return None
    return user_id if identity.id == user_id else None


@router.websocket("/ws")
async def notification_socket(websocket: WebSocket):
    dispatcher: NotificationDispatcher = websocket.app.state.dispatcher

    await websocket.accept()
    connection = WebSocketConnection(websocket, asyncio.get_running_loop())
    dispatcher.registry.add(connection)
    writer = asyncio.create_task(connection.pump())
    logger.info("Client connected", connections=len(dispatcher.registry))

    try:
        while True:
            raw = await websocket.receive_text()
            try:
                frame = json.loads(raw)
            except ValueError:
                frame = None
            if not isinstance(frame, dict):
                connection.send({"event": "error", "data": {"message": "Malformed frame"}})
                continue

            if frame.get("event") != "join":
                continue

            user_id = _join_user_id(frame)
            if user_id is None:
                connection.send({"event": "error", "data": {"message": "Join refused"}})
                continue

            dispatcher.registry.bind(connection, user_id)
            connection.send({"event": "joined", "data": {"userId": user_id}})
            logger.info("User joined", user_id=user_id)
    except WebSocketDisconnect:
        pass
    finally:
        user_id = dispatcher.registry.user_of(connection)
        dispatcher.registry.remove(connection)
        connection.close()
        await writer
        logger.info("Client disconnected", user_id=user_id)

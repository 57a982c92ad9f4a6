"""WebSocket route handlers for room channels."""

from __future__ import annotations

import logging
import uuid

from fastapi import APIRouter
from fastapi import Depends
from fastapi import WebSocket
from fastapi import WebSocketDisconnect
from starlette.concurrency import run_in_threadpool

from spyroom.api.deps import get_context
from spyroom.context import AppContext
from spyroom.rooms.registry import normalize_room_code
from wordgrid.errors import GameValidationError
from wordgrid.errors import NotFoundError

from .actions import RoomSession
from .heartbeat import ws_message_loop

logger = logging.getLogger(__name__)

router = APIRouter()


@router.websocket("/ws/rooms/{room_code}")
async def ws_room(
    websocket: WebSocket,
    room_code: str,
    context: AppContext = Depends(get_context),
) -> None:
    """Room websocket: initial ROOM_SNAPSHOT, client actions, and room events."""
    try:
        code = normalize_room_code(room_code)
        await run_in_threadpool(context.registry.find, code)
    except (GameValidationError, NotFoundError):
        await websocket.accept()
        await websocket.close(code=4404, reason="ROOM_NOT_FOUND")
        return

    await websocket.accept()
    username = websocket.query_params.get("username") or None
    session = RoomSession(
        context,
        websocket,
        room_code=code,
        subscriber_id=uuid.uuid4().hex,
        username=username,
    )
    context.hub.subscribe(code, session.subscriber_id, websocket)
    logger.debug("room %s: subscriber %s connected as %s", code, session.subscriber_id, username or "-")
    try:
        await session.send_snapshot()
        await ws_message_loop(
            websocket,
            on_message=session.handle,
            interval_seconds=context.settings.spyroom_ws_heartbeat_seconds,
        )
    except (WebSocketDisconnect, NotFoundError):
        return
    finally:
        context.hub.unsubscribe(code, session.subscriber_id)
        logger.debug("room %s: subscriber %s disconnected", code, session.subscriber_id)

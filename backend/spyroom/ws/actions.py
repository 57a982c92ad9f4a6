"""Client actions received over a room websocket."""

from __future__ import annotations

import logging
from collections.abc import Awaitable
from collections.abc import Callable
from typing import Any

from fastapi.encoders import jsonable_encoder
from starlette.concurrency import run_in_threadpool

from spyroom.api.room_views import room_detail
from spyroom.context import AppContext
from spyroom.rooms.registry import ActionResult
from wordgrid.errors import GameError
from wordgrid.errors import GameValidationError

from .events import events_for_result
from .protocol import parse_client_message
from .protocol import ws_send_event

logger = logging.getLogger(__name__)

ROOM_SNAPSHOT = "ROOM_SNAPSHOT"


class RoomSession:
    """One websocket attached to one room.

    Every action gets exactly one ACK or ERROR addressed to the sender; the
    resulting room events are then published to all subscribers.
    """

    def __init__(
        self,
        context: AppContext,
        websocket: Any,
        *,
        room_code: str,
        subscriber_id: str,
        username: str | None = None,
    ) -> None:
        self.context = context
        self.websocket = websocket
        self.room_code = room_code
        self.subscriber_id = subscriber_id
        self.username = username
        self._handlers: dict[str, Callable[[dict[str, Any]], Awaitable[ActionResult | None]]] = {
            "JOIN": self._join,
            "LEAVE": self._leave,
            "START": self._start,
            "REVEAL": self._reveal,
            "TILE_CLICKED": self._reveal,
            "END_TURN": self._end_turn,
            "REFRESH": self._refresh,
        }

    async def send_snapshot(self) -> None:
        room = await run_in_threadpool(self.context.registry.find, self.room_code)
        await ws_send_event(
            self.websocket,
            ROOM_SNAPSHOT,
            {
                "room": room_detail(
                    room,
                    viewer=self.username,
                    turn_duration_seconds=self.context.turn_duration_seconds,
                )
            },
        )

    async def handle(self, message: str) -> None:
        request = parse_client_message(message)
        if request is None:
            await self._reply_error(
                None,
                None,
                GameValidationError("message must be a JSON object with a string type"),
            )
            return

        action = request["type"].upper()
        request_id = request.get("request_id")
        payload = request.get("payload") or {}
        handler = self._handlers.get(action)
        if handler is None:
            await self._reply_error(
                request_id, action, GameValidationError(f"unknown action {action}", type=action)
            )
            return
        if not isinstance(payload, dict):
            await self._reply_error(
                request_id, action, GameValidationError("payload must be an object", field="payload")
            )
            return

        try:
            result = await handler(payload)
        except GameError as exc:
            logger.info("room %s: %s rejected: %s (%s)", self.room_code, action, exc.code, exc.message)
            await self._reply_error(request_id, action, exc)
            return

        await self._reply_ack(request_id, action, result)
        if result is not None:
            self.context.hub.dispatch(
                result.code,
                events_for_result(result, turn_duration_seconds=self.context.turn_duration_seconds),
            )

    def _actor(self, payload: dict[str, Any]) -> Any:
        return payload.get("username") or self.username

    async def _join(self, payload: dict[str, Any]) -> ActionResult:
        result = await run_in_threadpool(
            self.context.registry.join,
            self.room_code,
            payload.get("username"),
            payload.get("role"),
            payload.get("team"),
        )
        if result.room is not None:
            self.username = result.room.players[-1].username
        return result

    async def _leave(self, payload: dict[str, Any]) -> ActionResult:
        result = await run_in_threadpool(self.context.registry.leave, self.room_code, self._actor(payload))
        self.context.hub.unsubscribe(self.room_code, self.subscriber_id)
        self.username = None
        return result

    async def _start(self, payload: dict[str, Any]) -> ActionResult:
        return await run_in_threadpool(self.context.registry.start, self.room_code, self._actor(payload))

    async def _reveal(self, payload: dict[str, Any]) -> ActionResult:
        return await run_in_threadpool(
            lambda: self.context.registry.reveal(
                self.room_code,
                team=payload.get("team"),
                index=payload.get("index"),
                row=payload.get("row"),
                col=payload.get("col"),
                username=self._actor(payload),
            )
        )

    async def _end_turn(self, payload: dict[str, Any]) -> ActionResult:
        return await run_in_threadpool(self.context.registry.end_turn, self.room_code, self._actor(payload))

    async def _refresh(self, payload: dict[str, Any]) -> None:
        await self.send_snapshot()
        return None

    async def _reply_ack(self, request_id: Any, action: str, result: ActionResult | None) -> None:
        body: dict[str, Any] = {"request_id": request_id, "action": action}
        if result is not None and result.reveal is not None:
            body["tile"] = {
                "index": result.reveal.index,
                "color": result.reveal.color.value,
                "already_revealed": result.reveal.already_revealed,
            }
        if result is not None:
            body["room_deleted"] = result.room_deleted
        await ws_send_event(self.websocket, "ACK", body)

    async def _reply_error(self, request_id: Any, action: str | None, exc: GameError) -> None:
        await ws_send_event(
            self.websocket,
            "ERROR",
            {
                "request_id": request_id,
                "action": action,
                "code": exc.code,
                "message": exc.message,
                "detail": jsonable_encoder(exc.detail),
            },
        )

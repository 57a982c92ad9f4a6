"""WebSocket heartbeat and message-loop utilities."""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable
from collections.abc import Callable
from datetime import datetime
from datetime import timezone
import json
from typing import Any

from fastapi import WebSocketDisconnect

from .protocol import ws_send_event

MessageHandler = Callable[[str], Awaitable[None]]


class HeartbeatState:
    """Track one websocket heartbeat ping/pong lifecycle."""

    def __init__(self) -> None:
        self.last_ping_at: float | None = None
        self.last_pong_at: float | None = None
        self.missed_pong_count = 0
        self._awaiting_pong = False
        self._pong_event = asyncio.Event()

    def mark_ping_sent(self) -> None:
        self.last_ping_at = datetime.now(timezone.utc).timestamp()
        self._awaiting_pong = True
        self._pong_event.clear()

    def mark_pong_received(self) -> None:
        self.last_pong_at = datetime.now(timezone.utc).timestamp()
        if not self._awaiting_pong:
            return
        self._awaiting_pong = False
        self.missed_pong_count = 0
        self._pong_event.set()

    async def wait_for_pong(self, *, timeout_seconds: float) -> bool:
        if not self._awaiting_pong:
            return True
        try:
            await asyncio.wait_for(self._pong_event.wait(), timeout=timeout_seconds)
        except TimeoutError:
            self._awaiting_pong = False
            self.missed_pong_count += 1
            return False
        return True


def is_ping_message(message: str) -> bool:
    return message == "PING" or _message_type(message) == "PING"


def is_pong_message(message: str) -> bool:
    return message == "PONG" or _message_type(message) == "PONG"


def _message_type(message: str) -> str | None:
    try:
        payload = json.loads(message)
    except json.JSONDecodeError:
        return None
    if not isinstance(payload, dict):
        return None
    return payload.get("type")


async def heartbeat_loop(
    websocket: Any,
    *,
    heartbeat_state: HeartbeatState,
    interval_seconds: float = 30.0,
    pong_timeout_seconds: float = 10.0,
    max_missed_pongs: int = 2,
) -> None:
    """Ping every ``interval_seconds``; close with 4408 after repeated missed pongs."""
    pong_timeout_seconds = min(pong_timeout_seconds, interval_seconds)
    sleep_after_ping = max(interval_seconds - pong_timeout_seconds, 0.0)
    while True:
        await asyncio.sleep(interval_seconds if heartbeat_state.last_ping_at is None else sleep_after_ping)
        await ws_send_event(websocket, "PING", {})
        heartbeat_state.mark_ping_sent()
        pong_received = await heartbeat_state.wait_for_pong(timeout_seconds=pong_timeout_seconds)
        if (not pong_received) and heartbeat_state.missed_pong_count >= max_missed_pongs:
            await websocket.close(code=4408, reason="HEARTBEAT_TIMEOUT")
            return


async def ws_message_loop(
    websocket: Any,
    *,
    on_message: MessageHandler,
    interval_seconds: float = 30.0,
) -> None:
    """Receive frames until disconnect; heartbeat frames are handled here, the rest go to ``on_message``."""
    heartbeat_state = HeartbeatState()
    heartbeat_task: asyncio.Task[Any] | None = None
    if interval_seconds > 0:
        heartbeat_task = asyncio.create_task(
            heartbeat_loop(websocket, heartbeat_state=heartbeat_state, interval_seconds=interval_seconds)
        )
    try:
        while True:
            message = await websocket.receive_text()
            if is_ping_message(message):
                await ws_send_event(websocket, "PONG", {})
                continue
            if is_pong_message(message):
                heartbeat_state.mark_pong_received()
                continue
            await on_message(message)
    except WebSocketDisconnect:
        return
    finally:
        if heartbeat_task is not None:
            heartbeat_task.cancel()
            try:
                await heartbeat_task
            except asyncio.CancelledError:
                pass

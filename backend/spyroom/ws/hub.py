"""Per-room publish/subscribe fan-out to connected websockets."""

from __future__ import annotations

import asyncio
import logging
from collections import deque
from typing import Any

from .protocol import ws_send_event

logger = logging.getLogger(__name__)

RoomEvents = list[tuple[str, dict[str, Any]]]


class RoomHub:
    """Tracks room subscribers and delivers events to them.

    Publishing never raises into the caller: subscribers whose send fails are
    dropped as stale. Batches handed to ``dispatch`` are delivered in call
    order per room by a single drain task for that room.
    """

    def __init__(self) -> None:
        self._subscribers: dict[str, dict[str, Any]] = {}
        self._pending: dict[str, deque[RoomEvents]] = {}
        self._drainers: dict[str, asyncio.Task[None]] = {}

    def subscribe(self, room_code: str, subscriber_id: str, websocket: Any) -> None:
        self._subscribers.setdefault(room_code, {})[subscriber_id] = websocket

    def unsubscribe(self, room_code: str, subscriber_id: str) -> None:
        listeners = self._subscribers.get(room_code)
        if not listeners:
            return
        listeners.pop(subscriber_id, None)
        if not listeners:
            self._subscribers.pop(room_code, None)

    def subscriber_ids(self, room_code: str) -> list[str]:
        return sorted(self._subscribers.get(room_code, {}))

    def drop_room(self, room_code: str) -> None:
        self._subscribers.pop(room_code, None)

    async def publish(self, room_code: str, event_type: str, payload: dict[str, Any]) -> int:
        """Send one event to every subscriber of ``room_code``; return the delivery count."""
        listeners = self._subscribers.get(room_code)
        if not listeners:
            return 0

        delivered = 0
        stale: list[str] = []
        for subscriber_id, websocket in list(listeners.items()):
            try:
                await ws_send_event(websocket, event_type, payload)
            except Exception:
                stale.append(subscriber_id)
                continue
            delivered += 1

        for subscriber_id in stale:
            logger.debug("room %s: dropping stale subscriber %s", room_code, subscriber_id)
            self.unsubscribe(room_code, subscriber_id)
        return delivered

    async def publish_events(self, room_code: str, events: RoomEvents) -> None:
        """Publish events in order; a ROOM_DELETED event also forgets the room's subscribers."""
        for event_type, payload in events:
            await self.publish(room_code, event_type, payload)
            if event_type == "ROOM_DELETED":
                self.drop_room(room_code)

    def dispatch(self, room_code: str, events: RoomEvents) -> None:
        """Queue events for ``room_code`` without waiting for delivery."""
        if not events:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            asyncio.run(self.publish_events(room_code, events))
            return
        self._pending.setdefault(room_code, deque()).append(events)
        if room_code not in self._drainers:
            self._drainers[room_code] = loop.create_task(self._drain(room_code))

    async def _drain(self, room_code: str) -> None:
        try:
            while True:
                pending = self._pending.get(room_code)
                if not pending:
                    break
                events = pending.popleft()
                try:
                    await self.publish_events(room_code, events)
                except Exception:
                    logger.exception("room %s: event delivery failed", room_code)
        finally:
            self._drainers.pop(room_code, None)
            if not self._pending.get(room_code):
                self._pending.pop(room_code, None)

    async def wait_idle(self) -> None:
        """Wait until every queued batch has been delivered."""
        while self._drainers:
            await asyncio.gather(*list(self._drainers.values()), return_exceptions=True)


__all__ = ["RoomEvents", "RoomHub"]

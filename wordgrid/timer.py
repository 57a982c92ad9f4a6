"""Turn timer bookkeeping.

Only the turn start is stored; clients derive the remaining time. Expiry is
evaluated on demand so that a server-side sweeper can opt into enforcing it.
"""

from __future__ import annotations

from datetime import datetime
from datetime import timedelta
from datetime import timezone

from wordgrid.models import GameState
from wordgrid.models import Room


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def to_utc_iso(value: datetime) -> str:
    return value.astimezone(timezone.utc).isoformat().replace("+00:00", "Z")


def parse_utc_iso(value: str) -> datetime:
    parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def reset_turn_timer(room: Room, now: datetime) -> None:
    room.timer_start_time = now


def turn_deadline(room: Room, duration_seconds: int) -> datetime | None:
    """Return when the current turn runs out, or None when no deadline applies."""
    if duration_seconds <= 0 or room.game_state is not GameState.ACTIVE:
        return None
    if room.timer_start_time is None:
        return None
    return room.timer_start_time + timedelta(seconds=duration_seconds)


def is_turn_expired(room: Room, *, now: datetime, duration_seconds: int) -> bool:
    deadline = turn_deadline(room, duration_seconds)
    return deadline is not None and now >= deadline


__all__ = [
    "is_turn_expired",
    "parse_utc_iso",
    "reset_turn_timer",
    "to_utc_iso",
    "turn_deadline",
    "utc_now",
]

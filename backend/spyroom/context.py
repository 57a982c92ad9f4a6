"""Explicit application context shared by REST and WebSocket handlers.

Built once per app by ``build_context`` and attached to ``app.state``; handlers
receive it through ``get_context`` instead of reaching for module globals.
"""

from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from spyroom.core.config import Settings
from spyroom.rooms.registry import RoomRegistry
from spyroom.rooms.store import InMemoryRoomStore
from spyroom.rooms.store import RoomStore
from spyroom.rooms.store import SqliteRoomStore
from spyroom.ws.hub import RoomHub
from wordgrid.content import ContentSource
from wordgrid.machine import RuleSet
from wordgrid.policies import resolve_starter_policy
from wordgrid.timer import utc_now


@dataclass(slots=True)
class AppContext:
    settings: Settings
    registry: RoomRegistry
    hub: RoomHub

    @property
    def turn_duration_seconds(self) -> int:
        """Turn length advertised to clients, enforced or not."""
        return self.settings.spyroom_turn_duration_seconds


def build_store(settings: Settings) -> RoomStore:
    if settings.spyroom_store == "sqlite":
        store = SqliteRoomStore(settings.spyroom_sqlite_path)
        store.init_schema()
        return store
    return InMemoryRoomStore()


def build_context(
    settings: Settings,
    *,
    store: RoomStore | None = None,
    content: ContentSource | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> AppContext:
    registry = RoomRegistry(
        store if store is not None else build_store(settings),
        content=content,
        rules=RuleSet(
            wrong_team_forfeits_turn=settings.spyroom_wrong_team_forfeits_turn,
            win_on_team_tiles_exhausted=settings.spyroom_win_on_team_tiles_exhausted,
        ),
        starter_policy=resolve_starter_policy(settings.spyroom_starter_policy),
        max_players=settings.spyroom_max_players,
        turn_timeout_seconds=(
            settings.spyroom_turn_duration_seconds if settings.spyroom_enforce_turn_timeout else 0
        ),
        clock=clock,
    )
    return AppContext(settings=settings, registry=registry, hub=RoomHub())


def startup(context: AppContext) -> None:
    """Run one-time storage maintenance before serving traffic."""
    store = context.registry.store
    if isinstance(store, SqliteRoomStore):
        store.migrate_legacy_documents()


__all__ = ["AppContext", "build_context", "build_store", "startup"]

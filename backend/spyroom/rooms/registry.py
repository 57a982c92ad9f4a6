"""Room registry: resolves room codes and serializes every mutation per room."""

from __future__ import annotations

import logging
import re
import threading
from collections.abc import Callable
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass
from datetime import datetime

from wordgrid import machine
from wordgrid import roster
from wordgrid.content import ContentSource
from wordgrid.content import RandomContentSource
from wordgrid.errors import GameStateError
from wordgrid.errors import GameValidationError
from wordgrid.errors import InternalError
from wordgrid.errors import NotFoundError
from wordgrid.grid import RevealResult
from wordgrid.grid import TileGrid
from wordgrid.machine import DEFAULT_RULES
from wordgrid.machine import RevealEffect
from wordgrid.machine import RuleSet
from wordgrid.models import DEFAULT_MAX_PLAYERS
from wordgrid.models import GameState
from wordgrid.models import Room
from wordgrid.models import Team
from wordgrid.policies import StarterPolicy
from wordgrid.policies import first_team_member
from wordgrid.timer import is_turn_expired
from wordgrid.timer import utc_now
from wordgrid.usernames import normalize_username

from spyroom.rooms.locks import RoomLocks
from spyroom.rooms.store import RoomStore

logger = logging.getLogger(__name__)

ROOM_CODE_PATTERN = re.compile(r"^[A-Z0-9]{4,12}$")


def normalize_room_code(raw_code: object) -> str:
    if not isinstance(raw_code, str) or not raw_code.strip():
        raise GameValidationError("room code is required", field="room_code")
    return raw_code.strip().upper()


def validate_new_room_code(raw_code: object) -> str:
    code = normalize_room_code(raw_code)
    if not ROOM_CODE_PATTERN.match(code):
        raise GameValidationError(
            "room code must be 4-12 letters or digits",
            field="room_code",
            room_code=code,
        )
    return code


def _optional_username(raw: object) -> str | None:
    if not isinstance(raw, str) or not raw.strip():
        return None
    return normalize_username(raw)


def _required_username(raw: object, message: str) -> str:
    username = _optional_username(raw)
    if username is None:
        raise GameValidationError(message, field="username")
    return username


class _Unchanged(Exception):
    """Aborts a mutation that turned out to change nothing."""

    def __init__(self, room: Room) -> None:
        super().__init__(room.code)
        self.room = room


@dataclass(slots=True)
class ActionResult:
    """What one committed action changed; drives the events published afterwards."""

    action: str
    code: str
    room: Room | None
    players_changed: bool = False
    grid_changed: bool = False
    turn_switched: bool = False
    game_started: bool = False
    game_ended: bool = False
    room_deleted: bool = False
    reveal: RevealResult | None = None


class RoomRegistry:
    """Maps room codes to stored rooms and applies actions atomically."""

    def __init__(
        self,
        store: RoomStore,
        *,
        content: ContentSource | None = None,
        rules: RuleSet = DEFAULT_RULES,
        starter_policy: StarterPolicy = first_team_member,
        max_players: int = DEFAULT_MAX_PLAYERS,
        turn_timeout_seconds: int = 0,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._store = store
        self._content = content or RandomContentSource()
        self._rules = rules
        self._starter_policy = starter_policy
        self._max_players = max_players
        self._turn_timeout_seconds = turn_timeout_seconds
        self._clock = clock
        self._room_locks = RoomLocks(threading.RLock)

    @property
    def store(self) -> RoomStore:
        return self._store

    @property
    def turn_timeout_seconds(self) -> int:
        return self._turn_timeout_seconds

    @contextmanager
    def lock_room(self, code: str) -> Iterator[None]:
        """Acquire one room write lock."""
        with self._room_locks.hold(code):
            yield

    def _mutate(self, code: str, action: str, mutation: Callable[[Room, datetime], None]) -> Room:
        now = self._clock()

        def _apply(room: Room) -> None:
            mutation(room, now)
            room.last_activity = now

        with self.lock_room(code):
            logger.debug("room %s: applying %s", code, action)
            return self._store.apply_mutation(code, _apply)

    def find(self, code: str) -> Room:
        """Return the stored room for ``code``."""
        return self._store.load(normalize_room_code(code))

    def list_codes(self) -> list[str]:
        return self._store.list_codes()

    def create(self, code: str, username: object, role: object, team: object) -> ActionResult:
        """Create a waiting room owned by its first player."""
        room_code = validate_new_room_code(code)
        creator = roster.build_player(username, role, team)
        grid = TileGrid.generate(self._content.words(), self._content.color_pattern())
        now = self._clock()
        room = Room(
            code=room_code,
            grid=grid.tiles,
            max_players=self._max_players,
            created_at=now,
            last_activity=now,
        )
        roster.join(room, creator)
        with self.lock_room(room_code):
            room = self._store.insert(room)
        logger.info("room %s created by %s", room_code, creator.username)
        return ActionResult(action="create", code=room_code, room=room, players_changed=True)

    def delete(self, code: str) -> bool:
        """Remove a room; missing codes are ignored."""
        room_code = normalize_room_code(code)
        with self.lock_room(room_code):
            deleted = self._store.delete(room_code)
        if deleted:
            logger.info("room %s deleted", room_code)
        return deleted

    def delete_ended(self, code: str) -> ActionResult:
        """Explicitly discard a finished room."""
        room_code = normalize_room_code(code)
        with self.lock_room(room_code):
            room = self._store.load(room_code)
            if room.game_state is not GameState.ENDED:
                raise GameStateError(
                    f"room {room_code} can only be deleted after the game ended",
                    game_state=room.game_state.value,
                )
            self._store.delete(room_code)
        logger.info("room %s deleted after game end", room_code)
        return ActionResult(action="delete", code=room_code, room=None, room_deleted=True)

    def join(self, code: str, username: object, role: object, team: object) -> ActionResult:
        room_code = normalize_room_code(code)
        player = roster.build_player(username, role, team)
        room = self._mutate(room_code, "join", lambda room, now: roster.join(room, player))
        logger.info(
            "room %s: %s joined as %s/%s",
            room_code,
            player.username,
            player.team.value,
            player.role.value,
        )
        return ActionResult(action="join", code=room_code, room=room, players_changed=True)

    def leave(self, code: str, username: object) -> ActionResult:
        """Remove a player; the room is destroyed once nobody is left."""
        room_code = normalize_room_code(code)
        leaving = _required_username(username, "username is required")
        emptied = False

        def _leave(room: Room, now: datetime) -> None:
            nonlocal emptied
            if roster.find_player(room, leaving) is None:
                raise _Unchanged(room)
            emptied = roster.leave(room, leaving)

        with self.lock_room(room_code):
            try:
                room = self._mutate(room_code, "leave", _leave)
            except _Unchanged as unchanged:
                logger.info("room %s: %s is not a member; leave ignored", room_code, leaving)
                return ActionResult(action="leave", code=room_code, room=unchanged.room)
            if emptied:
                self._store.delete(room_code)
        logger.info("room %s: %s left", room_code, leaving)
        if emptied:
            logger.info("room %s deleted: last player left", room_code)
            return ActionResult(action="leave", code=room_code, room=None, room_deleted=True)
        return ActionResult(action="leave", code=room_code, room=room, players_changed=True)

    def start(self, code: str, username: object) -> ActionResult:
        room_code = normalize_room_code(code)
        requester = _required_username(username, "requester username is required")
        room = self._mutate(
            room_code,
            "start",
            lambda room, now: machine.start(room, requester, now=now, policy=self._starter_policy),
        )
        logger.info("room %s: game started by %s", room_code, requester)
        return ActionResult(action="start", code=room_code, room=room, game_started=True)

    def reveal(
        self,
        code: str,
        *,
        team: object = None,
        index: int | None = None,
        row: int | None = None,
        col: int | None = None,
        username: str | None = None,
    ) -> ActionResult:
        """Reveal one tile; a repeated reveal reports ``already_revealed`` and changes nothing."""
        room_code = normalize_room_code(code)
        if index is None:
            if row is None or col is None:
                raise GameValidationError("tile index or row/col is required", field="index")
            index = TileGrid.index_of(row, col)
        actor = _optional_username(username)
        outcome: tuple[RevealResult, RevealEffect | None] | None = None

        def _reveal(room: Room, now: datetime) -> None:
            nonlocal outcome
            acting_team = self._resolve_acting_team(room, team, actor)
            outcome = machine.reveal(room, index, acting_team, now=now, actor=actor, rules=self._rules)
            if outcome[1] is None:
                raise _Unchanged(room)

        try:
            room = self._mutate(room_code, "reveal", _reveal)
        except _Unchanged as unchanged:
            room = unchanged.room
        if outcome is None:
            raise InternalError(f"room {room_code}: reveal did not run", room_code=room_code)
        result, effect = outcome
        if effect is None:
            logger.info("room %s: tile %d already revealed; ignored", room_code, result.index)
            return ActionResult(action="reveal", code=room_code, room=room, reveal=result)

        logger.info(
            "room %s: tile %d (%s) revealed by %s -> %s",
            room_code,
            result.index,
            result.color.value,
            actor or "-",
            effect.outcome,
        )
        return ActionResult(
            action="reveal",
            code=room_code,
            room=room,
            grid_changed=True,
            turn_switched=effect.turn_switched,
            game_ended=effect.game_ended,
            reveal=result,
        )

    @staticmethod
    def _resolve_acting_team(room: Room, raw_team: object, actor: str | None) -> Team:
        player = roster.find_player(room, actor) if actor else None
        if raw_team is None or (isinstance(raw_team, str) and not raw_team.strip()):
            if player is None:
                raise GameValidationError("acting team is required", field="team")
            return player.team
        team = Team.parse(raw_team, field_name="team")
        if player is not None and player.team is not team:
            raise GameValidationError(
                f"{player.username!r} plays for {player.team.value}, not {team.value}",
                field="team",
            )
        return team

    def end_turn(self, code: str, username: str | None = None) -> ActionResult:
        room_code = normalize_room_code(code)
        actor = _optional_username(username)
        room = self._mutate(
            room_code,
            "end_turn",
            lambda room, now: machine.end_turn(room, now=now, actor=actor),
        )
        logger.info(
            "room %s: turn ended by %s; %s to play",
            room_code,
            actor or "-",
            room.current_turn_team.value if room.current_turn_team else "-",
        )
        return ActionResult(action="end_turn", code=room_code, room=room, turn_switched=True)

    def expire_turn(self, code: str) -> ActionResult:
        """Hand over the turn when its deadline passed; a no-op otherwise."""
        room_code = normalize_room_code(code)
        switched_to: Team | None = None

        def _expire(room: Room, now: datetime) -> None:
            nonlocal switched_to
            switched_to = machine.expire_turn(room, now=now, duration_seconds=self._turn_timeout_seconds)

        with self.lock_room(room_code):
            room = self._store.load(room_code)
            if not is_turn_expired(room, now=self._clock(), duration_seconds=self._turn_timeout_seconds):
                return ActionResult(action="expire_turn", code=room_code, room=room)
            room = self._mutate(room_code, "expire_turn", _expire)
        if switched_to is None:
            return ActionResult(action="expire_turn", code=room_code, room=room)
        logger.info("room %s: turn timed out; %s to play", room_code, switched_to.value)
        return ActionResult(action="expire_turn", code=room_code, room=room, turn_switched=True)

    def expire_due_turns(self) -> list[ActionResult]:
        """Sweep every room once and return the turns that were handed over."""
        switched: list[ActionResult] = []
        for code in self._store.list_codes():
            try:
                result = self.expire_turn(code)
            except NotFoundError:
                continue
            if result.turn_switched:
                switched.append(result)
        return switched


__all__ = [
    "ActionResult",
    "ROOM_CODE_PATTERN",
    "RoomRegistry",
    "normalize_room_code",
    "validate_new_room_code",
]

"""Room state machine: waiting -> active -> ended.

Every function mutates the given room in place and raises a ``GameError``
subclass without touching it when the action is illegal.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

from wordgrid.errors import GameStateError
from wordgrid.errors import UnauthorizedError
from wordgrid.grid import RevealResult
from wordgrid.grid import TileGrid
from wordgrid.models import GameState
from wordgrid.models import Player
from wordgrid.models import Room
from wordgrid.models import Team
from wordgrid.models import TileColor
from wordgrid.models import TurnRecord
from wordgrid.policies import FIRST_TURN_TEAM
from wordgrid.policies import StarterPolicy
from wordgrid.policies import first_team_member
from wordgrid.roster import find_player
from wordgrid.timer import is_turn_expired
from wordgrid.timer import reset_turn_timer

OUTCOME_CONTINUE = "continue"
OUTCOME_TURN_PASSED = "turn_passed"
REASON_BLACK_TILE = "black_tile"
REASON_ALL_TILES_REVEALED = "all_tiles_revealed"


@dataclass(frozen=True, slots=True)
class RuleSet:
    """Optional rules layered on top of the neutral/black tile behavior."""

    wrong_team_forfeits_turn: bool = True
    win_on_team_tiles_exhausted: bool = True


DEFAULT_RULES = RuleSet()


@dataclass(frozen=True, slots=True)
class RevealEffect:
    outcome: str
    turn_switched: bool = False
    game_ended: bool = False


def _require_state(room: Room, expected: GameState, action: str) -> None:
    if room.game_state is not expected:
        raise GameStateError(
            f"cannot {action} while room is {room.game_state.value}",
            game_state=room.game_state.value,
        )


def _end_game(room: Room, *, winner: Team, reason: str) -> None:
    room.game_state = GameState.ENDED
    room.winner = winner
    room.end_reason = reason
    room.current_turn_team = None


def start(
    room: Room,
    requester: str,
    *,
    now: datetime,
    policy: StarterPolicy = first_team_member,
) -> Player:
    """Move a waiting room into its first turn."""
    _require_state(room, GameState.WAITING, "start the game")
    player = find_player(room, requester)
    if player is None or not policy(room, player):
        raise UnauthorizedError(
            f"{requester!r} is not allowed to start the game",
            username=requester,
        )
    room.game_state = GameState.ACTIVE
    room.current_turn_team = FIRST_TURN_TEAM
    reset_turn_timer(room, now)
    room.turn_history.append(
        TurnRecord(kind="start", team=FIRST_TURN_TEAM, at=now, actor=player.username)
    )
    return player


def advance_turn(room: Room, *, now: datetime) -> Team:
    _require_state(room, GameState.ACTIVE, "advance the turn")
    if room.current_turn_team is None:
        raise GameStateError("active room has no team to play", game_state=room.game_state.value)
    room.current_turn_team = room.current_turn_team.opponent
    reset_turn_timer(room, now)
    return room.current_turn_team


def apply_reveal_effect(
    room: Room,
    revealed_color: TileColor,
    revealing_team: Team,
    *,
    now: datetime,
    rules: RuleSet = DEFAULT_RULES,
) -> RevealEffect:
    """Resolve the turn/game consequences of a freshly revealed tile."""
    _require_state(room, GameState.ACTIVE, "resolve a reveal")

    if revealed_color is TileColor.BLACK:
        _end_game(room, winner=revealing_team.opponent, reason=REASON_BLACK_TILE)
        return RevealEffect(outcome=REASON_BLACK_TILE, game_ended=True)

    owner = revealed_color.team
    if owner is not None and rules.win_on_team_tiles_exhausted:
        if TileGrid(room.grid).remaining(owner) == 0:
            _end_game(room, winner=owner, reason=REASON_ALL_TILES_REVEALED)
            return RevealEffect(outcome=REASON_ALL_TILES_REVEALED, game_ended=True)

    if revealed_color is TileColor.NEUTRAL:
        advance_turn(room, now=now)
        return RevealEffect(outcome=OUTCOME_TURN_PASSED, turn_switched=True)

    if owner is not revealing_team and rules.wrong_team_forfeits_turn:
        advance_turn(room, now=now)
        return RevealEffect(outcome=OUTCOME_TURN_PASSED, turn_switched=True)

    return RevealEffect(outcome=OUTCOME_CONTINUE)


def reveal(
    room: Room,
    index: int,
    team: Team,
    *,
    now: datetime,
    actor: str | None = None,
    rules: RuleSet = DEFAULT_RULES,
) -> tuple[RevealResult, RevealEffect | None]:
    """Reveal one tile for the team holding the turn.

    A repeated reveal returns ``(result, None)``: no effect, no history entry.
    """
    _require_state(room, GameState.ACTIVE, "reveal a tile")
    if team is not room.current_turn_team:
        raise GameStateError(
            f"it is not {team.value}'s turn",
            team=team.value,
            current_turn_team=room.current_turn_team.value if room.current_turn_team else None,
        )

    result = TileGrid(room.grid).reveal(index)
    if result.already_revealed:
        return result, None

    effect = apply_reveal_effect(room, result.color, team, now=now, rules=rules)
    room.turn_history.append(
        TurnRecord(
            kind="reveal",
            team=team,
            at=now,
            actor=actor,
            tile_index=index,
            outcome=effect.outcome,
        )
    )
    return result, effect


def end_turn(room: Room, *, now: datetime, actor: str | None = None) -> Team:
    """Player-initiated turn hand-off."""
    _require_state(room, GameState.ACTIVE, "end the turn")
    previous = room.current_turn_team
    next_team = advance_turn(room, now=now)
    room.turn_history.append(
        TurnRecord(kind="end_turn", team=previous, at=now, actor=actor, outcome=OUTCOME_TURN_PASSED)
    )
    return next_team


def expire_turn(room: Room, *, now: datetime, duration_seconds: int) -> Team | None:
    """Hand the turn over if its deadline has passed; return the new team or None."""
    if not is_turn_expired(room, now=now, duration_seconds=duration_seconds):
        return None
    previous = room.current_turn_team
    next_team = advance_turn(room, now=now)
    room.turn_history.append(
        TurnRecord(kind="timeout", team=previous, at=now, outcome=OUTCOME_TURN_PASSED)
    )
    return next_team


__all__ = [
    "DEFAULT_RULES",
    "OUTCOME_CONTINUE",
    "OUTCOME_TURN_PASSED",
    "REASON_ALL_TILES_REVEALED",
    "REASON_BLACK_TILE",
    "RevealEffect",
    "RuleSet",
    "advance_turn",
    "apply_reveal_effect",
    "end_turn",
    "expire_turn",
    "reveal",
    "start",
]

"""Roster: username rules, spymaster uniqueness and capacity."""

from __future__ import annotations

import pytest

from grid_testkit import make_room
from wordgrid import roster
from wordgrid.errors import GameValidationError
from wordgrid.errors import RoleConflictError
from wordgrid.errors import RoomFullError
from wordgrid.errors import UsernameTakenError
from wordgrid.models import Role
from wordgrid.models import Team
from wordgrid.usernames import count_graphemes
from wordgrid.usernames import normalize_and_validate_username


def test_build_player_normalizes_username_and_parses_enums() -> None:
    player = roster.build_player("  Alice ", "spymaster", "red")

    assert player.username == "Alice"
    assert player.role is Role.SPYMASTER
    assert player.team is Team.RED


@pytest.mark.parametrize(
    ("username", "role", "team"),
    [
        (None, "Agent", "Red"),
        ("   ", "Agent", "Red"),
        ("alice", None, "Red"),
        ("alice", "Agent", ""),
        ("alice", "Captain", "Red"),
        ("alice", "Agent", "Green"),
        (42, "Agent", "Red"),
    ],
)
def test_build_player_rejects_missing_or_malformed_fields(username, role, team) -> None:
    with pytest.raises(GameValidationError):
        roster.build_player(username, role, team)


def test_username_length_counts_graphemes_not_code_points() -> None:
    family = "\U0001F468\u200d\U0001F469\u200d\U0001F467"
    assert count_graphemes(family) == 1
    assert normalize_and_validate_username(family * 20) == family * 20
    with pytest.raises(GameValidationError):
        normalize_and_validate_username("x" * 21)


def test_username_is_nfc_normalized() -> None:
    decomposed = "Jose\u0301"
    assert normalize_and_validate_username(decomposed) == "Jos\u00e9"


def test_join_rejects_second_spymaster_for_same_team() -> None:
    room = make_room(players=[("alice", "Spymaster", "Red")])

    with pytest.raises(RoleConflictError):
        roster.join(room, roster.build_player("bob", "Spymaster", "Red"))

    roster.join(room, roster.build_player("carol", "Spymaster", "Blue"))
    assert [player.username for player in room.players] == ["alice", "carol"]


def test_join_rejects_exact_duplicate_username_but_keeps_case_distinct() -> None:
    room = make_room(players=[("alice", "Agent", "Red")])

    with pytest.raises(UsernameTakenError):
        roster.join(room, roster.build_player("alice", "Agent", "Blue"))

    roster.join(room, roster.build_player("Alice", "Agent", "Blue"))
    assert len(room.players) == 2


def test_join_rejects_when_room_is_full() -> None:
    room = make_room(players=[("a1", "Agent", "Red"), ("a2", "Agent", "Blue")], max_players=2)

    with pytest.raises(RoomFullError):
        roster.join(room, roster.build_player("a3", "Agent", "Red"))


def test_leave_reports_whether_roster_is_empty() -> None:
    room = make_room(players=[("alice", "Spymaster", "Red"), ("bob", "Agent", "Red")])

    assert roster.leave(room, "bob") is False
    assert roster.leave(room, "nobody") is False
    assert roster.leave(room, "alice") is True
    assert room.players == []


def test_spymaster_slot_reopens_after_leave() -> None:
    room = make_room(players=[("alice", "Spymaster", "Red"), ("bob", "Agent", "Red")])
    roster.leave(room, "alice")

    roster.join(room, roster.build_player("erin", "Spymaster", "Red"))

    assert roster.spymaster_for(room, Team.RED).username == "erin"
    assert [p.username for p in roster.team_members(room, Team.RED)] == ["bob", "erin"]

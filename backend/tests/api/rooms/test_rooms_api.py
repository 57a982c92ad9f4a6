"""Room REST contract tests."""

from __future__ import annotations

from fastapi.testclient import TestClient

from room_testkit import BLACK_INDEX
from room_testkit import NEUTRAL_INDEX
from room_testkit import RED_INDEXES


def _create(client: TestClient, code: str = "ABC12", **creator: str):
    return client.post(
        "/api/rooms",
        json={
            "room_code": code,
            "creator": creator or {"username": "alice", "role": "Spymaster", "team": "Red"},
        },
    )


def _seat_full_room(client: TestClient, code: str = "ABC12") -> None:
    assert _create(client, code).status_code == 201
    for username, role, team in (
        ("bob", "Agent", "Red"),
        ("carol", "Spymaster", "Blue"),
        ("dave", "Agent", "Blue"),
    ):
        response = client.post(
            f"/api/rooms/{code}/join",
            json={"username": username, "role": role, "team": team},
        )
        assert response.status_code == 200


def _assert_error(response, status_code: int, code: str) -> dict:
    assert response.status_code == status_code
    payload = response.json()
    assert set(payload) == {"code", "message", "detail"}
    assert payload["code"] == code
    return payload


def test_health(client: TestClient) -> None:
    response = client.get("/api/health")
    assert response.status_code == 200
    assert response.json()["status"] == "ok"
    assert response.json()["rooms"] == 0


def test_create_room_returns_201_with_room_view(client: TestClient) -> None:
    response = _create(client, "abc12")

    assert response.status_code == 201
    room = response.json()
    assert room["room_code"] == "ABC12"
    assert room["game_state"] == "waiting"
    assert room["players"] == [{"username": "alice", "role": "Spymaster", "team": "Red"}]
    assert len(room["grid"]) == 25
    assert room["grid"][BLACK_INDEX]["color"] == "black"


def test_create_accepts_camel_case_room_code(client: TestClient) -> None:
    response = client.post(
        "/api/rooms",
        json={"roomCode": "CAMEL1", "creator": {"username": "alice", "role": "Agent", "team": "Red"}},
    )
    assert response.status_code == 201
    assert response.json()["room_code"] == "CAMEL1"


def test_duplicate_code_conflicts(client: TestClient) -> None:
    _create(client)
    _assert_error(_create(client), 409, "ROOM_CODE_TAKEN")


def test_validation_errors_use_envelope(client: TestClient) -> None:
    _assert_error(_create(client, "AB"), 400, "VALIDATION_ERROR")
    _assert_error(_create(client, "ABC12", username="bob", role="Captain", team="Red"), 400, "VALIDATION_ERROR")
    _assert_error(client.post("/api/rooms", json={"creator": "nope"}), 400, "VALIDATION_ERROR")


def test_get_room_masks_colors_unless_spymaster(client: TestClient) -> None:
    _seat_full_room(client)

    anonymous = client.get("/api/rooms/abc12").json()
    agent = client.get("/api/rooms/ABC12", params={"viewer": "bob"}).json()
    spymaster = client.get("/api/rooms/ABC12", params={"viewer": "carol"}).json()

    assert anonymous["grid"][BLACK_INDEX]["color"] is None
    assert agent["grid"][BLACK_INDEX]["color"] is None
    assert spymaster["grid"][BLACK_INDEX]["color"] == "black"


def test_missing_room_is_404(client: TestClient) -> None:
    payload = _assert_error(client.get("/api/rooms/NOPE1"), 404, "ROOM_NOT_FOUND")
    assert payload["detail"] == {"room_code": "NOPE1"}


def test_second_spymaster_conflicts(client: TestClient) -> None:
    _create(client)
    response = client.post(
        "/api/rooms/ABC12/join",
        json={"username": "bob", "role": "Spymaster", "team": "Red"},
    )
    _assert_error(response, 409, "ROLE_CONFLICT")


def test_start_authorization_and_state(client: TestClient) -> None:
    _seat_full_room(client)

    _assert_error(client.post("/api/rooms/ABC12/start", json={"username": "dave"}), 403, "UNAUTHORIZED")

    started = client.post("/api/rooms/ABC12/start", json={"username": "bob"})
    assert started.status_code == 200
    assert started.json()["game_state"] == "active"
    assert started.json()["current_turn_team"] == "Red"
    assert started.json()["timer_start_time"] is not None

    _assert_error(client.post("/api/rooms/ABC12/start", json={"username": "bob"}), 409, "INVALID_STATE")


def test_reveal_flow(client: TestClient) -> None:
    _seat_full_room(client)
    client.post("/api/rooms/ABC12/start", json={"username": "bob"})

    own = client.post("/api/rooms/ABC12/reveal", json={"index": RED_INDEXES[0], "username": "bob"})
    assert own.status_code == 200
    assert own.json()["tile"] == {"index": RED_INDEXES[0], "color": "red", "already_revealed": False}
    assert own.json()["room"]["current_turn_team"] == "Red"

    again = client.post("/api/rooms/ABC12/reveal", json={"index": RED_INDEXES[0], "team": "Red"})
    assert again.json()["tile"]["already_revealed"] is True

    neutral = client.post("/api/rooms/ABC12/reveal", json={"row": 0, "col": 0, "team": "Red"})
    assert neutral.json()["tile"]["index"] == NEUTRAL_INDEX
    assert neutral.json()["room"]["current_turn_team"] == "Blue"

    _assert_error(
        client.post("/api/rooms/ABC12/reveal", json={"index": RED_INDEXES[1], "team": "Red"}),
        409,
        "INVALID_STATE",
    )
    _assert_error(
        client.post("/api/rooms/ABC12/reveal", json={"index": 25, "team": "Blue"}),
        400,
        "INVALID_INDEX",
    )


def test_end_turn_and_black_tile_then_delete(client: TestClient) -> None:
    _seat_full_room(client)
    client.post("/api/rooms/ABC12/start", json={"username": "bob"})
    _assert_error(client.delete("/api/rooms/ABC12"), 409, "INVALID_STATE")

    ended_turn = client.post("/api/rooms/ABC12/end-turn", json={"username": "bob"})
    assert ended_turn.json()["current_turn_team"] == "Blue"

    black = client.post("/api/rooms/ABC12/reveal", json={"index": BLACK_INDEX, "username": "dave"})
    room = black.json()["room"]
    assert room["game_state"] == "ended"
    assert room["winner"] == "Red"
    assert room["end_reason"] == "black_tile"
    assert all(tile["color"] is not None for tile in room["grid"])

    assert client.delete("/api/rooms/ABC12").status_code == 204
    _assert_error(client.get("/api/rooms/ABC12"), 404, "ROOM_NOT_FOUND")


def test_last_leave_deletes_room(client: TestClient) -> None:
    _create(client)

    response = client.post("/api/rooms/ABC12/leave", json={"username": "alice"})

    assert response.json() == {"ok": True, "room_deleted": True}
    _assert_error(client.get("/api/rooms/ABC12"), 404, "ROOM_NOT_FOUND")

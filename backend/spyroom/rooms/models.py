"""Pydantic models for room APIs.

Membership fields are optional here so that missing values are reported by the
roster rules with the same error for REST and WebSocket callers.
"""

from __future__ import annotations

from pydantic import AliasChoices
from pydantic import BaseModel
from pydantic import Field


class PlayerPayload(BaseModel):
    username: str | None = None
    role: str | None = None
    team: str | None = None


class CreateRoomRequest(BaseModel):
    """POST /api/rooms request body."""

    room_code: str | None = Field(default=None, validation_alias=AliasChoices("room_code", "roomCode"))
    creator: PlayerPayload = Field(default_factory=PlayerPayload)


class JoinRequest(PlayerPayload):
    """POST /api/rooms/{code}/join request body."""


class LeaveRequest(BaseModel):
    """POST /api/rooms/{code}/leave request body."""

    username: str | None = None


class StartRequest(BaseModel):
    """POST /api/rooms/{code}/start request body."""

    username: str | None = None


class RevealRequest(BaseModel):
    """POST /api/rooms/{code}/reveal request body (flat index or row/col)."""

    index: int | None = None
    row: int | None = None
    col: int | None = None
    team: str | None = None
    username: str | None = None


class EndTurnRequest(BaseModel):
    """POST /api/rooms/{code}/end-turn request body."""

    username: str | None = None

"""Domain error taxonomy shared by the rules package and the room service."""

from __future__ import annotations


class GameError(Exception):
    """Base class for all room/game errors.

    ``code`` is the stable identifier reported to clients.
    """

    code = "GAME_ERROR"

    def __init__(self, message: str, **detail: object) -> None:
        super().__init__(message)
        self.message = message
        self.detail = detail


class GameValidationError(GameError):
    """Raised on missing or malformed input."""

    code = "VALIDATION_ERROR"


class InvalidPatternError(GameValidationError):
    """Raised when a grid is built from a pattern that is not 25 entries long."""

    code = "INVALID_PATTERN"


class InvalidIndexError(GameValidationError):
    """Raised when a tile index falls outside the grid."""

    code = "INVALID_INDEX"


class NotFoundError(GameError):
    code = "NOT_FOUND"


class RoomNotFoundError(NotFoundError):
    code = "ROOM_NOT_FOUND"


class ConflictError(GameError):
    code = "CONFLICT"


class RoomCodeTakenError(ConflictError):
    code = "ROOM_CODE_TAKEN"


class UsernameTakenError(ConflictError):
    code = "USERNAME_TAKEN"


class RoleConflictError(ConflictError):
    """Raised when a team already has its spymaster."""

    code = "ROLE_CONFLICT"


class RoomFullError(ConflictError):
    code = "ROOM_FULL"


class GameStateError(GameError):
    """Raised when an action is not valid for the room's current state."""

    code = "INVALID_STATE"


class UnauthorizedError(GameError):
    """Raised when the starter policy rejects the requester."""

    code = "UNAUTHORIZED"


class InternalError(GameError):
    """Raised when persistence or broadcast infrastructure fails."""

    code = "INTERNAL_ERROR"


__all__ = [
    "ConflictError",
    "GameError",
    "GameStateError",
    "GameValidationError",
    "InternalError",
    "InvalidIndexError",
    "InvalidPatternError",
    "NotFoundError",
    "RoleConflictError",
    "RoomCodeTakenError",
    "RoomFullError",
    "RoomNotFoundError",
    "UnauthorizedError",
    "UsernameTakenError",
]

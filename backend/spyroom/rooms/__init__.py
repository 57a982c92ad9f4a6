"""Room service package: registry, persistence gateways and request models."""

from spyroom.rooms.models import CreateRoomRequest
from spyroom.rooms.models import EndTurnRequest
from spyroom.rooms.models import JoinRequest
from spyroom.rooms.models import LeaveRequest
from spyroom.rooms.models import RevealRequest
from spyroom.rooms.models import StartRequest
from spyroom.rooms.registry import ActionResult
from spyroom.rooms.registry import RoomRegistry
from spyroom.rooms.store import InMemoryRoomStore
from spyroom.rooms.store import RoomStore
from spyroom.rooms.store import SqliteRoomStore

__all__ = [
    "ActionResult",
    "CreateRoomRequest",
    "EndTurnRequest",
    "InMemoryRoomStore",
    "JoinRequest",
    "LeaveRequest",
    "RevealRequest",
    "RoomRegistry",
    "RoomStore",
    "SqliteRoomStore",
    "StartRequest",
]

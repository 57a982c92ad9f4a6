"""Room REST routes."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from fastapi import Response
from starlette.concurrency import run_in_threadpool

from spyroom.api.deps import get_context
from spyroom.api.room_views import room_detail
from spyroom.context import AppContext
from spyroom.rooms.models import CreateRoomRequest
from spyroom.rooms.models import EndTurnRequest
from spyroom.rooms.models import JoinRequest
from spyroom.rooms.models import LeaveRequest
from spyroom.rooms.models import RevealRequest
from spyroom.rooms.models import StartRequest
from spyroom.rooms.registry import ActionResult
from spyroom.ws.events import events_for_result
from wordgrid.errors import InternalError

router = APIRouter()


def _publish(context: AppContext, result: ActionResult) -> None:
    context.hub.dispatch(
        result.code,
        events_for_result(result, turn_duration_seconds=context.turn_duration_seconds),
    )


def _detail(context: AppContext, result: ActionResult, viewer: str | None = None) -> dict[str, object]:
    if result.room is None:
        raise InternalError(f"room {result.code} has no state to show", room_code=result.code)
    return room_detail(result.room, viewer=viewer, turn_duration_seconds=context.turn_duration_seconds)


@router.post("/api/rooms", status_code=201)
async def create_room(
    payload: CreateRoomRequest,
    context: AppContext = Depends(get_context),
) -> dict[str, object]:
    """Create a room with its first player."""
    creator = payload.creator
    result = await run_in_threadpool(
        context.registry.create,
        payload.room_code,
        creator.username,
        creator.role,
        creator.team,
    )
    _publish(context, result)
    return _detail(context, result, viewer=result.room.players[0].username if result.room else None)


@router.get("/api/rooms/{room_code}")
async def get_room(
    room_code: str,
    viewer: str | None = None,
    context: AppContext = Depends(get_context),
) -> dict[str, object]:
    """Return one room; tile colors are shown to spymasters and after the game ended."""
    room = await run_in_threadpool(context.registry.find, room_code)
    return room_detail(room, viewer=viewer, turn_duration_seconds=context.turn_duration_seconds)


@router.post("/api/rooms/{room_code}/join")
async def join_room(
    room_code: str,
    payload: JoinRequest,
    context: AppContext = Depends(get_context),
) -> dict[str, object]:
    result = await run_in_threadpool(
        context.registry.join,
        room_code,
        payload.username,
        payload.role,
        payload.team,
    )
    _publish(context, result)
    return _detail(context, result, viewer=result.room.players[-1].username if result.room else None)


@router.post("/api/rooms/{room_code}/leave")
async def leave_room(
    room_code: str,
    payload: LeaveRequest,
    context: AppContext = Depends(get_context),
) -> dict[str, object]:
    """Leave a room; the response reports whether the room was deleted."""
    result = await run_in_threadpool(context.registry.leave, room_code, payload.username)
    _publish(context, result)
    return {"ok": True, "room_deleted": result.room_deleted}


@router.post("/api/rooms/{room_code}/start")
async def start_game(
    room_code: str,
    payload: StartRequest,
    context: AppContext = Depends(get_context),
) -> dict[str, object]:
    result = await run_in_threadpool(context.registry.start, room_code, payload.username)
    _publish(context, result)
    return _detail(context, result, viewer=payload.username)


@router.post("/api/rooms/{room_code}/reveal")
async def reveal_tile(
    room_code: str,
    payload: RevealRequest,
    context: AppContext = Depends(get_context),
) -> dict[str, object]:
    """Reveal one tile by flat index or row/col."""
    result = await run_in_threadpool(
        lambda: context.registry.reveal(
            room_code,
            team=payload.team,
            index=payload.index,
            row=payload.row,
            col=payload.col,
            username=payload.username,
        )
    )
    _publish(context, result)
    tile = result.reveal
    if tile is None:
        raise InternalError(f"room {result.code}: reveal produced no tile", room_code=result.code)
    return {
        "tile": {
            "index": tile.index,
            "color": tile.color.value,
            "already_revealed": tile.already_revealed,
        },
        "room": _detail(context, result, viewer=payload.username),
    }


@router.post("/api/rooms/{room_code}/end-turn")
async def end_turn(
    room_code: str,
    payload: EndTurnRequest,
    context: AppContext = Depends(get_context),
) -> dict[str, object]:
    result = await run_in_threadpool(context.registry.end_turn, room_code, payload.username)
    _publish(context, result)
    return _detail(context, result, viewer=payload.username)


@router.delete("/api/rooms/{room_code}", status_code=204)
async def delete_room(
    room_code: str,
    context: AppContext = Depends(get_context),
) -> Response:
    """Discard a room whose game has ended."""
    result = await run_in_threadpool(context.registry.delete_ended, room_code)
    _publish(context, result)
    return Response(status_code=204)

"""Liveness route."""

from __future__ import annotations

from fastapi import APIRouter
from fastapi import Depends
from starlette.concurrency import run_in_threadpool

from spyroom.api.deps import get_context
from spyroom.context import AppContext

router = APIRouter()


@router.get("/api/health")
async def health(context: AppContext = Depends(get_context)) -> dict[str, object]:
    rooms = await run_in_threadpool(context.registry.list_codes)
    return {
        "status": "ok",
        "env": context.settings.spyroom_app_env,
        "store": context.settings.spyroom_store,
        "rooms": len(rooms),
    }

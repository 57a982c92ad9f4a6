"""FastAPI application factory."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from contextlib import asynccontextmanager
from datetime import datetime
from typing import Any

from fastapi import FastAPI
from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from spyroom.api.errors import handle_game_error
from spyroom.api.errors import handle_http_exception
from spyroom.api.errors import handle_request_validation_error
from spyroom.api.routers.health import router as health_router
from spyroom.api.routers.rooms import router as rooms_router
from spyroom.context import build_context
from spyroom.context import startup
from spyroom.core.config import Settings
from spyroom.core.config import load_settings
from spyroom.core.logsetup import configure_logging
from spyroom.rooms.store import RoomStore
from spyroom.rooms.sweeper import turn_timeout_loop
from spyroom.ws.routers import router as ws_router
from wordgrid.content import ContentSource
from wordgrid.errors import GameError
from wordgrid.timer import utc_now

logger = logging.getLogger(__name__)


def create_app(
    settings: Settings | None = None,
    *,
    store: RoomStore | None = None,
    content: ContentSource | None = None,
    clock: Callable[[], datetime] = utc_now,
) -> FastAPI:
    """Build one application with its own registry, store and subscriber hub."""
    settings = settings or load_settings()
    configure_logging(settings.spyroom_log_level)
    context = build_context(settings, store=store, content=content, clock=clock)

    @asynccontextmanager
    async def lifespan(_: FastAPI):
        startup(context)
        sweeper: asyncio.Task[Any] | None = None
        if settings.spyroom_enforce_turn_timeout:
            sweeper = asyncio.create_task(
                turn_timeout_loop(context, interval_seconds=settings.spyroom_sweep_interval_seconds)
            )
        logger.info("spyroom ready (env=%s, store=%s)", settings.spyroom_app_env, settings.spyroom_store)
        try:
            yield
        finally:
            if sweeper is not None:
                sweeper.cancel()
                try:
                    await sweeper
                except asyncio.CancelledError:
                    pass

    app = FastAPI(title="spyroom", lifespan=lifespan)
    app.state.context = context
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=False,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(GameError, handle_game_error)
    app.add_exception_handler(HTTPException, handle_http_exception)
    app.add_exception_handler(RequestValidationError, handle_request_validation_error)
    app.include_router(health_router)
    app.include_router(rooms_router)
    app.include_router(ws_router)
    return app


__all__ = ["create_app"]

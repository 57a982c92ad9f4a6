"""Background task that hands over turns whose deadline has passed."""

from __future__ import annotations

import asyncio
import logging

from starlette.concurrency import run_in_threadpool

from spyroom.context import AppContext
from spyroom.ws.events import events_for_result

logger = logging.getLogger(__name__)


async def sweep_once(context: AppContext) -> int:
    """Expire due turns in every room once; return how many turns were handed over."""
    results = await run_in_threadpool(context.registry.expire_due_turns)
    for result in results:
        context.hub.dispatch(
            result.code,
            events_for_result(result, turn_duration_seconds=context.turn_duration_seconds),
        )
    return len(results)


async def turn_timeout_loop(context: AppContext, *, interval_seconds: float) -> None:
    logger.info("turn timeout sweeper running every %.2fs", interval_seconds)
    while True:
        await asyncio.sleep(interval_seconds)
        try:
            await sweep_once(context)
        except Exception:
            logger.exception("turn timeout sweep failed")

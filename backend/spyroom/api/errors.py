"""HTTP error mapping helpers for API routes."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import HTTPException
from fastapi import Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from wordgrid.errors import ConflictError
from wordgrid.errors import GameError
from wordgrid.errors import GameStateError
from wordgrid.errors import GameValidationError
from wordgrid.errors import InternalError
from wordgrid.errors import NotFoundError
from wordgrid.errors import UnauthorizedError

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR: tuple[tuple[type[GameError], int], ...] = (
    (GameValidationError, 400),
    (NotFoundError, 404),
    (ConflictError, 409),
    (GameStateError, 409),
    (UnauthorizedError, 403),
    (InternalError, 500),
)


def api_error(*, code: str, message: str, detail: dict[str, Any] | None = None) -> dict[str, Any]:
    """Build a unified API error payload."""
    return {"code": code, "message": message, "detail": detail or {}}


def game_error_payload(exc: GameError) -> dict[str, Any]:
    return api_error(code=exc.code, message=exc.message, detail=jsonable_encoder(exc.detail))


def status_for(exc: GameError) -> int:
    for error_type, status_code in _STATUS_BY_ERROR:
        if isinstance(exc, error_type):
            return status_code
    return 500


async def handle_game_error(_: Request, exc: GameError) -> JSONResponse:
    """Translate domain errors into the unified {code,message,detail} payload."""
    status_code = status_for(exc)
    if status_code >= 500:
        logger.error("request failed: %s", exc.message)
    else:
        logger.info("request rejected: %s (%s)", exc.code, exc.message)
    return JSONResponse(status_code=status_code, content=game_error_payload(exc))


async def handle_http_exception(_: Request, exc: HTTPException) -> JSONResponse:
    """Unify HTTP errors to {code,message,detail} payload."""
    if isinstance(exc.detail, dict) and {"code", "message", "detail"} <= set(exc.detail):
        return JSONResponse(
            status_code=exc.status_code,
            content=exc.detail,
            headers=exc.headers,
        )

    return JSONResponse(
        status_code=exc.status_code,
        content=api_error(
            code="HTTP_ERROR",
            message=str(exc.detail),
            detail={},
        ),
        headers=exc.headers,
    )


async def handle_request_validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    """Report malformed request bodies with the same envelope as domain validation errors."""
    return JSONResponse(
        status_code=400,
        content=api_error(
            code="VALIDATION_ERROR",
            message="request body is malformed",
            detail={"errors": jsonable_encoder(exc.errors())},
        ),
    )

"""Dependency helpers shared by API routers."""

from __future__ import annotations

from starlette.requests import HTTPConnection

from spyroom.context import AppContext


def get_context(connection: HTTPConnection) -> AppContext:
    """Return the context attached to the running app (works for HTTP and WebSocket)."""
    return connection.app.state.context

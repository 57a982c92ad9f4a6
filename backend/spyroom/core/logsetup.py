"""Process logging setup."""

from __future__ import annotations

import logging

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def configure_logging(level: str = "INFO") -> None:
    """Install one stream handler on the root logger; repeated calls only adjust the level."""
    root = logging.getLogger()
    if not any(getattr(handler, "_spyroom", False) for handler in root.handlers):
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._spyroom = True  # type: ignore[attr-defined]
        root.addHandler(handler)
    root.setLevel(level.upper())

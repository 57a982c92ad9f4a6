"""Run the service with uvicorn: ``python -m spyroom``."""

from __future__ import annotations

import uvicorn

from spyroom.core.config import load_settings


def main() -> None:
    settings = load_settings()
    uvicorn.run(
        "spyroom.main:create_app",
        factory=True,
        host=settings.spyroom_app_host,
        port=settings.spyroom_app_port,
        log_level=settings.spyroom_log_level.lower(),
    )


if __name__ == "__main__":
    main()

"""
archrv_tracker.api.__main__

Entrypoint for running the service via `python -m archrv_tracker.api`.
"""

from __future__ import annotations

import uvicorn

from archrv_tracker.api.app import create_app
from archrv_tracker.settings import get_settings


def main() -> None:
    settings = get_settings()
    app = create_app(settings=settings)

    uvicorn.run(
        app,
        host=settings.api_host,
        port=settings.api_port,
        log_config=None,  # structlog
        access_log=False,  # access lines carry the query-string token
    )


if __name__ == "__main__":
    main()

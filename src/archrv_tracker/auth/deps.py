"""
archrv_tracker.auth.deps

FastAPI dependency functions for authentication.

Responsibilities:
- Compare the `token` query parameter with the configured API token in constant time.
"""

from __future__ import annotations

import secrets

from fastapi import Depends, HTTPException, Query
from starlette.status import HTTP_403_FORBIDDEN

from archrv_tracker.api.deps import settings_dep
from archrv_tracker.observability.logging import get_logger
from archrv_tracker.settings import Settings

log = get_logger(__name__)


def require_api_token(
    token: str | None = Query(default=None),
    settings: Settings = Depends(settings_dep),
) -> None:
    expected = settings.http_api_token.encode()
    if not token or not secrets.compare_digest(token.encode(), expected):
        log.warning("api_token_rejected", token_present=bool(token))
        raise HTTPException(status_code=HTTP_403_FORBIDDEN, detail="Forbidden")


# --- Module Notes -----------------------------------------------------------
# CI jobs call these routes with `?token=...`; the token never reaches the logs
# (see `observability.middleware`).

"""
archrv_tracker.api.routers.health

Health and readiness endpoints.

Responsibilities:
- Provide liveness probe (`/healthz`).
- Provide readiness probe (`/readyz`) with DB connectivity and notifier checks.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException
from starlette.status import HTTP_503_SERVICE_UNAVAILABLE

from archrv_tracker.api.deps import context_from_app
from archrv_tracker.context import AppContext

router = APIRouter()


@router.get("/healthz")
async def healthz() -> dict[str, str]:
    return {"status": "ok"}


@router.get("/readyz")
async def readyz(ctx: AppContext = Depends(context_from_app)) -> dict[str, str]:
    await ctx.store.ping()
    if not ctx.notifier.running:
        raise HTTPException(status_code=HTTP_503_SERVICE_UNAVAILABLE, detail="notifier stopped")
    return {"status": "ready"}

"""
archrv_tracker.api.deps

FastAPI dependency wiring for the API layer.

Responsibilities:
- Expose the AppContext built at startup, and the pieces routers need from it.
"""

from __future__ import annotations

from fastapi import Depends, Request

from archrv_tracker.context import AppContext
from archrv_tracker.services.resolution import ResolutionService
from archrv_tracker.settings import Settings


def context_from_app(request: Request) -> AppContext:
    # Set by the lifespan handler in `archrv_tracker.api.app.create_app`.
    return request.app.state.context  # type: ignore[attr-defined]


def settings_dep(ctx: AppContext = Depends(context_from_app)) -> Settings:
    return ctx.settings


def resolution_dep(ctx: AppContext = Depends(context_from_app)) -> ResolutionService:
    return ctx.resolution

"""
archrv_tracker.api.app

FastAPI app factory for the tracker service.

Responsibilities:
- Build the FastAPI application and register routers/middleware.
- Build and dispose the AppContext (DB engine, notifier, chat client) in the lifespan.
- Map domain errors to HTTP responses.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.status import (
    HTTP_400_BAD_REQUEST,
    HTTP_500_INTERNAL_SERVER_ERROR,
)

from archrv_tracker import __version__
from archrv_tracker.api.routers.ci import router as ci_router
from archrv_tracker.api.routers.health import router as health_router
from archrv_tracker.api.routers.packages import router as packages_router
from archrv_tracker.context import AppContext
from archrv_tracker.errors import PreconditionFailed, TrackerError
from archrv_tracker.observability.logging import configure_logging, get_logger
from archrv_tracker.observability.middleware import RequestContextMiddleware
from archrv_tracker.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings, context: AppContext | None = None) -> FastAPI:
    """
    An injected `context` is used as-is and left open on shutdown; the caller owns it.
    """

    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.env != "dev",
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env)
        ctx = context if context is not None else await AppContext.create(settings)
        app.state.context = ctx
        try:
            yield
        finally:
            if context is None:
                await ctx.aclose()
            log.info("shutdown")

    app = FastAPI(
        title="archrv package tracker",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(RequestContextMiddleware)
    app.include_router(health_router, tags=["health"])
    app.include_router(packages_router)
    app.include_router(ci_router)

    app.add_exception_handler(RequestValidationError, _validation_error)
    app.add_exception_handler(PreconditionFailed, _precondition_failed)
    app.add_exception_handler(TrackerError, _tracker_error)
    return app


async def _validation_error(_: Request, exc: RequestValidationError) -> JSONResponse:
    detail = "; ".join(
        f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg', '')}"
        for err in exc.errors()
    )
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST, content={"msg": "Bad Request", "detail": detail}
    )


async def _precondition_failed(_: Request, exc: PreconditionFailed) -> JSONResponse:
    log.info("precondition_failed", error=exc.message)
    return JSONResponse(
        status_code=HTTP_400_BAD_REQUEST, content={"msg": exc.message, "detail": exc.detail}
    )


async def _tracker_error(_: Request, exc: TrackerError) -> JSONResponse:
    log.error("request_failed", error=exc.message, detail=exc.detail)
    return JSONResponse(
        status_code=HTTP_500_INTERNAL_SERVER_ERROR,
        content={"msg": "internal error", "detail": exc.detail},
    )


# --- Module Notes -----------------------------------------------------------
# Exception handlers are resolved by MRO, so PreconditionFailed (400) wins over the
# generic TrackerError (500) handler.

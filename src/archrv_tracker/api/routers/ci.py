"""
archrv_tracker.api.routers.ci

Routes called by the build infrastructure.

Responsibilities:
- `/delete/{pkgname}/{status}`: a package builds again -> complete_package.
- `/add/{pkgname}/{status}`: CI saw a package fail -> mark_failing.
- Enforce the shared API token and the allowed status kinds.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Path
from pydantic import BaseModel

from archrv_tracker.api.deps import resolution_dep
from archrv_tracker.auth.deps import require_api_token
from archrv_tracker.observability.logging import get_logger
from archrv_tracker.services.resolution import ResolutionService, WorkflowOutcome
from archrv_tracker.vocabulary import CompletionStatus, FailureStatus

log = get_logger(__name__)

PKGNAME_PATTERN = r"^[A-Za-z0-9@._+-]+$"

router = APIRouter(tags=["ci"], dependencies=[Depends(require_api_token)])


class OutcomeResponse(BaseModel):
    ok: bool
    msg: str
    detail: str | None = None


def _response(outcome: WorkflowOutcome) -> OutcomeResponse:
    return OutcomeResponse(ok=outcome.ok, msg=outcome.message, detail=outcome.detail)


@router.get("/delete/{pkgname}/{status}", response_model=OutcomeResponse)
async def package_done(
    status: CompletionStatus,
    pkgname: str = Path(pattern=PKGNAME_PATTERN, max_length=256),
    resolution: ResolutionService = Depends(resolution_dep),
) -> OutcomeResponse:
    log.info("package_done_reported", package=pkgname, status=str(status))
    return _response(await resolution.complete_package(pkgname))


@router.get("/add/{pkgname}/{status}", response_model=OutcomeResponse)
async def package_failing(
    status: FailureStatus,
    pkgname: str = Path(pattern=PKGNAME_PATTERN, max_length=256),
    resolution: ResolutionService = Depends(resolution_dep),
) -> OutcomeResponse:
    log.info("package_failing_reported", package=pkgname, status=str(status))
    return _response(await resolution.mark_failing(pkgname))

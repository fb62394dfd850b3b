"""
archrv_tracker.api.routers.packages

Read-only status endpoints.

Responsibilities:
- `/pkg`: work list (packager -> packages) and mark list (package -> marks).
- `/pkg/{pkgname}`: assignee and marks of one package.
"""

from __future__ import annotations

from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Path
from starlette.status import HTTP_404_NOT_FOUND

from archrv_tracker.api.deps import resolution_dep
from archrv_tracker.api.routers.ci import PKGNAME_PATTERN
from archrv_tracker.db.records import MarkView
from archrv_tracker.errors import NotFound
from archrv_tracker.services.resolution import ResolutionService

router = APIRouter(prefix="/pkg", tags=["packages"])


@router.get("")
async def list_packages(
    resolution: ResolutionService = Depends(resolution_dep),
) -> dict[str, Any]:
    work_list, mark_list = await resolution.list_assignments_and_marks()
    # Key names are shared with the existing dashboard (workList/markList/packages).
    return {
        "workList": [{"alias": w.alias, "packages": w.packages} for w in work_list],
        "markList": [
            {"name": p.name, "marks": [_mark_json(m) for m in p.marks]} for p in mark_list
        ],
    }


@router.get("/{pkgname}")
async def package_status(
    pkgname: str = Path(pattern=PKGNAME_PATTERN, max_length=256),
    resolution: ResolutionService = Depends(resolution_dep),
) -> dict[str, Any]:
    try:
        status = await resolution.package_status(pkgname)
    except NotFound as e:
        raise HTTPException(status_code=HTTP_404_NOT_FOUND, detail=e.message) from e
    return {
        "name": status.name,
        "assignee": status.assignee.alias if status.assignee is not None else None,
        "marks": [_mark_json(m) for m in status.marks],
    }


def _mark_json(m: MarkView) -> dict[str, Any]:
    out: dict[str, Any] = {
        "name": m.name,
        "marked_at": m.marked_at,
        "msg_id": m.message_id,
        "comment": m.comment or "",
    }
    if m.by is not None:
        out["by"] = m.by
    return out

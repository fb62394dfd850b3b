"""
archrv_tracker.db.repositories.relations

Repository for `PackageRelation` rows.

Responsibilities:
- Select and delete blocking edges by direction (blocked side or blocker side).
"""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import Select, delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from archrv_tracker.db.models import PackageRelation


class RelationRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    def _filtered(
        self,
        *,
        blocked: Collection[str] | None,
        blockers: Collection[str] | None,
        relation: str | None,
        request: str | None,
    ) -> Select[tuple[PackageRelation]]:
        stmt = select(PackageRelation)
        if blocked is not None:
            stmt = stmt.where(PackageRelation.request.in_(list(blocked)))
        if blockers is not None:
            stmt = stmt.where(PackageRelation.required.in_(list(blockers)))
        if relation is not None:
            stmt = stmt.where(PackageRelation.relation == relation)
        if request is not None:
            stmt = stmt.where(PackageRelation.request == request)
        return stmt.order_by(PackageRelation.id)

    async def find(
        self,
        *,
        blocked: Collection[str] | None = None,
        blockers: Collection[str] | None = None,
        relation: str | None = None,
        request: str | None = None,
    ) -> list[PackageRelation]:
        stmt = self._filtered(
            blocked=blocked, blockers=blockers, relation=relation, request=request
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def delete(
        self,
        *,
        relation: str,
        blocked: Collection[str] | None = None,
        blockers: Collection[str] | None = None,
        request: str | None = None,
    ) -> list[PackageRelation]:
        doomed = await self.find(
            blocked=blocked, blockers=blockers, relation=relation, request=request
        )
        if doomed:
            await self._session.execute(
                delete(PackageRelation).where(PackageRelation.id.in_([r.id for r in doomed]))
            )
        return doomed

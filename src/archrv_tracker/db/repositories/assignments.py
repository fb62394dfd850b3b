from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from archrv_tracker.db.models import Assignment, Package


class AssignmentRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def for_packager(self, packager_id: int) -> list[Assignment]:
        stmt = (
            select(Assignment)
            .where(Assignment.packager_id == packager_id)
            .order_by(Assignment.id)
        )
        return list((await self._session.execute(stmt)).scalars().all())

    async def package_names_by_packager(self) -> dict[int, list[str]]:
        stmt = (
            select(Assignment.packager_id, Package.name)
            .join(Package, Package.id == Assignment.package_id)
            .order_by(Assignment.id)
        )
        out: dict[int, list[str]] = {}
        for packager_id, name in (await self._session.execute(stmt)).all():
            out.setdefault(packager_id, []).append(name)
        return out

    async def delete(self, assignment: Assignment) -> None:
        await self._session.delete(assignment)
        await self._session.flush()

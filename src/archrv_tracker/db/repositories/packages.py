from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from archrv_tracker.db.models import Package


class PackageRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def by_name(self, name: str) -> Package | None:
        stmt = select(Package).where(Package.name == name)
        return (await self._session.execute(stmt)).scalars().first()

    async def by_names(self, names: Iterable[str]) -> dict[str, Package]:
        wanted = set(names)
        if not wanted:
            return {}
        stmt = select(Package).where(Package.name.in_(wanted))
        return {p.name: p for p in (await self._session.execute(stmt)).scalars()}

    async def all(self) -> list[Package]:
        stmt = select(Package).order_by(Package.id)
        return list((await self._session.execute(stmt)).scalars().all())

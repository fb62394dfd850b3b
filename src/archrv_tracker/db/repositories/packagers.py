"""
archrv_tracker.db.repositories.packagers

Repository for `Packager` entities.

Responsibilities:
- Look packagers up by Telegram uid or by the package they are assigned to.
- Resolve uids to aliases in bulk for listings.
"""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from archrv_tracker.db.models import Assignment, Package, Packager


class PackagerRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get(self, tg_uid: int) -> Packager | None:
        return await self._session.get(Packager, tg_uid)

    async def assigned_to(self, package_name: str) -> Packager | None:
        # Oldest assignment wins when a package is (unexpectedly) held by several packagers.
        stmt = (
            select(Packager)
            .join(Assignment, Assignment.packager_id == Packager.tg_uid)
            .join(Package, Package.id == Assignment.package_id)
            .where(Package.name == package_name)
            .order_by(Assignment.id)
            .limit(1)
        )
        return (await self._session.execute(stmt)).scalars().first()

    async def all(self) -> list[Packager]:
        stmt = select(Packager).order_by(Packager.tg_uid)
        return list((await self._session.execute(stmt)).scalars().all())

    async def aliases(self, tg_uids: Iterable[int | None]) -> dict[int, str]:
        wanted = {uid for uid in tg_uids if uid is not None}
        if not wanted:
            return {}
        stmt = select(Packager).where(Packager.tg_uid.in_(wanted))
        return {p.tg_uid: p.alias for p in (await self._session.execute(stmt)).scalars()}

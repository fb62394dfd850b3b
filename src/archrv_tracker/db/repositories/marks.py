"""
archrv_tracker.db.repositories.marks

Repository for `Mark` entities.

Responsibilities:
- List marks per package.
- Add a mark and delete marks by package (optionally restricted to a set of names).
"""

from __future__ import annotations

from collections.abc import Collection

from sqlalchemy import delete, select
from sqlalchemy.ext.asyncio import AsyncSession

from archrv_tracker.db.models import Mark


class MarkRepo:
    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def for_package(self, package_id: int) -> list[Mark]:
        stmt = select(Mark).where(Mark.package_id == package_id).order_by(Mark.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def all(self) -> list[Mark]:
        stmt = select(Mark).order_by(Mark.package_id, Mark.id)
        return list((await self._session.execute(stmt)).scalars().all())

    async def add(
        self,
        *,
        package_id: int,
        name: str,
        comment: str | None,
        message_id: int,
        marked_by: int | None,
    ) -> Mark:
        mark = Mark(
            package_id=package_id,
            name=name,
            comment=comment,
            message_id=message_id,
            marked_by=marked_by,
        )
        self._session.add(mark)
        await self._session.flush()
        return mark

    async def delete_for_package(
        self, package_id: int, names: Collection[str] | None = None
    ) -> list[Mark]:
        # Select-then-delete inside the caller's transaction: returns what was removed.
        stmt = select(Mark).where(Mark.package_id == package_id)
        if names is not None:
            stmt = stmt.where(Mark.name.in_([str(n) for n in names]))
        doomed = list((await self._session.execute(stmt.order_by(Mark.id))).scalars().all())
        if doomed:
            await self._session.execute(delete(Mark).where(Mark.id.in_([m.id for m in doomed])))
        return doomed

"""
tests.conftest

Shared fixtures: a file-backed SQLite database per test, a Store over it and a
small seeding helper that writes rows directly through the ORM.
"""

from __future__ import annotations

from pathlib import Path

import pytest_asyncio
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from archrv_tracker.db.init_db import init_db
from archrv_tracker.db.models import Assignment, Mark, Package, Packager, PackageRelation
from archrv_tracker.db.session import create_engine, create_sessionmaker
from archrv_tracker.db.store import Store
from archrv_tracker.settings import Settings


def make_settings(tmp_path: Path, **overrides: object) -> Settings:
    values: dict[str, object] = {
        "env": "test",
        "database_url": f"sqlite+aiosqlite:///{tmp_path / 'tracker.db'}",
        "http_api_token": "secret",
        "notify_interval_seconds": 0.05,
    }
    values.update(overrides)
    return Settings(**values)


class Seeder:
    def __init__(self, sessions: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = sessions

    async def packager(self, tg_uid: int, alias: str) -> None:
        async with self._sessions() as s, s.begin():
            s.add(Packager(tg_uid=tg_uid, alias=alias))

    async def package(self, *names: str) -> None:
        async with self._sessions() as s, s.begin():
            s.add_all([Package(name=n) for n in names])

    async def assign(self, package: str, tg_uid: int) -> None:
        async with self._sessions() as s, s.begin():
            pkg = (await s.execute(select(Package).where(Package.name == package))).scalar_one()
            s.add(Assignment(package_id=pkg.id, packager_id=tg_uid))

    async def mark(
        self,
        package: str,
        name: str,
        *,
        marked_by: int | None = None,
        comment: str | None = None,
    ) -> None:
        async with self._sessions() as s, s.begin():
            pkg = (await s.execute(select(Package).where(Package.name == package))).scalar_one()
            s.add(Mark(package_id=pkg.id, name=name, marked_by=marked_by, comment=comment))

    async def dangling_mark(self, package_id: int, name: str) -> None:
        async with self._sessions() as s, s.begin():
            s.add(Mark(package_id=package_id, name=name))

    async def relation(
        self, request: str, required: str, kind: str, *, created_by: int | None = None
    ) -> None:
        async with self._sessions() as s, s.begin():
            s.add(
                PackageRelation(
                    relation=kind, request=request, required=required, created_by=created_by
                )
            )

    async def marks_of(self, package: str) -> list[str]:
        async with self._sessions() as s:
            stmt = (
                select(Mark.name)
                .join(Package, Package.id == Mark.package_id)
                .where(Package.name == package)
                .order_by(Mark.id)
            )
            return list((await s.execute(stmt)).scalars().all())

    async def relations(self) -> list[tuple[str, str, str]]:
        async with self._sessions() as s:
            stmt = select(
                PackageRelation.request, PackageRelation.required, PackageRelation.relation
            ).order_by(PackageRelation.id)
            return [tuple(row) for row in (await s.execute(stmt)).all()]  # type: ignore[misc]

    async def assignments(self) -> list[tuple[str, int]]:
        async with self._sessions() as s:
            stmt = (
                select(Package.name, Assignment.packager_id)
                .join(Package, Package.id == Assignment.package_id)
                .order_by(Assignment.id)
            )
            return [tuple(row) for row in (await s.execute(stmt)).all()]  # type: ignore[misc]


class RecordingSink:
    """Stands in for the Notifier: keeps notices in call order."""

    def __init__(self) -> None:
        self.texts: list[str] = []

    def notify(self, text: str) -> None:
        self.texts.append(text)


@pytest_asyncio.fixture
async def sessions(tmp_path: Path):
    engine = create_engine(make_settings(tmp_path))
    await init_db(engine)
    try:
        yield create_sessionmaker(engine)
    finally:
        await engine.dispose()


@pytest_asyncio.fixture
async def store(sessions: async_sessionmaker[AsyncSession]) -> Store:
    return Store(sessions)


@pytest_asyncio.fixture
async def seed(sessions: async_sessionmaker[AsyncSession]) -> Seeder:
    return Seeder(sessions)

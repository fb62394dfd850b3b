"""
archrv_tracker.db.store

Transactional facade over the repositories.

Responsibilities:
- Run every operation in its own session + transaction checked out from the pool.
- Translate "no rows" outcomes into domain errors (NotFound, NothingRemoved, ...).
- Wrap driver/ORM failures into StorageError; nothing is retried here.
- Return detached record values (see `db.records`).
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Collection, Sequence
from contextlib import asynccontextmanager

from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from archrv_tracker.db.models import Mark, Packager, PackageRelation
from archrv_tracker.db.records import (
    MarkView,
    PackageInfo,
    PackageMarks,
    PackagerInfo,
    PackageStatus,
    RelationView,
    WorkItem,
)
from archrv_tracker.db.repositories.assignments import AssignmentRepo
from archrv_tracker.db.repositories.marks import MarkRepo
from archrv_tracker.db.repositories.packagers import PackagerRepo
from archrv_tracker.db.repositories.packages import PackageRepo
from archrv_tracker.db.repositories.relations import RelationRepo
from archrv_tracker.errors import (
    NoAssignments,
    NotAssigned,
    NotFound,
    NothingRemoved,
    StorageError,
)
from archrv_tracker.vocabulary import RELATION_KINDS


class Store:
    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._sessions = session_factory

    @asynccontextmanager
    async def _transaction(self) -> AsyncIterator[AsyncSession]:
        try:
            async with self._sessions() as session, session.begin():
                yield session
        except SQLAlchemyError as e:
            raise StorageError("storage operation failed", cause=e) from e

    async def ping(self) -> None:
        async with self._transaction() as session:
            await session.execute(text("SELECT 1"))

    # -- packagers / assignments ------------------------------------------

    async def find_packager(
        self, *, tg_uid: int | None = None, package: str | None = None
    ) -> PackagerInfo:
        """
        Look a packager up by Telegram uid, or find the one currently assigned to `package`.
        """

        if (tg_uid is None) == (package is None):
            raise ValueError("pass exactly one of tg_uid or package")

        async with self._transaction() as session:
            repo = PackagerRepo(session)
            if tg_uid is not None:
                row = await repo.get(tg_uid)
                missing = f"no packager with uid {tg_uid}"
            else:
                row = await repo.assigned_to(package or "")
                missing = f"no packager is assigned to {package}"
            if row is None:
                raise NotFound(missing)
            return _packager(row)

    async def list_packagers_with_assignments(self) -> list[WorkItem]:
        async with self._transaction() as session:
            packagers = await PackagerRepo(session).all()
            assigned = await AssignmentRepo(session).package_names_by_packager()
            return [WorkItem(alias=p.alias, packages=assigned.get(p.tg_uid, [])) for p in packagers]

    async def drop_assignment(self, package: str, packager_id: int) -> None:
        async with self._transaction() as session:
            assignments = AssignmentRepo(session)
            held = await assignments.for_packager(packager_id)
            if not held:
                raise NoAssignments("packager has not claimed any package")

            pkg = await PackageRepo(session).by_name(package)
            target = next(
                (a for a in held if pkg is not None and a.package_id == pkg.id),
                None,
            )
            if target is None:
                raise NotAssigned(f"{package} is not in the packager's assignments")
            await assignments.delete(target)

    # -- marks ---------------------------------------------------------------

    async def list_marks_by_package(self) -> list[PackageMarks]:
        async with self._transaction() as session:
            packages = await PackageRepo(session).all()
            marks = await MarkRepo(session).all()
            aliases = await PackagerRepo(session).aliases(m.marked_by for m in marks)

        by_package: dict[int, list[MarkView]] = {}
        for m in marks:
            by_package.setdefault(m.package_id, []).append(_mark(m, aliases))
        # Marks whose package id no longer resolves are simply not listed.
        return [
            PackageMarks(name=p.name, marks=by_package[p.id])
            for p in packages
            if by_package.get(p.id)
        ]

    async def package_status(self, package: str) -> PackageStatus:
        async with self._transaction() as session:
            pkg = await PackageRepo(session).by_name(package)
            if pkg is None:
                raise NotFound(f"package {package} doesn't exist")
            packagers = PackagerRepo(session)
            assignee = await packagers.assigned_to(package)
            marks = await MarkRepo(session).for_package(pkg.id)
            aliases = await packagers.aliases(m.marked_by for m in marks)
            return PackageStatus(
                name=pkg.name,
                assignee=_packager(assignee) if assignee is not None else None,
                marks=[_mark(m, aliases) for m in marks],
            )

    async def add_mark(
        self,
        package: str,
        name: str,
        *,
        comment: str | None = None,
        message_id: int = 0,
        marked_by: int | None = None,
    ) -> MarkView:
        async with self._transaction() as session:
            pkg = await PackageRepo(session).by_name(package)
            if pkg is None:
                raise NotFound(f"package {package} doesn't exist, fail to add mark")
            mark = await MarkRepo(session).add(
                package_id=pkg.id,
                name=name,
                comment=comment,
                message_id=message_id,
                marked_by=marked_by,
            )
            return _mark(mark, {})

    async def remove_marks(
        self, package: str, names: Collection[str] | None = None
    ) -> list[str]:
        """
        Remove every mark of `package`, or only the ones whose name is in `names`.

        Returns the names of the removed rows (duplicates included). Removing a
        relation-kind mark by name also drops the package's own outstanding
        relations of that kind, even when no mark row matched.
        """

        async with self._transaction() as session:
            pkg = await PackageRepo(session).by_name(package)
            if pkg is None:
                raise NotFound(f"package {package} doesn't exist, fail to remove marks")

            removed = await MarkRepo(session).delete_for_package(pkg.id, names)
            if names is not None:
                relations = RelationRepo(session)
                for kind in sorted(RELATION_KINDS.intersection(names)):
                    await relations.delete(relation=str(kind), blocked=[package])

        if not removed:
            raise NothingRemoved(f"no matching marks found for {package}")
        return [m.name for m in removed]

    # -- relations -------------------------------------------------------------

    async def search_relations(
        self,
        *,
        blocked: Sequence[str] | None = None,
        blockers: Sequence[str] | None = None,
    ) -> list[RelationView]:
        _one_direction(blocked, blockers)
        async with self._transaction() as session:
            rows = await RelationRepo(session).find(blocked=blocked, blockers=blockers)
            views = await _resolve(session, rows)
        if not views:
            raise NotFound("no relationship found on your argument")
        return views

    async def remove_relations(
        self,
        relation: str,
        *,
        blocked: Sequence[str] | None = None,
        blockers: Sequence[str] | None = None,
        request: str | None = None,
    ) -> list[RelationView]:
        """
        Delete edges of kind `relation` in one direction and return the resolvable ones.

        `request` narrows a deletion to the edges whose blocked side is that package.
        Unresolvable rows are deleted too, they are just not reported.
        """

        _one_direction(blocked, blockers)
        async with self._transaction() as session:
            rows = await RelationRepo(session).delete(
                relation=relation, blocked=blocked, blockers=blockers, request=request
            )
            views = await _resolve(session, rows)
        if not views:
            raise NotFound("no relationship found on your argument")
        return views


def _one_direction(blocked: Sequence[str] | None, blockers: Sequence[str] | None) -> None:
    if (blocked is None) == (blockers is None):
        raise ValueError("pass exactly one of blocked or blockers")


async def _resolve(session: AsyncSession, rows: list[PackageRelation]) -> list[RelationView]:
    packages = await PackageRepo(session).by_names(
        name for r in rows for name in (r.request, r.required)
    )
    creators: dict[int, Packager] = {}
    packagers = PackagerRepo(session)
    for uid in {r.created_by for r in rows if r.created_by is not None}:
        p = await packagers.get(uid)
        if p is not None:
            creators[uid] = p

    out: list[RelationView] = []
    for r in rows:
        request, required = packages.get(r.request), packages.get(r.required)
        if request is None or required is None:
            continue
        creator = creators.get(r.created_by) if r.created_by is not None else None
        out.append(
            RelationView(
                id=r.id,
                relation=r.relation,
                request=PackageInfo(id=request.id, name=request.name),
                required=PackageInfo(id=required.id, name=required.name),
                created_by=_packager(creator) if creator is not None else None,
            )
        )
    return out


def _packager(row: Packager) -> PackagerInfo:
    return PackagerInfo(tg_uid=row.tg_uid, alias=row.alias)


def _mark(row: Mark, aliases: dict[int, str]) -> MarkView:
    return MarkView(
        id=row.id,
        name=row.name,
        comment=row.comment,
        message_id=row.message_id,
        marked_by=row.marked_by,
        marked_at=row.marked_at,
        package_id=row.package_id,
        by=aliases.get(row.marked_by) if row.marked_by is not None else None,
    )


# --- Module Notes -----------------------------------------------------------
# Concurrent callers each check out their own connection; correctness relies on
# operations being scoped to rows identified by name/id, not on cross-call locking.
# Per-package serialization of mark writes lives in `services.locks.KeyedLock`.

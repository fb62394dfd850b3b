"""
tests.test_store

Store behavior against a real SQLite file.

Responsibilities:
- Lookups and listings resolve names/aliases the way the dashboard expects.
- "Nothing there" outcomes surface as the matching domain error.
- The mark/relation tie in remove_marks.
"""

from __future__ import annotations

from pathlib import Path

import pytest
from conftest import Seeder, make_settings

from archrv_tracker.db.session import create_engine, create_sessionmaker
from archrv_tracker.db.store import Store
from archrv_tracker.errors import (
    NoAssignments,
    NotAssigned,
    NotFound,
    NothingRemoved,
    StorageError,
)


@pytest.mark.asyncio
async def test_find_packager_by_uid_and_by_package(store: Store, seed: Seeder) -> None:
    await seed.packager(1, "alice")
    await seed.package("gcc")
    await seed.assign("gcc", 1)

    assert (await store.find_packager(tg_uid=1)).alias == "alice"
    assert (await store.find_packager(package="gcc")).tg_uid == 1

    with pytest.raises(NotFound):
        await store.find_packager(tg_uid=99)
    with pytest.raises(NotFound):
        await store.find_packager(package="llvm")
    with pytest.raises(ValueError):
        await store.find_packager(tg_uid=1, package="gcc")


@pytest.mark.asyncio
async def test_packager_listing_includes_idle_packagers(store: Store, seed: Seeder) -> None:
    await seed.packager(1, "alice")
    await seed.packager(2, "bob")
    await seed.package("gcc", "llvm")
    await seed.assign("gcc", 1)
    await seed.assign("llvm", 1)

    work = await store.list_packagers_with_assignments()

    assert [(w.alias, w.packages) for w in work] == [("alice", ["gcc", "llvm"]), ("bob", [])]


@pytest.mark.asyncio
async def test_mark_listing_skips_unmarked_and_dangling(store: Store, seed: Seeder) -> None:
    await seed.packager(1, "alice")
    await seed.package("gcc", "llvm", "rust")
    await seed.mark("gcc", "outdated", marked_by=1, comment="needs 14.2")
    await seed.mark("rust", "stuck", marked_by=42)
    await seed.dangling_mark(9999, "ignore")

    listing = await store.list_marks_by_package()

    assert [p.name for p in listing] == ["gcc", "rust"]
    gcc_mark = listing[0].marks[0]
    assert (gcc_mark.name, gcc_mark.by, gcc_mark.comment) == ("outdated", "alice", "needs 14.2")
    # Author uid 42 is not a known packager.
    assert listing[1].marks[0].by is None


@pytest.mark.asyncio
async def test_remove_marks_by_name(store: Store, seed: Seeder) -> None:
    await seed.package("gcc")
    await seed.mark("gcc", "ftbfs")
    await seed.mark("gcc", "leaf")

    assert await store.remove_marks("gcc", {"ftbfs"}) == ["ftbfs"]
    assert await seed.marks_of("gcc") == ["leaf"]

    with pytest.raises(NothingRemoved):
        await store.remove_marks("gcc", {"nonexistent"})
    with pytest.raises(NotFound):
        await store.remove_marks("llvm")


@pytest.mark.asyncio
async def test_remove_marks_keeps_duplicates_in_result(store: Store, seed: Seeder) -> None:
    await seed.package("gcc")
    await seed.mark("gcc", "stuck")
    await seed.mark("gcc", "stuck")

    assert await store.remove_marks("gcc") == ["stuck", "stuck"]
    assert await seed.marks_of("gcc") == []


@pytest.mark.asyncio
async def test_removing_relation_mark_drops_own_relations(store: Store, seed: Seeder) -> None:
    await seed.package("python-foo", "python", "openssl")
    await seed.mark("python-foo", "missing_dep")
    await seed.relation("python-foo", "python", "missing_dep")
    await seed.relation("python-foo", "openssl", "outdated_dep")
    await seed.relation("openssl", "python-foo", "missing_dep")

    assert await store.remove_marks("python-foo", {"missing_dep"}) == ["missing_dep"]

    assert await seed.relations() == [
        ("python-foo", "openssl", "outdated_dep"),
        ("openssl", "python-foo", "missing_dep"),
    ]


@pytest.mark.asyncio
async def test_relation_tie_applies_without_matching_mark(store: Store, seed: Seeder) -> None:
    await seed.package("python-foo", "python")
    await seed.relation("python-foo", "python", "outdated_dep")

    with pytest.raises(NothingRemoved):
        await store.remove_marks("python-foo", {"outdated_dep"})

    assert await seed.relations() == []


@pytest.mark.asyncio
async def test_drop_assignment(store: Store, seed: Seeder) -> None:
    await seed.packager(1, "alice")
    await seed.packager(2, "bob")
    await seed.package("gcc", "llvm")
    await seed.assign("gcc", 1)

    with pytest.raises(NoAssignments):
        await store.drop_assignment("gcc", 2)
    with pytest.raises(NotAssigned):
        await store.drop_assignment("llvm", 1)
    with pytest.raises(NotAssigned):
        await store.drop_assignment("unknown", 1)

    await store.drop_assignment("gcc", 1)
    assert await seed.assignments() == []


@pytest.mark.asyncio
async def test_search_relations_resolves_and_drops_unresolvable(store: Store, seed: Seeder) -> None:
    await seed.packager(7, "carol")
    await seed.package("app", "lib")
    await seed.relation("app", "lib", "missing_dep", created_by=7)
    await seed.relation("app", "ghost", "missing_dep")
    await seed.relation("other", "lib", "outdated_dep", created_by=8)

    found = await store.search_relations(blocked=["app"])

    assert len(found) == 1
    edge = found[0]
    assert (edge.request.name, edge.required.name, edge.relation) == ("app", "lib", "missing_dep")
    assert edge.created_by is not None and edge.created_by.alias == "carol"

    with pytest.raises(NotFound):
        await store.search_relations(blockers=["ghost"])
    with pytest.raises(ValueError):
        await store.search_relations()


@pytest.mark.asyncio
async def test_remove_relations_narrowed_to_one_edge(store: Store, seed: Seeder) -> None:
    await seed.package("a", "b", "lib")
    await seed.relation("a", "lib", "outdated_dep")
    await seed.relation("b", "lib", "outdated_dep")
    await seed.relation("a", "lib", "missing_dep")

    removed = await store.remove_relations("outdated_dep", blockers=["lib"], request="a")

    assert [(r.request.name, r.required.name) for r in removed] == [("a", "lib")]
    assert await seed.relations() == [("b", "lib", "outdated_dep"), ("a", "lib", "missing_dep")]

    with pytest.raises(NotFound):
        await store.remove_relations("outdated_dep", blockers=["lib"], request="a")


@pytest.mark.asyncio
async def test_package_status_and_add_mark(store: Store, seed: Seeder) -> None:
    await seed.packager(1, "alice")
    await seed.package("gcc")
    await seed.assign("gcc", 1)

    added = await store.add_mark("gcc", "failing", comment="ci")
    status = await store.package_status("gcc")

    assert status.assignee is not None and status.assignee.alias == "alice"
    assert [m.id for m in status.marks] == [added.id]
    assert status.marks[0].message_id == 0

    with pytest.raises(NotFound):
        await store.package_status("llvm")
    with pytest.raises(NotFound):
        await store.add_mark("llvm", "failing")


@pytest.mark.asyncio
async def test_driver_failures_become_storage_errors(tmp_path: Path) -> None:
    settings = make_settings(
        tmp_path, database_url=f"sqlite+aiosqlite:///{tmp_path / 'missing' / 'x.db'}"
    )
    engine = create_engine(settings)
    try:
        with pytest.raises(StorageError) as exc_info:
            await Store(create_sessionmaker(engine)).ping()
    finally:
        await engine.dispose()

    assert exc_info.value.cause is not None

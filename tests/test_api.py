"""
tests.test_api

HTTP boundary tests.

Responsibilities:
- Ensure the FastAPI app starts and the readiness probe works in test mode.
- Exercise the dashboard and CI routes end to end against a real SQLite file.
- Check token enforcement and error mapping (400/403/404).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import httpx
import pytest
import pytest_asyncio
from conftest import Seeder, make_settings

from archrv_tracker.api.app import create_app
from archrv_tracker.context import AppContext
from archrv_tracker.db.session import create_sessionmaker


@dataclass
class Api:
    client: httpx.AsyncClient
    seed: Seeder
    delivered: list[str] = field(default_factory=list)


@pytest_asyncio.fixture
async def api(tmp_path: Path):
    settings = make_settings(tmp_path)
    delivered: list[str] = []

    async def deliver(text: str) -> None:
        delivered.append(text)

    ctx = await AppContext.create(settings, deliver=deliver)
    app = create_app(settings=settings, context=ctx)
    try:
        # httpx ASGITransport does not run the lifespan; drive it explicitly.
        async with app.router.lifespan_context(app):
            transport = httpx.ASGITransport(app=app)
            async with httpx.AsyncClient(transport=transport, base_url="http://test") as client:
                yield Api(
                    client=client,
                    seed=Seeder(create_sessionmaker(ctx.engine)),
                    delivered=delivered,
                )
    finally:
        await ctx.aclose()


@pytest.mark.asyncio
async def test_health_endpoints(api: Api) -> None:
    r = await api.client.get("/healthz")
    assert r.status_code == 200
    assert r.json()["status"] == "ok"

    r = await api.client.get("/readyz")
    assert r.status_code == 200
    assert r.json()["status"] == "ready"
    assert r.headers["x-request-id"]


@pytest.mark.asyncio
async def test_package_listing(api: Api) -> None:
    await api.seed.packager(1, "alice")
    await api.seed.packager(2, "bob")
    await api.seed.package("gcc", "llvm")
    await api.seed.assign("gcc", 1)
    await api.seed.mark("llvm", "stuck", marked_by=2, comment="needs patch")
    await api.seed.mark("llvm", "ignore", marked_by=404)

    r = await api.client.get("/pkg")

    assert r.status_code == 200
    body = r.json()
    assert body["workList"] == [
        {"alias": "alice", "packages": ["gcc"]},
        {"alias": "bob", "packages": []},
    ]
    [llvm] = body["markList"]
    assert llvm["name"] == "llvm"
    stuck, ignore = llvm["marks"]
    assert (stuck["name"], stuck["by"], stuck["comment"], stuck["msg_id"]) == (
        "stuck",
        "bob",
        "needs patch",
        0,
    )
    assert "by" not in ignore
    assert ignore["comment"] == ""


@pytest.mark.asyncio
async def test_package_status(api: Api) -> None:
    await api.seed.packager(1, "alice")
    await api.seed.package("gcc")
    await api.seed.assign("gcc", 1)

    r = await api.client.get("/pkg/gcc")
    assert r.status_code == 200
    assert r.json() == {"name": "gcc", "assignee": "alice", "marks": []}

    r = await api.client.get("/pkg/unknown")
    assert r.status_code == 404


@pytest.mark.asyncio
async def test_ci_routes_require_token(api: Api) -> None:
    r = await api.client.get("/delete/gcc/ftbfs")
    assert r.status_code == 403

    r = await api.client.get("/delete/gcc/ftbfs", params={"token": "wrong"})
    assert r.status_code == 403

    r = await api.client.get("/add/gcc/ftbfs", params={"token": "wrong"})
    assert r.status_code == 403


@pytest.mark.asyncio
async def test_ci_routes_validate_input(api: Api) -> None:
    r = await api.client.get("/delete/gcc/built", params={"token": "secret"})
    assert r.status_code == 400
    assert r.json()["msg"] == "Bad Request"

    r = await api.client.get("/add/gcc/leaf", params={"token": "secret"})
    assert r.status_code == 400

    r = await api.client.get("/delete/gcc%20evil/ftbfs", params={"token": "secret"})
    assert r.status_code == 400


@pytest.mark.asyncio
async def test_delete_without_assignee_is_bad_request(api: Api) -> None:
    await api.seed.package("gcc")

    r = await api.client.get("/delete/gcc/ftbfs", params={"token": "secret"})

    assert r.status_code == 400
    assert r.json()["msg"] == "gcc has no assignee"


@pytest.mark.asyncio
async def test_delete_completes_package(api: Api) -> None:
    await api.seed.packager(1, "alice")
    await api.seed.package("libfoo", "app")
    await api.seed.assign("libfoo", 1)
    await api.seed.mark("libfoo", "ready")
    await api.seed.mark("app", "missing_dep")
    await api.seed.relation("app", "libfoo", "missing_dep", created_by=1)

    r = await api.client.get("/delete/libfoo/leaf", params={"token": "secret"})

    assert r.status_code == 200
    assert r.json() == {"ok": True, "msg": "success", "detail": None}
    assert await api.seed.assignments() == []
    assert await api.seed.marks_of("app") == []
    assert await api.seed.relations() == []


@pytest.mark.asyncio
async def test_add_marks_package_failing(api: Api) -> None:
    await api.seed.package("gcc")
    await api.seed.mark("gcc", "ready")

    r = await api.client.get("/add/gcc/ftbfs", params={"token": "secret"})
    assert r.status_code == 200
    assert r.json()["ok"] is True

    r = await api.client.get("/pkg/gcc")
    assert [m["name"] for m in r.json()["marks"]] == ["failing"]

    r = await api.client.get("/add/unknown/ftbfs", params={"token": "secret"})
    assert r.status_code == 400

"""
archrv_tracker.db.records

Plain values returned by the Store.

Responsibilities:
- Detach query results from ORM sessions (each Store call owns its session).
- Give the workflows and API a stable, serializable shape.
"""

from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True, slots=True)
class PackagerInfo:
    tg_uid: int
    alias: str


@dataclass(frozen=True, slots=True)
class PackageInfo:
    id: int
    name: str


@dataclass(frozen=True, slots=True)
class MarkView:
    id: int
    name: str
    comment: str | None
    message_id: int
    marked_by: int | None
    marked_at: int
    package_id: int
    # Alias of `marked_by`, resolved on listing when the packager is known.
    by: str | None = None


@dataclass(frozen=True, slots=True)
class WorkItem:
    alias: str
    packages: list[str] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class PackageMarks:
    name: str
    marks: list[MarkView] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class PackageStatus:
    name: str
    assignee: PackagerInfo | None
    marks: list[MarkView] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RelationView:
    """
    Directed blocking edge: `request` cannot be built until `required` is.
    """

    id: int
    relation: str
    request: PackageInfo
    required: PackageInfo
    created_by: PackagerInfo | None

"""
archrv_tracker.db.models

Persistence schema for packagers, packages and their status.

Responsibilities:
- Define ORM models:
  - Packager: maintainer identity keyed by Telegram uid
  - Package: tracked package, unique by name
  - Assignment: packager owns package
  - Mark: status tag attached to a package
  - PackageRelation: "request is blocked by required" edge
"""

from __future__ import annotations

import time

from sqlalchemy import BigInteger, ForeignKey, Index, Integer, String, Text
from sqlalchemy.orm import Mapped, mapped_column

from archrv_tracker.db.base import Base


def _epoch() -> int:
    return int(time.time())


class Packager(Base):
    __tablename__ = "packager"

    tg_uid: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    alias: Mapped[str] = mapped_column(String(256), nullable=False)


class Package(Base):
    __tablename__ = "pkg"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    name: Mapped[str] = mapped_column(String(256), nullable=False, unique=True)


class Assignment(Base):
    __tablename__ = "assignment"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    package_id: Mapped[int] = mapped_column(
        "pkg", Integer, ForeignKey("pkg.id"), nullable=False, index=True
    )
    packager_id: Mapped[int] = mapped_column(
        "assignee", BigInteger, ForeignKey("packager.tg_uid"), nullable=False, index=True
    )
    assigned_at: Mapped[int] = mapped_column(Integer, nullable=False, default=_epoch)


class Mark(Base):
    __tablename__ = "mark"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    # Open vocabulary; (package, name) is not unique and duplicates are kept.
    name: Mapped[str] = mapped_column(String(64), nullable=False)
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)
    message_id: Mapped[int] = mapped_column("msg_id", BigInteger, nullable=False, default=0)
    marked_by: Mapped[int | None] = mapped_column(BigInteger, nullable=True)
    marked_at: Mapped[int] = mapped_column(Integer, nullable=False, default=_epoch)
    # No FK constraint: a dangling package id is skipped on read.
    package_id: Mapped[int] = mapped_column("for_pkg", Integer, nullable=False, index=True)

    __table_args__ = (Index("ix_mark_pkg_name", "for_pkg", "name"),)


class PackageRelation(Base):
    __tablename__ = "pkg_relation"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    relation: Mapped[str] = mapped_column(String(64), nullable=False)
    # Endpoints are package names, resolved against `pkg` on read.
    request: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    required: Mapped[str] = mapped_column(String(256), nullable=False, index=True)
    created_by: Mapped[int | None] = mapped_column(BigInteger, nullable=True)

    __table_args__ = (Index("ix_pkg_relation_required_relation", "required", "relation"),)


# --- Module Notes -----------------------------------------------------------
# Column names follow the schema shared with the chat bot (pkg, assignee, for_pkg,
# msg_id); attribute names are the ones used throughout the Python code.

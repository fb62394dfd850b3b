"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19
"""

from __future__ import annotations

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op

revision: str = "0001"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None


def upgrade() -> None:
    op.create_table(
        "packager",
        sa.Column("tg_uid", sa.BigInteger(), primary_key=True, autoincrement=False),
        sa.Column("alias", sa.String(256), nullable=False),
    )
    op.create_table(
        "pkg",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(256), nullable=False, unique=True),
    )
    op.create_table(
        "assignment",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("pkg", sa.Integer(), sa.ForeignKey("pkg.id"), nullable=False),
        sa.Column("assignee", sa.BigInteger(), sa.ForeignKey("packager.tg_uid"), nullable=False),
        sa.Column("assigned_at", sa.Integer(), nullable=False),
    )
    op.create_index("ix_assignment_pkg", "assignment", ["pkg"])
    op.create_index("ix_assignment_assignee", "assignment", ["assignee"])

    op.create_table(
        "mark",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("name", sa.String(64), nullable=False),
        sa.Column("comment", sa.Text(), nullable=True),
        sa.Column("msg_id", sa.BigInteger(), nullable=False),
        sa.Column("marked_by", sa.BigInteger(), nullable=True),
        sa.Column("marked_at", sa.Integer(), nullable=False),
        sa.Column("for_pkg", sa.Integer(), nullable=False),
    )
    op.create_index("ix_mark_for_pkg", "mark", ["for_pkg"])
    op.create_index("ix_mark_pkg_name", "mark", ["for_pkg", "name"])

    op.create_table(
        "pkg_relation",
        sa.Column("id", sa.Integer(), primary_key=True, autoincrement=True),
        sa.Column("relation", sa.String(64), nullable=False),
        sa.Column("request", sa.String(256), nullable=False),
        sa.Column("required", sa.String(256), nullable=False),
        sa.Column("created_by", sa.BigInteger(), nullable=True),
    )
    op.create_index("ix_pkg_relation_request", "pkg_relation", ["request"])
    op.create_index("ix_pkg_relation_required", "pkg_relation", ["required"])
    op.create_index("ix_pkg_relation_required_relation", "pkg_relation", ["required", "relation"])


def downgrade() -> None:
    op.drop_table("pkg_relation")
    op.drop_table("mark")
    op.drop_table("assignment")
    op.drop_table("pkg")
    op.drop_table("packager")

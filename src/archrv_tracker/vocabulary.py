"""
archrv_tracker.vocabulary

Status vocabulary used at the workflow boundary.

Responsibilities:
- Name the marks and relation kinds the workflows reason about.
- Map relation kinds to the mark names they mirror.

Storage keeps mark and relation names as plain strings (the vocabulary is open);
these enums only constrain what the workflows and HTTP routes accept.
"""

from __future__ import annotations

import enum


class RelationKind(enum.StrEnum):
    outdated_dep = "outdated_dep"
    missing_dep = "missing_dep"


class MarkName(enum.StrEnum):
    outdated = "outdated"
    stuck = "stuck"
    ready = "ready"
    outdated_dep = "outdated_dep"
    missing_dep = "missing_dep"
    unknown = "unknown"
    ignore = "ignore"
    failing = "failing"


class CompletionStatus(enum.StrEnum):
    # Accepted by /delete: the package builds again.
    ftbfs = "ftbfs"
    leaf = "leaf"


class FailureStatus(enum.StrEnum):
    # Accepted by /add: CI saw the package fail.
    ftbfs = "ftbfs"


# Marks cleared from a package once it is reported done.
BLOCKING_MARKS: frozenset[str] = frozenset(
    {
        MarkName.outdated,
        MarkName.stuck,
        MarkName.ready,
        MarkName.outdated_dep,
        MarkName.missing_dep,
        MarkName.unknown,
        MarkName.ignore,
        MarkName.failing,
    }
)

RELATION_MARK: dict[RelationKind, MarkName] = {
    RelationKind.outdated_dep: MarkName.outdated_dep,
    RelationKind.missing_dep: MarkName.missing_dep,
}

RELATION_KINDS: frozenset[str] = frozenset(RelationKind)


def relation_kind(raw: str) -> RelationKind | None:
    try:
        return RelationKind(raw)
    except ValueError:
        return None

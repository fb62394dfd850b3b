"""
archrv_tracker.services.resolution

Package lifecycle workflows.

Responsibilities:
- "Package completed": drop the assignment, clear blocking marks, cascade through
  packages that were blocked on it.
- "Package failing": mark a package as failing after a CI report.
- Read-only snapshots for the status dashboard.
- Emit human-readable notices for every step through the notifier.

Each workflow step is isolated: a failing step produces a failure notice and the
next step still runs. Only a missing precondition aborts before any mutation.
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Protocol

from archrv_tracker.chat_clients.markup import bold, code, escape, mention
from archrv_tracker.db.records import PackageMarks, PackageStatus, RelationView, WorkItem
from archrv_tracker.db.store import Store
from archrv_tracker.errors import (
    NoAssignee,
    NotFound,
    NothingRemoved,
    StorageError,
    UnknownPackage,
)
from archrv_tracker.observability.logging import get_logger
from archrv_tracker.services.locks import KeyedLock
from archrv_tracker.vocabulary import (
    BLOCKING_MARKS,
    RELATION_MARK,
    MarkName,
    RelationKind,
    relation_kind,
)

log = get_logger(__name__)


class NoticeSink(Protocol):
    def notify(self, text: str) -> None: ...


@dataclass(frozen=True, slots=True)
class WorkflowOutcome:
    ok: bool
    message: str
    detail: str | None = None


@dataclass(slots=True)
class StepResult:
    """
    Notices produced by one workflow step, plus the error that stopped it (if any).

    For the cascade, `error` is the first error met; later blocked packages were
    still processed.
    """

    notices: list[str] = field(default_factory=list)
    error: StorageError | None = None


class ResolutionService:
    def __init__(
        self,
        *,
        store: Store,
        notifier: NoticeSink,
        locks: KeyedLock | None = None,
        bot_alias: str = "bot",
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._locks = locks or KeyedLock()
        self._bot_alias = bot_alias

    # -- package completed ---------------------------------------------------

    async def complete_package(self, package: str) -> WorkflowOutcome:
        plog = log.bind(package=package, workflow="complete")
        try:
            assignee = await self._store.find_packager(package=package)
        except NotFound as e:
            raise NoAssignee(f"{package} has no assignee", cause=e) from e

        plog.info("package_completed", assignee=assignee.tg_uid)
        self._notifier.notify(
            f"Ping {mention(assignee.tg_uid, assignee.alias)}: "
            f"[auto-merge] {code(package)} is done"
        )

        failures: list[str] = []
        try:
            await self._store.drop_assignment(package, assignee.tg_uid)
        except StorageError as e:
            plog.warning("drop_assignment_failed", error=e.message)
            failures.append(f"drop assignment: {e.message}")
            self._notifier.notify(f"auto-merge failed: {escape(e.message)}")

        # Mark cleanup touches `package`'s own marks and relations (request == package);
        # the cascade touches its dependents (required == package).
        marks, cascade = await asyncio.gather(
            self._clear_blocking_marks(package),
            self.cascade(package),
        )
        for notice in [*marks.notices, *cascade.notices]:
            self._notifier.notify(notice)

        if marks.error is not None:
            failures.append(f"clear marks: {marks.error.message}")
        if cascade.error is not None:
            plog.warning("cascade_failed", error=cascade.error.message)
            failures.append(f"cascade: {cascade.error.message}")
            self._notifier.notify(
                f"dependency cascade for {code(package)} failed: {escape(cascade.error.message)}"
            )

        return WorkflowOutcome(
            ok=True,
            message="success",
            detail="; ".join(failures) if failures else None,
        )

    async def _clear_blocking_marks(self, package: str) -> StepResult:
        result = StepResult()
        try:
            async with self._locks.hold(package):
                removed = await self._store.remove_marks(package, BLOCKING_MARKS)
        except StorageError as e:
            log.info("blocking_marks_not_cleared", package=package, error=e.message)
            result.error = e
            result.notices.append(f"auto-unmark failed for {code(package)}: {escape(e.message)}")
            return result

        # Duplicate mark rows are reported once.
        names = ", ".join(code(n) for n in dict.fromkeys(removed))
        result.notices.append(f"auto-unmark: {code(package)} is done, no longer marked as {names}")
        return result

    async def cascade(self, package: str) -> StepResult:
        """
        Re-evaluate every package blocked on `package` now that it is done.

        For each blocking edge `(P, package, kind)`:
        - if it was P's last blocker of that kind, P's `kind` marks are removed;
        - otherwise only the edge goes away and P stays marked.
        The satisfied edge is deleted either way. Nothing depending on `package`
        is not an error.
        """

        result = StepResult()
        try:
            dependents = await self._store.search_relations(blockers=[package])
        except NotFound:
            return result
        except StorageError as e:
            result.error = e
            return result

        seen: set[tuple[str, RelationKind]] = set()
        for edge in dependents:
            kind = relation_kind(edge.relation)
            if kind is None or (edge.request.name, kind) in seen:
                continue
            seen.add((edge.request.name, kind))
            try:
                notices = await self._resolve_dependent(package, edge.request.name, kind)
            except StorageError as e:
                log.warning(
                    "cascade_dependent_failed",
                    package=package,
                    dependent=edge.request.name,
                    relation=str(kind),
                    error=e.message,
                )
                if result.error is None:
                    result.error = e
                continue
            result.notices.extend(notices)
        return result

    async def _resolve_dependent(
        self,
        package: str,
        blocked: str,
        kind: RelationKind,
    ) -> list[str]:
        """
        Apply one satisfied edge to `blocked` and return its notices.

        A StorageError discards the notices gathered so far (the pending cc included).
        """

        notices: list[str] = []
        async with self._locks.hold(blocked):
            try:
                outstanding = await self._store.search_relations(blocked=[blocked])
            except NotFound:
                return notices

            same_kind = [r for r in outstanding if r.relation == kind]
            position = _edge_to(same_kind, package)
            if position is None:
                return notices

            creator = position.created_by
            if creator is not None:
                notices.append(f"cc {mention(creator.tg_uid, creator.alias)}:")
            else:
                notices.append(f"cc {escape(self._bot_alias)}:")

            await self._store.remove_relations(str(kind), blockers=[package], request=blocked)

            blockers_left = {r.required.name for r in same_kind}
            if len(blockers_left) > 1:
                notices.append(
                    f"mark updated: {code(package)} removed from {code(blocked)}'s "
                    f"{bold(kind)} blockers"
                )
                return notices

            try:
                await self._store.remove_marks(blocked, [RELATION_MARK[kind]])
            except NothingRemoved:
                log.info("unblocked_without_mark", package=blocked, relation=str(kind))
            notices.append(
                f"auto-unmark: {code(blocked)} unblocked because {code(package)} is done, "
                f"no longer marked {bold(kind)}"
            )
        return notices

    # -- package failing -------------------------------------------------------

    async def mark_failing(self, package: str) -> WorkflowOutcome:
        try:
            status = await self._store.package_status(package)
        except NotFound as e:
            raise UnknownPackage(f"package {package} is not tracked", cause=e) from e

        plog = log.bind(package=package, workflow="failing")
        plog.info("package_failing")
        if status.assignee is not None:
            who = mention(status.assignee.tg_uid, status.assignee.alias)
            self._notifier.notify(f"Ping {who}: [ci] {code(package)} is failing")

        failures: list[str] = []
        async with self._locks.hold(package):
            try:
                await self._store.add_mark(
                    package,
                    str(MarkName.failing),
                    comment=datetime.now(tz=UTC).strftime("%Y-%m-%d %H:%M:%S UTC"),
                )
            except StorageError as e:
                plog.warning("mark_failing_failed", error=e.message)
                failures.append(f"add mark: {e.message}")
                self._notifier.notify(
                    f"[ci] failed to mark {code(package)} as failing: {escape(e.message)}"
                )
            else:
                self._notifier.notify(f"[ci] {code(package)} has been marked as failing")

            try:
                await self._store.remove_marks(package, [str(MarkName.ready)])
            except NothingRemoved:
                plog.debug("no_ready_mark")
            except StorageError as e:
                plog.warning("unmark_ready_failed", error=e.message)
                failures.append(f"remove ready: {e.message}")
            else:
                self._notifier.notify(f"[ci] {code(package)} is no longer marked as ready")

        return WorkflowOutcome(
            ok=True,
            message="success",
            detail="; ".join(failures) if failures else None,
        )

    # -- queries -------------------------------------------------------------------

    async def list_assignments_and_marks(self) -> tuple[list[WorkItem], list[PackageMarks]]:
        work_list = await self._store.list_packagers_with_assignments()
        mark_list = await self._store.list_marks_by_package()
        return work_list, mark_list

    async def package_status(self, package: str) -> PackageStatus:
        return await self._store.package_status(package)


def _edge_to(relations: list[RelationView], required: str) -> RelationView | None:
    return next((r for r in relations if r.required.name == required), None)


# --- Module Notes -----------------------------------------------------------
# Notices of one invocation are pushed in step order (announce, assignment, marks,
# cascade); the two concurrent steps hand their notices back instead of pushing
# them directly, so their relative order does not depend on scheduling.

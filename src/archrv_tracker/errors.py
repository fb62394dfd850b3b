"""
archrv_tracker.errors

Exception hierarchy shared by the store, the resolution workflows and the notifier.

Responsibilities:
- Separate storage failures from workflow preconditions and delivery failures.
- Keep the underlying cause attached for operators (`detail` in HTTP responses).
"""

from __future__ import annotations


class TrackerError(Exception):
    """
    Base class for every error raised deliberately by this service.
    """

    def __init__(self, message: str, *, cause: BaseException | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.cause = cause

    @property
    def detail(self) -> str:
        return str(self.cause) if self.cause is not None else self.message


class StorageError(TrackerError):
    pass


class NotFound(StorageError):
    pass


class NothingRemoved(StorageError):
    pass


class NoAssignments(StorageError):
    pass


class NotAssigned(StorageError):
    pass


class PreconditionFailed(TrackerError):
    pass


class NoAssignee(PreconditionFailed):
    pass


class UnknownPackage(PreconditionFailed):
    pass


class DeliveryError(TrackerError):
    pass


class NotifierClosed(TrackerError):
    # Raised by Notifier.notify after shutdown; callers treat it as fatal.
    pass


# --- Module Notes -----------------------------------------------------------
# The API layer maps PreconditionFailed to 400 and any other TrackerError to 500
# (see `archrv_tracker.api.app`).

from __future__ import annotations


class SchedulerError(Exception):
    """Base class for scheduler errors."""


class StoreFormatError(SchedulerError):
    """Raised when a persisted blob or an import file is not a valid store.

    The store format is a JSON object mapping composite keys to review items.
    """

    def __init__(self, message: str, *, source: str | None = None) -> None:
        super().__init__(message)
        self.source = source

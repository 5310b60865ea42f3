"""Custom exceptions for story loading."""
from __future__ import annotations


class DataError(Exception):
    """Base exception for the data layer."""


class DataLoadError(DataError):
    """Raised when a story file is missing or unreadable."""


class StoryParseError(DataError):
    """Raised when story content is malformed.

    ``location`` points at the offending spot: ``line N, column M`` for syntax
    problems, or a JSON path such as ``units[2].reactions[0].score`` for
    structural ones.
    """

    def __init__(self, message: str, location: str | None = None, source: str | None = None) -> None:
        self.message = message
        self.location = location
        self.source = source
        super().__init__(self._format())

    def _format(self) -> str:
        where = ", ".join(part for part in (self.source, self.location) if part)
        return f"{self.message} ({where})" if where else self.message

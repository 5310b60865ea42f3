"""Service-layer exceptions."""
from __future__ import annotations


class GameSessionError(Exception):
    """Base class for rejected session moves."""


class ReactionNotFoundError(GameSessionError):
    """Raised when no reaction on the current unit matches the requested text."""

    def __init__(self, unit_id: str, reaction_text: str) -> None:
        self.unit_id = unit_id
        self.reaction_text = reaction_text
        super().__init__(f"Unit '{unit_id}' has no reaction '{reaction_text}'.")


class UndoCalledWithEmptyHistoryError(GameSessionError):
    """Raised when undo is requested before any move was made."""

    def __init__(self) -> None:
        super().__init__("There is no earlier position to return to.")


class SaveLoadError(Exception):
    """Raised when save or load operations fail."""


class SessionRecordError(SaveLoadError):
    """Raised when a persisted session record cannot be parsed."""


class UnknownUnitIdError(SaveLoadError):
    """Raised when a session record references a unit the story does not have."""

    def __init__(self, unit_id: str) -> None:
        self.unit_id = unit_id
        super().__init__(f"Session references unknown unit '{unit_id}'.")


class SessionNotFoundError(SaveLoadError):
    """Raised when no record exists for a session id."""

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"No saved session '{session_id}'.")

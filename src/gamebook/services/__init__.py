"""Service layer exports."""

from .errors import (
    GameSessionError,
    ReactionNotFoundError,
    SaveLoadError,
    SessionNotFoundError,
    SessionRecordError,
    UndoCalledWithEmptyHistoryError,
    UnknownUnitIdError,
)
from .game_session import GameSession
from .session_serializer import SessionSerializer
from .session_store import SessionStore
from .play_service import PlayService, PlayView

__all__ = [
    "GameSession",
    "GameSessionError",
    "PlayService",
    "PlayView",
    "ReactionNotFoundError",
    "SaveLoadError",
    "SessionNotFoundError",
    "SessionRecordError",
    "SessionSerializer",
    "SessionStore",
    "UndoCalledWithEmptyHistoryError",
    "UnknownUnitIdError",
]

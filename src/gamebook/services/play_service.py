"""Request cycle for web front ends: load or create, move, render, save."""
from __future__ import annotations

import logging
from dataclasses import dataclass

from gamebook.domain import StoryGraph
from gamebook.presentation.markup import normalize_text
from gamebook.presentation.page import build_page
from gamebook.services.errors import (
    ReactionNotFoundError,
    SaveLoadError,
    SessionNotFoundError,
    UndoCalledWithEmptyHistoryError,
)
from gamebook.services.game_session import GameSession
from gamebook.services.session_serializer import SessionSerializer
from gamebook.services.session_store import SessionStore

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class PlayView:
    """Data returned to the HTTP layer after each request."""

    session_id: str
    html: str
    unit_id: str
    can_undo: bool
    error: str | None = None


class PlayService:
    """Drives sessions against one shared story graph.

    The persisted record is the source of truth: every call loads it, applies
    at most one move, and writes it back. Callers that accept concurrent
    requests for the same session id must serialize them.
    """

    def __init__(
        self,
        graph: StoryGraph,
        store: SessionStore,
        *,
        serializer: SessionSerializer | None = None,
    ) -> None:
        self._graph = graph
        self._store = store
        self._serializer = serializer or SessionSerializer()

    def start(self, session_id: str | None = None) -> PlayView:
        """Resume a saved session, or begin a new one."""
        if session_id is None or not self._store.exists(session_id):
            return self._start_fresh(self._store.new_session_id() if session_id is None else session_id)
        try:
            session = self._load(session_id)
        except SaveLoadError as exc:
            logger.warning("Discarding unusable session %s: %s", session_id, exc)
            return self._start_fresh(session_id)
        return self._view(session_id, session)

    def react(self, session_id: str, reaction_key: str) -> PlayView:
        """Follow the reaction the player clicked."""
        session = self._load(session_id)
        try:
            session.move_to_reaction(self._resolve_reaction_text(session, reaction_key))
        except ReactionNotFoundError as exc:
            logger.warning("Session %s: %s", session_id, exc)
            return self._view(session_id, session, error="That choice is no longer available.")
        self._save(session_id, session)
        return self._view(session_id, session)

    def undo(self, session_id: str) -> PlayView:
        """Step back to the previous unit."""
        session = self._load(session_id)
        try:
            session.undo()
        except UndoCalledWithEmptyHistoryError as exc:
            logger.warning("Session %s: %s", session_id, exc)
            return self._view(session_id, session, error=str(exc))
        self._save(session_id, session)
        return self._view(session_id, session)

    def _start_fresh(self, session_id: str) -> PlayView:
        session = GameSession.new(self._graph)
        self._save(session_id, session)
        logger.info("Started session %s at unit '%s'", session_id, session.current.id)
        return self._view(session_id, session)

    def _load(self, session_id: str) -> GameSession:
        try:
            data = self._store.read(session_id)
        except FileNotFoundError as exc:
            raise SessionNotFoundError(session_id) from exc
        return self._serializer.load(data, self._graph)

    def _save(self, session_id: str, session: GameSession) -> None:
        self._store.write(session_id, self._serializer.save(session))

    @staticmethod
    def _resolve_reaction_text(session: GameSession, reaction_key: str) -> str:
        # Links carry the key after quote/dash substitution; map it back to the label.
        labels = [arrow.display_text for arrow in session.current.reactions]
        if reaction_key in labels:
            return reaction_key
        for label in labels:
            if normalize_text(label) == reaction_key:
                return label
        return reaction_key

    @staticmethod
    def _view(session_id: str, session: GameSession, *, error: str | None = None) -> PlayView:
        return PlayView(
            session_id=session_id,
            html=build_page(session, error=error),
            unit_id=session.current.id,
            can_undo=session.can_undo(),
            error=error,
        )

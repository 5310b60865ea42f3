"""Per-player session state machine over a shared story graph."""
from __future__ import annotations

import logging
from typing import Iterable, List, Sequence, Tuple

from gamebook.domain import ReactionArrow, StoryGraph, Unit
from gamebook.services.errors import (
    ReactionNotFoundError,
    UndoCalledWithEmptyHistoryError,
    UnknownUnitIdError,
)

logger = logging.getLogger(__name__)


class GameSession:
    """Tracks one player's position and undo history.

    The session only references units owned by ``graph``; it never mutates
    them. Every operation either commits fully or leaves the session as it
    was.
    """

    def __init__(self, graph: StoryGraph, current: Unit, history: Iterable[Unit] = ()) -> None:
        self._graph = graph
        self._current = current
        self._history: List[Unit] = list(history)

    @classmethod
    def new(cls, graph: StoryGraph) -> "GameSession":
        """Start a fresh session at the story's first unit."""
        return cls(graph, graph.first_unit)

    @classmethod
    def restore(cls, graph: StoryGraph, current_id: str, history_ids: Sequence[str]) -> "GameSession":
        """Rebuild a session from persisted unit ids."""
        current = _resolve(graph, current_id)
        history = [_resolve(graph, unit_id) for unit_id in history_ids]
        return cls(graph, current, history)

    @property
    def graph(self) -> StoryGraph:
        return self._graph

    @property
    def current(self) -> Unit:
        return self._current

    @property
    def history(self) -> Tuple[Unit, ...]:
        return tuple(self._history)

    def get_action_text(self) -> str:
        """Return the current unit's raw action text."""
        return self._current.action_text

    def get_reactions_by_score(self) -> List[ReactionArrow]:
        """Return current reactions, highest score first, ties in authoring order."""
        return sorted(self._current.reactions, key=lambda arrow: arrow.score, reverse=True)

    def get_reaction_texts_by_score(self) -> List[str]:
        return [arrow.display_text for arrow in self.get_reactions_by_score()]

    def can_undo(self) -> bool:
        return bool(self._history)

    def move_to_reaction(self, reaction_text: str) -> Unit:
        """Follow the first reaction whose label matches exactly.

        Raises ReactionNotFoundError without touching the session when no
        reaction on the current unit carries that label.
        """
        arrow = self._find_reaction(reaction_text)
        target = self._graph.target_of(arrow)
        self._history.append(self._current)
        self._current = target
        logger.debug("Moved via '%s' to unit '%s' (history %d)", arrow.id, target.id, len(self._history))
        return target

    def undo(self) -> Unit:
        """Return to the unit visited before the last move."""
        if not self._history:
            raise UndoCalledWithEmptyHistoryError()
        self._current = self._history.pop()
        logger.debug("Undo to unit '%s' (history %d)", self._current.id, len(self._history))
        return self._current

    def _find_reaction(self, reaction_text: str) -> ReactionArrow:
        for arrow in self._current.reactions:
            if arrow.display_text == reaction_text:
                return arrow
        raise ReactionNotFoundError(self._current.id, reaction_text)

    def __repr__(self) -> str:
        return f"GameSession(current={self._current.id!r}, history={len(self._history)})"


def _resolve(graph: StoryGraph, unit_id: str) -> Unit:
    try:
        return graph.get_unit(unit_id)
    except KeyError as exc:
        raise UnknownUnitIdError(unit_id) from exc

"""Console-driven play loop."""
from __future__ import annotations

import logging
from typing import Literal, Tuple

from gamebook.domain import StoryGraph
from gamebook.presentation.cli.render import choose_dialect, render_choices, render_heading, render_unit
from gamebook.presentation.markup import PlainDialect
from gamebook.services import (
    GameSession,
    ReactionNotFoundError,
    SaveLoadError,
    SessionSerializer,
    SessionStore,
    UndoCalledWithEmptyHistoryError,
)

logger = logging.getLogger(__name__)

ActionKind = Literal["react", "undo", "quit"]
Action = Tuple[ActionKind, int]


def main(
    graph: StoryGraph,
    store: SessionStore,
    session_id: str | None = None,
    *,
    fresh: bool = False,
    dialect: PlainDialect | None = None,
) -> str:
    """Play ``graph`` in the terminal and return the session id used."""
    dialect = dialect or choose_dialect()
    serializer = SessionSerializer()
    session_id, session = _load_or_create(graph, store, serializer, session_id, fresh=fresh)
    print(f"=== {graph.title or 'Gamebook'} ===")
    print(f"Session: {session_id}")
    while True:
        _render_session(session, dialect)
        reactions = session.get_reaction_texts_by_score()
        if not reactions and not session.can_undo():
            print("\nThe End.")
            return session_id
        kind, index = _prompt_action(len(reactions), session.can_undo())
        if kind == "quit":
            print("Progress saved. Goodbye!")
            return session_id
        try:
            if kind == "undo":
                session.undo()
            else:
                session.move_to_reaction(reactions[index])
        except (ReactionNotFoundError, UndoCalledWithEmptyHistoryError) as exc:
            print(str(exc))
            continue
        store.write(session_id, serializer.save(session))


def _load_or_create(
    graph: StoryGraph,
    store: SessionStore,
    serializer: SessionSerializer,
    session_id: str | None,
    *,
    fresh: bool,
) -> Tuple[str, GameSession]:
    if session_id is None:
        session_id = store.new_session_id()
    if fresh:
        logger.info("Discarding saved progress for session %s", session_id)
        store.delete(session_id)
    elif store.exists(session_id):
        try:
            return session_id, serializer.load(store.read(session_id), graph)
        except SaveLoadError as exc:
            logger.warning("Session %s could not be restored: %s", session_id, exc)
            print(f"Saved progress could not be restored ({exc}). Starting over.")
    session = GameSession.new(graph)
    store.write(session_id, serializer.save(session))
    return session_id, session


def _render_session(session: GameSession, dialect: PlainDialect) -> None:
    render_heading("Story")
    render_unit(session.current.id, session.current.paragraphs(), dialect)
    render_choices(session.get_reaction_texts_by_score(), dialect, can_undo=session.can_undo())


def _parse_action(raw: str, choice_count: int, can_undo: bool) -> Action | None:
    value = raw.strip().lower()
    if value == "q":
        return ("quit", -1)
    if value == "u":
        return ("undo", -1) if can_undo else None
    try:
        index = int(value) - 1
    except ValueError:
        return None
    if 0 <= index < choice_count:
        return ("react", index)
    return None


def _prompt_action(choice_count: int, can_undo: bool) -> Action:
    while True:
        action = _parse_action(input("Select an option: "), choice_count, can_undo)
        if action is not None:
            return action
        if choice_count:
            print(f"Please enter a value between 1 and {choice_count}, or one of the letters shown.")
        else:
            print("Please enter one of the letters shown.")

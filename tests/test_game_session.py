import pytest

from gamebook.domain import ReactionArrow, StoryGraph, Unit
from gamebook.services import (
    GameSession,
    ReactionNotFoundError,
    UndoCalledWithEmptyHistoryError,
    UnknownUnitIdError,
)


def _make_graph() -> StoryGraph:
    hall_arrows = (
        ReactionArrow(id="hall.east", display_text="Go east", score=1, target_id="east"),
        ReactionArrow(id="hall.west", display_text="Go west", score=5, target_id="west"),
        ReactionArrow(id="hall.wait", display_text="Wait", score=1, target_id="hall"),
        ReactionArrow(id="hall.sing", display_text="Sing", score=3, target_id="east"),
        ReactionArrow(id="hall.twin", display_text="Go east", score=0, target_id="west"),
    )
    east_arrows = (ReactionArrow(id="east.back", display_text="Back", score=0, target_id="hall"),)
    units = {
        "hall": Unit(id="hall", action_text="A hall.", reactions=hall_arrows),
        "east": Unit(id="east", action_text="East room.", reactions=east_arrows),
        "west": Unit(id="west", action_text="West room."),
    }
    arrows = {arrow.id: arrow for arrow in hall_arrows + east_arrows}
    return StoryGraph(first_unit=units["hall"], units_by_id=units, arrows_by_id=arrows)


def test_new_session_starts_at_first_unit() -> None:
    session = GameSession.new(_make_graph())

    assert session.current.id == "hall"
    assert session.history == ()
    assert not session.can_undo()
    assert session.get_action_text() == "A hall."


def test_reactions_sorted_by_score_with_stable_ties() -> None:
    session = GameSession.new(_make_graph())

    assert session.get_reaction_texts_by_score() == ["Go west", "Sing", "Go east", "Wait", "Go east"]
    scores = [arrow.score for arrow in session.get_reactions_by_score()]
    assert all(left >= right for left, right in zip(scores, scores[1:]))


def test_move_pushes_history_and_follows_target() -> None:
    session = GameSession.new(_make_graph())

    target = session.move_to_reaction("Go west")

    assert target.id == "west"
    assert session.current.id == "west"
    assert [unit.id for unit in session.history] == ["hall"]
    assert session.can_undo()


def test_history_length_matches_move_count_through_cycles() -> None:
    session = GameSession.new(_make_graph())

    moves = ["Wait", "Wait", "Go east", "Back", "Sing"]
    for count, reaction in enumerate(moves, start=1):
        session.move_to_reaction(reaction)
        assert len(session.history) == count

    assert session.current.id == "east"


def test_duplicate_display_text_picks_first_in_authoring_order() -> None:
    session = GameSession.new(_make_graph())

    session.move_to_reaction("Go east")

    assert session.current.id == "east"


def test_unknown_reaction_leaves_session_unchanged() -> None:
    session = GameSession.new(_make_graph())
    session.move_to_reaction("Go east")
    before = (session.current, session.history)

    with pytest.raises(ReactionNotFoundError) as excinfo:
        session.move_to_reaction("Fly away")

    assert (session.current, session.history) == before
    assert excinfo.value.unit_id == "east"
    assert excinfo.value.reaction_text == "Fly away"


def test_reaction_match_is_exact() -> None:
    session = GameSession.new(_make_graph())

    with pytest.raises(ReactionNotFoundError):
        session.move_to_reaction("go west")
    with pytest.raises(ReactionNotFoundError):
        session.move_to_reaction("Go west ")


def test_undo_is_inverse_of_last_move() -> None:
    session = GameSession.new(_make_graph())
    session.move_to_reaction("Go east")
    before_current = session.current
    before_history = session.history

    session.move_to_reaction("Back")
    restored = session.undo()

    assert restored is before_current
    assert session.current is before_current
    assert session.history == before_history


def test_undo_walks_back_to_start() -> None:
    session = GameSession.new(_make_graph())
    session.move_to_reaction("Go east")
    session.move_to_reaction("Back")
    session.move_to_reaction("Go west")

    visited = [session.undo().id, session.undo().id, session.undo().id]

    assert visited == ["hall", "east", "hall"]
    assert not session.can_undo()


def test_undo_with_empty_history_raises_and_keeps_state() -> None:
    session = GameSession.new(_make_graph())

    with pytest.raises(UndoCalledWithEmptyHistoryError):
        session.undo()

    assert session.current.id == "hall"
    assert session.history == ()


def test_history_property_is_a_copy() -> None:
    session = GameSession.new(_make_graph())
    session.move_to_reaction("Go east")

    history = session.history
    session.move_to_reaction("Back")

    assert len(history) == 1
    assert len(session.history) == 2


def test_restore_resolves_ids() -> None:
    graph = _make_graph()

    session = GameSession.restore(graph, "west", ["hall", "east", "hall"])

    assert session.current is graph.units_by_id["west"]
    assert [unit.id for unit in session.history] == ["hall", "east", "hall"]


def test_restore_rejects_unknown_id() -> None:
    with pytest.raises(UnknownUnitIdError) as excinfo:
        GameSession.restore(_make_graph(), "hall", ["attic"])

    assert excinfo.value.unit_id == "attic"


def test_sessions_share_graph_without_interference() -> None:
    graph = _make_graph()
    first = GameSession.new(graph)
    second = GameSession.new(graph)

    first.move_to_reaction("Go west")

    assert second.current.id == "hall"
    assert first.graph is second.graph

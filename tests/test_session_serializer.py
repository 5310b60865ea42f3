from __future__ import annotations

import pytest

from gamebook.data import StoryLoader, get_default_story_path
from gamebook.domain import StoryGraph
from gamebook.services import GameSession, SessionRecordError, SessionSerializer, UnknownUnitIdError


def _load_graph() -> StoryGraph:
    return StoryLoader().load_file(get_default_story_path())


def _played_session(graph: StoryGraph) -> GameSession:
    session = GameSession.new(graph)
    for reaction in ["Ask the fisherman about the keeper", "Look out over the water", "Climb to the lighthouse door"]:
        session.move_to_reaction(reaction)
    return session


def test_save_writes_header_current_then_history() -> None:
    graph = _load_graph()
    session = _played_session(graph)

    record = SessionSerializer().save(session)

    assert record.decode("utf-8").splitlines() == [
        "gamebook-session 1",
        "door",
        "shore",
        "fisherman",
        "shore",
    ]


def test_round_trip_preserves_current_and_history() -> None:
    graph = _load_graph()
    serializer = SessionSerializer()
    session = _played_session(graph)

    restored = serializer.load(serializer.save(session), graph)

    assert restored.current.id == session.current.id
    assert [unit.id for unit in restored.history] == [unit.id for unit in session.history]
    assert restored.graph is graph


def test_round_trip_fresh_session() -> None:
    graph = _load_graph()
    serializer = SessionSerializer()

    restored = serializer.load(serializer.save(GameSession.new(graph)), graph)

    assert restored.current is graph.first_unit
    assert not restored.can_undo()


def test_restored_session_can_undo_to_saved_history() -> None:
    graph = _load_graph()
    serializer = SessionSerializer()
    restored = serializer.load(serializer.save(_played_session(graph)), graph)

    assert restored.undo().id == "shore"
    assert restored.undo().id == "fisherman"


def test_load_tolerates_trailing_blank_lines_and_crlf() -> None:
    graph = _load_graph()

    restored = SessionSerializer().load(b"gamebook-session 1\r\ndoor\r\nshore\r\n\r\n", graph)

    assert restored.current.id == "door"
    assert [unit.id for unit in restored.history] == ["shore"]


def test_unknown_unit_id_is_not_replaced_with_first_unit() -> None:
    graph = _load_graph()

    with pytest.raises(UnknownUnitIdError) as excinfo:
        SessionSerializer().load(b"gamebook-session 1\nshore\nbasement\n", graph)

    assert excinfo.value.unit_id == "basement"


@pytest.mark.parametrize(
    "record",
    [
        b"",
        b"\n\n",
        b"gamebook-session 1\n",
        b"some-other-format 1\nshore\n",
        b"gamebook-session 99\nshore\n",
        b"gamebook-session 1\nshore\n\ndoor\n",
        b"\xff\xfe\x00",
    ],
)
def test_malformed_records_raise_record_error(record: bytes) -> None:
    with pytest.raises(SessionRecordError):
        SessionSerializer().load(record, _load_graph())

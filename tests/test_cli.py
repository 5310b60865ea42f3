import json
from pathlib import Path

import pytest

from gamebook import main as entry
from gamebook.data import StoryLoader, get_default_story_path
from gamebook.presentation.cli import app, config
from gamebook.presentation.markup import PlainDialect
from gamebook.services import SessionSerializer, SessionStore


def _scripted_input(monkeypatch, answers: list[str]) -> None:
    replies = iter(answers)
    monkeypatch.setattr("builtins.input", lambda prompt="": next(replies))


def test_parse_action_accepts_numbers_undo_and_quit() -> None:
    assert app._parse_action("2", 3, False) == ("react", 1)
    assert app._parse_action(" Q ", 3, False) == ("quit", -1)
    assert app._parse_action("u", 3, True) == ("undo", -1)


@pytest.mark.parametrize("raw", ["0", "4", "abc", "", "u"])
def test_parse_action_rejects_invalid(raw: str) -> None:
    assert app._parse_action(raw, 3, False) is None


def test_play_loop_moves_undoes_and_saves(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.delenv("GAMEBOOK_DEBUG", raising=False)
    graph = StoryLoader().load_file(get_default_story_path())
    store = SessionStore(tmp_path)
    # shore: 1 = door (score 3); door: 2 = read the ledger (tie, authoring order); then undo, quit.
    _scripted_input(monkeypatch, ["1", "9", "2", "u", "q"])

    session_id = app.main(graph, store, "tester", dialect=PlainDialect())

    saved = SessionSerializer().load(store.read(session_id), graph)
    assert session_id == "tester"
    assert saved.current.id == "door"
    assert [unit.id for unit in saved.history] == ["shore"]
    out = capsys.readouterr().out
    assert "Please enter a value between 1 and 3" in out
    assert "Progress saved." in out


def test_play_loop_resumes_saved_session(monkeypatch, tmp_path: Path) -> None:
    graph = StoryLoader().load_file(get_default_story_path())
    store = SessionStore(tmp_path)
    store.write("resume", b"gamebook-session 1\nledger\nshore\ndoor\n")
    _scripted_input(monkeypatch, ["q"])

    app.main(graph, store, "resume", dialect=PlainDialect())

    assert store.read("resume") == b"gamebook-session 1\nledger\nshore\ndoor\n"


def test_play_loop_fresh_flag_discards_progress(monkeypatch, tmp_path: Path) -> None:
    graph = StoryLoader().load_file(get_default_story_path())
    store = SessionStore(tmp_path)
    store.write("again", b"gamebook-session 1\nledger\nshore\ndoor\n")
    _scripted_input(monkeypatch, ["q"])

    app.main(graph, store, "again", fresh=True, dialect=PlainDialect())

    assert store.read("again") == b"gamebook-session 1\nshore\n"


def test_fresh_start_deletes_the_old_record_first(monkeypatch, tmp_path: Path) -> None:
    graph = StoryLoader().load_file(get_default_story_path())
    store = SessionStore(tmp_path)
    store.write("again", b"not a session record")
    deleted: list[str] = []
    real_delete = store.delete

    def _recording_delete(session_id: str) -> None:
        deleted.append(session_id)
        real_delete(session_id)

    monkeypatch.setattr(store, "delete", _recording_delete)
    _scripted_input(monkeypatch, ["q"])

    app.main(graph, store, "again", fresh=True, dialect=PlainDialect())

    assert deleted == ["again"]
    assert store.read("again") == b"gamebook-session 1\nshore\n"


def test_debug_mode_prints_unit_ids(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.setenv("GAMEBOOK_DEBUG", "1")
    graph = StoryLoader().load_file(get_default_story_path())
    _scripted_input(monkeypatch, ["q"])

    app.main(graph, SessionStore(tmp_path), "dbg", dialect=PlainDialect())

    assert "[shore]" in capsys.readouterr().out


def test_load_config_defaults_when_missing(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("GAMEBOOK_LOG_LEVEL", raising=False)
    settings = config.load_config(tmp_path / "missing.json")

    assert settings["log_level"] == "WARNING"
    assert settings["story_path"] == str(get_default_story_path())


def test_config_round_trip_and_env_override(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("GAMEBOOK_LOG_LEVEL", raising=False)
    path = tmp_path / "config.json"
    config.save_config({"story_path": "/stories/x.json", "save_dir": "/saves", "log_level": "debug"}, path)

    assert config.load_config(path) == {
        "story_path": "/stories/x.json",
        "save_dir": "/saves",
        "log_level": "DEBUG",
    }
    monkeypatch.setenv("GAMEBOOK_LOG_LEVEL", "error")
    assert config.load_config(path)["log_level"] == "ERROR"


def test_corrupt_config_falls_back_to_defaults(monkeypatch, tmp_path: Path) -> None:
    monkeypatch.delenv("GAMEBOOK_LOG_LEVEL", raising=False)
    path = tmp_path / "config.json"
    path.write_text("{not json", encoding="utf-8")

    assert config.load_config(path) == config.default_config()


def test_validate_command_passes_for_bundled_story(capsys) -> None:
    exit_code = entry.main(["--validate", "--story", str(get_default_story_path())])

    assert exit_code == 0
    assert "Validation passed" in capsys.readouterr().out


def test_validate_command_fails_on_errors(tmp_path: Path, capsys) -> None:
    story = tmp_path / "bad.json"
    story.write_text(
        json.dumps({"units": [{"id": "a", "text": "x", "reactions": [{"text": "{x}", "target": "a"}]}]}),
        encoding="utf-8",
    )

    assert entry.main(["--validate", "--story", str(story)]) == 1
    assert "INVALID_REACTION_TEXT" in capsys.readouterr().out


def test_broken_story_is_fatal(tmp_path: Path, capsys) -> None:
    story = tmp_path / "broken.json"
    story.write_text('{"units": [', encoding="utf-8")

    assert entry.main(["--story", str(story)]) == 1
    assert "Cannot start" in capsys.readouterr().err


def test_init_config_writes_settings_file(monkeypatch, tmp_path: Path, capsys) -> None:
    monkeypatch.delenv("GAMEBOOK_LOG_LEVEL", raising=False)
    path = tmp_path / "nested" / "config.json"
    story = get_default_story_path()

    assert entry.main(["--init-config", "--config", str(path), "--story", str(story)]) == 0

    written = json.loads(path.read_text(encoding="utf-8"))
    assert written["story_path"] == str(story.resolve())
    assert written["log_level"] == "WARNING"
    assert config.load_config(path) == written
    assert "Wrote config" in capsys.readouterr().out

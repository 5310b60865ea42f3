"""Helpers for resolving data file locations."""
from __future__ import annotations

from pathlib import Path

DEFAULT_STORY_FILENAME = "lighthouse.json"


def get_repo_root() -> Path:
    """Return the repository root."""
    return Path(__file__).resolve().parents[3]


def get_stories_path(base_path: Path | str | None = None) -> Path:
    """Return the directory containing authored story files."""
    if base_path is not None:
        return Path(base_path)
    return get_repo_root() / "data" / "stories"


def get_default_story_path() -> Path:
    """Return the bundled story used when no story is configured."""
    return get_stories_path() / DEFAULT_STORY_FILENAME

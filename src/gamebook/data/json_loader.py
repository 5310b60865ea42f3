"""Low-level JSON helpers for story files."""
from __future__ import annotations

import json
from json.decoder import scanstring
from pathlib import Path
from typing import List, Tuple

from .errors import DataLoadError, StoryParseError


class _DuplicateKeyError(ValueError):
    def __init__(self, key: str) -> None:
        super().__init__(key)
        self.key = key


def _reject_duplicate_keys(pairs: List[Tuple[str, object]]) -> dict[str, object]:
    result: dict[str, object] = {}
    for key, value in pairs:
        if key in result:
            raise _DuplicateKeyError(key)
        result[key] = value
    return result


def read_bytes(path: Path) -> bytes:
    """Read a file from disk and raise DataLoadError on failure."""
    try:
        return path.read_bytes()
    except FileNotFoundError as exc:
        raise DataLoadError(f"Story file not found: {path}") from exc
    except OSError as exc:
        raise DataLoadError(f"Unable to read story file: {path}") from exc


def parse_json(source: bytes | str, source_name: str | None = None) -> object:
    """Decode JSON text, rejecting duplicate object keys.

    Syntax errors are reported as StoryParseError with a line/column location.
    """
    if isinstance(source, bytes):
        try:
            text = source.decode("utf-8-sig")
        except UnicodeDecodeError as exc:
            raise StoryParseError(
                "Story source is not valid UTF-8", f"byte {exc.start}", source_name
            ) from exc
    else:
        text = source

    try:
        return json.loads(text, object_pairs_hook=_reject_duplicate_keys)
    except _DuplicateKeyError as exc:
        raise StoryParseError(
            f"Duplicate key '{exc.key}'", _locate_key(text, exc.key), source_name
        ) from exc
    except json.JSONDecodeError as exc:
        raise StoryParseError(
            f"Invalid JSON: {exc.msg}", f"line {exc.lineno}, column {exc.colno}", source_name
        ) from exc


def _locate_key(text: str, key: str) -> str | None:
    """Return the position of the first repeated ``key`` within one object.

    The decoder hook sees no positions, so the text is rescanned with the
    same string decoder while tracking the keys seen in each open object.
    """
    open_objects: List[set[str] | None] = []
    expect_key = False
    index = 0
    while index < len(text):
        char = text[index]
        if char == '"':
            try:
                value, end = scanstring(text, index + 1)
            except ValueError:
                return None
            seen = open_objects[-1] if open_objects else None
            if expect_key and seen is not None:
                if value == key and value in seen:
                    return _format_position(text, index)
                seen.add(value)
                expect_key = False
            index = end
            continue
        if char == "{":
            open_objects.append(set())
            expect_key = True
        elif char == "[":
            open_objects.append(None)
        elif char in "}]":
            if open_objects:
                open_objects.pop()
            expect_key = False
        elif char == ",":
            expect_key = bool(open_objects) and open_objects[-1] is not None
        elif char == ":":
            expect_key = False
        index += 1
    return None


def _format_position(text: str, index: int) -> str:
    line = text.count("\n", 0, index) + 1
    column = index - text.rfind("\n", 0, index)
    return f"line {line}, column {column}"

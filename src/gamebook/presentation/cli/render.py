"""Shared CLI rendering helpers."""
from __future__ import annotations

import os
import sys
import textwrap
from typing import Sequence

from gamebook.presentation.markup import AnsiDialect, PlainDialect, render

_LINE_WIDTH = 78


def debug_enabled() -> bool:
    """Return True only when GAMEBOOK_DEBUG is explicitly set to '1'."""
    return os.getenv("GAMEBOOK_DEBUG") == "1"


def choose_dialect() -> PlainDialect:
    """Use terminal styling only for an interactive terminal without NO_COLOR."""
    if os.getenv("NO_COLOR") or not sys.stdout.isatty():
        return PlainDialect()
    return AnsiDialect()


def wrap_text(text: str, width: int = _LINE_WIDTH) -> list[str]:
    """Wrap text on word boundaries; empty text yields a single blank line."""
    if not text or width <= 0:
        return [text]
    return textwrap.wrap(text, width=width, break_long_words=False, break_on_hyphens=False) or [""]


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_unit(unit_id: str, paragraphs: Sequence[str], dialect: PlainDialect) -> None:
    """Render a unit's paragraphs, with its id when debugging."""
    if debug_enabled():
        print(f"[{unit_id}]")
    for idx, paragraph in enumerate(paragraphs):
        if idx > 0:
            print()
        for line in wrap_text(render(paragraph, dialect)):
            print(line)


def render_choices(choices: Sequence[str], dialect: PlainDialect, *, can_undo: bool) -> None:
    """Display numbered reactions followed by the undo and quit commands."""
    render_heading("Choices")
    for idx, label in enumerate(choices, start=1):
        print(f"{idx}. {render(label, dialect)}")
    if can_undo:
        print("u. Go back")
    print("q. Save and quit")

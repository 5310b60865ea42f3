"""Assembles the HTML fragment shown for a session's current unit."""
from __future__ import annotations

import html
from typing import TYPE_CHECKING, List

from gamebook.presentation.markup import HtmlDialect, REACTION_START, REACTION_STOP, render

if TYPE_CHECKING:
    from gamebook.services.game_session import GameSession

UNDO_LINK = "<a class='undo' href='ignore' onclick='return onUndo();'>Go back</a>"


def build_page(session: GameSession, *, error: str | None = None, dialect: HtmlDialect | None = None) -> str:
    """Return paragraphs, the ranked reaction list and the undo link."""
    dialect = dialect or HtmlDialect()
    parts: List[str] = []
    if error:
        parts.append(f"<p class='error'>{html.escape(error)}</p>")
    for paragraph in session.current.paragraphs():
        parts.append(f"<p>{render(paragraph, dialect)}</p>")

    parts.append("<ul>")
    for reaction_text in session.get_reaction_texts_by_score():
        parts.append(f"<li>{render(REACTION_START + reaction_text + REACTION_STOP, dialect)}</li>")
    parts.append("</ul>")

    if session.can_undo():
        parts.append(UNDO_LINK)
    return "".join(parts)

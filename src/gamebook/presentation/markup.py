"""Markup renderer for unit action text and reaction labels.

Raw story text carries single-character control markers:

* ``{...}`` a reaction link; the raw text inside is the reaction key
* ``<...>`` emphasis
* ``[...]`` / ``|...]`` positive / negative debug annotation

Before parsing, straight quotes become curly quotes and ``--`` becomes an em
dash. A sentinel is appended to the text so any span left open is closed at
the end instead of raising.
"""
from __future__ import annotations

import html
from dataclasses import dataclass
from typing import List, Tuple

QUOTE = '"'
OPEN_QUOTE = "“"
CLOSE_QUOTE = "”"
DOUBLE_HYPHEN = "--"
EM_DASH = "—"

REACTION_START = "{"
REACTION_STOP = "}"
EMPHASIS_START = "<"
EMPHASIS_STOP = ">"
POSITIVE_DEBUG_START = "["
NEGATIVE_DEBUG_START = "|"
DEBUG_STOP = "]"
SENTINEL = "\0"

_REACTION_KEY_STOPS = (REACTION_STOP, SENTINEL)


def fix_quotes(text: str) -> str:
    """Turn straight double quotes into opening or closing curly quotes."""
    result: List[str] = []
    previous = " "
    for char in text:
        if char == QUOTE:
            result.append(OPEN_QUOTE if previous.isspace() else CLOSE_QUOTE)
        else:
            result.append(char)
        previous = char
    return "".join(result)


def normalize_text(text: str) -> str:
    """Apply quote and dash substitution without structural parsing."""
    return fix_quotes(text).replace(DOUBLE_HYPHEN, EM_DASH)


class PlainDialect:
    """Output dialect that drops all span markup and keeps only the text."""

    def text(self, value: str) -> str:
        return value

    def open_reaction(self, key: str) -> str:
        return ""

    def close_reaction(self) -> str:
        return ""

    def open_emphasis(self) -> str:
        return ""

    def close_emphasis(self) -> str:
        return ""

    def open_debug(self, positive: bool) -> str:
        return ""

    def close_debug(self, positive: bool) -> str:
        return ""


class HtmlDialect(PlainDialect):
    """HTML fragments consumed by the web page shell."""

    def text(self, value: str) -> str:
        return html.escape(value, quote=False)

    def open_reaction(self, key: str) -> str:
        return (
            "<a class='reaction' href='ignore' "
            f"data-reaction='{html.escape(key, quote=True)}' "
            "onclick='return onReactionClick(this.dataset.reaction);'>"
        )

    def close_reaction(self) -> str:
        return "</a>"

    def open_emphasis(self) -> str:
        return "<i>"

    def close_emphasis(self) -> str:
        return "</i>"

    def open_debug(self, positive: bool) -> str:
        return f"<b class='{'debug-positive' if positive else 'debug-negative'}'>"

    def close_debug(self, positive: bool) -> str:
        return "</b>"


class AnsiDialect(PlainDialect):
    """Terminal escape codes for the console front end."""

    def open_reaction(self, key: str) -> str:
        return "\033[1m"

    def close_reaction(self) -> str:
        return "\033[22m"

    def open_emphasis(self) -> str:
        return "\033[3m"

    def close_emphasis(self) -> str:
        return "\033[23m"

    def open_debug(self, positive: bool) -> str:
        return "\033[32m" if positive else "\033[31m"

    def close_debug(self, positive: bool) -> str:
        return "\033[39m"


@dataclass(frozen=True, slots=True)
class RenderResult:
    """Rendered markup plus what the parser observed along the way."""

    markup: str
    reaction_keys: Tuple[str, ...]
    unterminated: int


class MarkupParser:
    """Single left-to-right scan over one piece of normalized text.

    Open spans live on an explicit stack of ``(terminator, closing markup)``
    pairs, so nesting depth is bounded by the text rather than the call
    stack. A parser instance is single-use; all state lives on the instance
    so concurrent renders never share anything.
    """

    def __init__(self, text: str, dialect: PlainDialect) -> None:
        self._text = normalize_text(text).replace(SENTINEL, "") + SENTINEL
        self._dialect = dialect
        self._index = 0
        self._output: List[str] = []
        self._open_spans: List[Tuple[str, str]] = []
        self._reaction_keys: List[str] = []
        self._unterminated = 0

    def parse(self) -> RenderResult:
        while self._step():
            pass
        return RenderResult(
            markup="".join(self._output),
            reaction_keys=tuple(self._reaction_keys),
            unterminated=self._unterminated,
        )

    def _step(self) -> bool:
        char = self._text[self._index]
        self._index += 1
        if char == REACTION_START:
            key = self._text[self._index : self._find_reaction_end()]
            self._reaction_keys.append(key)
            self._open_span(self._dialect.open_reaction(key), REACTION_STOP, self._dialect.close_reaction())
        elif char == EMPHASIS_START:
            self._open_span(self._dialect.open_emphasis(), EMPHASIS_STOP, self._dialect.close_emphasis())
        elif char in (POSITIVE_DEBUG_START, NEGATIVE_DEBUG_START):
            positive = char == POSITIVE_DEBUG_START
            self._open_span(
                self._dialect.open_debug(positive), DEBUG_STOP, self._dialect.close_debug(positive)
            )
        elif char == SENTINEL:
            # End of text closes every span still open, innermost first.
            self._unterminated += len(self._open_spans)
            while self._open_spans:
                self._close_span()
            return False
        elif self._open_spans and char == self._open_spans[-1][0]:
            self._close_span()
        else:
            self._output.append(self._dialect.text(char))
        return True

    def _open_span(self, opening: str, terminator: str, closing: str) -> None:
        self._output.append(opening)
        self._open_spans.append((terminator, closing))

    def _close_span(self) -> None:
        _, closing = self._open_spans.pop()
        self._output.append(closing)

    def _find_reaction_end(self) -> int:
        return min(
            position
            for position in (self._text.find(stop, self._index) for stop in _REACTION_KEY_STOPS)
            if position >= 0
        )


_HTML = HtmlDialect()


def parse(raw_text: str, dialect: PlainDialect | None = None) -> RenderResult:
    """Render ``raw_text`` and report reaction keys and unterminated spans."""
    return MarkupParser(raw_text, dialect or _HTML).parse()


def render(raw_text: str, dialect: PlainDialect | None = None) -> str:
    """Render ``raw_text`` into display markup (HTML by default)."""
    return parse(raw_text, dialect).markup

"""Story graph structures shared by every game session."""
from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping, Tuple

PARAGRAPH_BREAK = "@"


@dataclass(frozen=True, slots=True)
class ReactionArrow:
    """A scored, labelled edge from one unit to another."""

    id: str
    display_text: str
    score: float
    target_id: str


@dataclass(frozen=True, slots=True)
class Unit:
    """Narrative node: raw action text plus its outgoing reactions."""

    id: str
    action_text: str
    reactions: Tuple[ReactionArrow, ...] = ()

    def paragraphs(self) -> list[str]:
        """Split the action text on paragraph breaks, dropping a leading empty segment."""
        segments = self.action_text.split(PARAGRAPH_BREAK)
        if segments and not segments[0]:
            segments = segments[1:]
        return segments


@dataclass(frozen=True, slots=True, eq=False)
class StoryGraph:
    """Immutable result of loading a story file.

    Units and arrows live in flat maps keyed by id; arrows point at their
    target by id, so cycles in the story never become object cycles.
    """

    first_unit: Unit
    units_by_id: Mapping[str, Unit]
    arrows_by_id: Mapping[str, ReactionArrow]
    title: str = ""
    source_name: str = ""

    def __post_init__(self) -> None:
        object.__setattr__(self, "units_by_id", MappingProxyType(dict(self.units_by_id)))
        object.__setattr__(self, "arrows_by_id", MappingProxyType(dict(self.arrows_by_id)))

    def get_unit(self, unit_id: str) -> Unit:
        """Return a unit by id, raising KeyError when absent."""
        return self.units_by_id[unit_id]

    def target_of(self, arrow: ReactionArrow) -> Unit:
        """Resolve an arrow's destination unit."""
        return self.units_by_id[arrow.target_id]

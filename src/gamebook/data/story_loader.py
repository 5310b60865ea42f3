"""Loader that turns an authored story file into a StoryGraph."""
from __future__ import annotations

import logging
import math
import re
from pathlib import Path
from typing import Dict, List, NoReturn

from gamebook.data.errors import StoryParseError
from gamebook.data.json_loader import parse_json, read_bytes
from gamebook.domain import PARAGRAPH_BREAK, ReactionArrow, StoryGraph, Unit

logger = logging.getLogger(__name__)

_ID_PATTERN = re.compile(r"\S+")


class StoryLoader:
    """Parses and validates the JSON story format.

    Top level object::

        {"title": str?, "first_unit": str?, "units": [unit, ...]}

    Each unit is ``{"id": str, "text": str | [str, ...], "reactions": [...]}``
    where a list of paragraphs is joined with the paragraph-break marker. Each
    reaction is ``{"id": str?, "text": str, "score": number, "target": str}``;
    a missing reaction id defaults to ``"<unit id>#<index>"``. ``first_unit``
    defaults to the first unit listed.
    """

    def load_file(self, path: Path | str) -> StoryGraph:
        """Read and parse a story file from disk."""
        file_path = Path(path)
        return self.load(read_bytes(file_path), source_name=str(file_path))

    def load(self, source: bytes | str, source_name: str | None = None) -> StoryGraph:
        """Parse story source and return the immutable graph."""
        raw = self._require_mapping(source_name, parse_json(source, source_name), "story")
        title = raw.get("title", "")
        if not isinstance(title, str):
            self._fail(source_name, "title must be a string", "title")

        raw_units = raw.get("units")
        if not isinstance(raw_units, list):
            self._fail(source_name, "units must be a list", "units")
        if not raw_units:
            self._fail(source_name, "story must define at least one unit", "units")

        units: Dict[str, Unit] = {}
        arrows: Dict[str, ReactionArrow] = {}
        for index, entry in enumerate(raw_units):
            unit = self._build_unit(source_name, entry, f"units[{index}]", arrows)
            if unit.id in units:
                self._fail(source_name, f"Duplicate unit id '{unit.id}'", f"units[{index}].id")
            units[unit.id] = unit

        self._check_targets(source_name, units)

        first_unit_id = raw.get("first_unit")
        if first_unit_id is None:
            first_unit = next(iter(units.values()))
        else:
            first_unit_id = self._require_id(source_name, first_unit_id, "first_unit")
            if first_unit_id not in units:
                self._fail(
                    source_name, f"first_unit references missing unit '{first_unit_id}'", "first_unit"
                )
            first_unit = units[first_unit_id]

        graph = StoryGraph(
            first_unit=first_unit,
            units_by_id=units,
            arrows_by_id=arrows,
            title=title,
            source_name=source_name or "",
        )
        logger.info(
            "Loaded story %s: %d units, %d reactions, first unit '%s'",
            source_name or "<memory>",
            len(units),
            len(arrows),
            first_unit.id,
        )
        return graph

    def _build_unit(
        self,
        source_name: str | None,
        entry: object,
        context: str,
        arrows: Dict[str, ReactionArrow],
    ) -> Unit:
        unit_data = self._require_mapping(source_name, entry, context)
        unit_id = self._require_id(source_name, unit_data.get("id"), f"{context}.id")
        action_text = self._parse_text(source_name, unit_data.get("text"), f"{context}.text")
        reactions = self._parse_reactions(
            source_name, unit_data.get("reactions"), unit_id, context, arrows
        )
        return Unit(id=unit_id, action_text=action_text, reactions=tuple(reactions))

    def _parse_text(self, source_name: str | None, raw_text: object, context: str) -> str:
        if isinstance(raw_text, str):
            return raw_text
        if isinstance(raw_text, list) and all(isinstance(part, str) for part in raw_text):
            return PARAGRAPH_BREAK.join(raw_text)
        self._fail(source_name, "text must be a string or a list of strings", context)

    def _parse_reactions(
        self,
        source_name: str | None,
        raw_reactions: object,
        unit_id: str,
        context: str,
        arrows: Dict[str, ReactionArrow],
    ) -> List[ReactionArrow]:
        if raw_reactions is None:
            return []
        if not isinstance(raw_reactions, list):
            self._fail(source_name, "reactions must be a list if provided", f"{context}.reactions")
        reactions: List[ReactionArrow] = []
        for index, entry in enumerate(raw_reactions):
            reaction_ctx = f"{context}.reactions[{index}]"
            reaction_data = self._require_mapping(source_name, entry, reaction_ctx)
            raw_id = reaction_data.get("id")
            if raw_id is None:
                arrow_id = f"{unit_id}#{index}"
            else:
                arrow_id = self._require_id(source_name, raw_id, f"{reaction_ctx}.id")
            if arrow_id in arrows:
                self._fail(source_name, f"Duplicate reaction id '{arrow_id}'", f"{reaction_ctx}.id")
            display_text = reaction_data.get("text")
            if not isinstance(display_text, str) or not display_text:
                self._fail(source_name, "text must be a non-empty string", f"{reaction_ctx}.text")
            score = reaction_data.get("score", 0)
            if isinstance(score, bool) or not isinstance(score, (int, float)) or not math.isfinite(score):
                self._fail(source_name, "score must be a finite number", f"{reaction_ctx}.score")
            target_id = self._require_id(
                source_name, reaction_data.get("target"), f"{reaction_ctx}.target"
            )
            arrow = ReactionArrow(
                id=arrow_id,
                display_text=display_text,
                score=score,
                target_id=target_id,
            )
            arrows[arrow_id] = arrow
            reactions.append(arrow)
        return reactions

    def _check_targets(self, source_name: str | None, units: Dict[str, Unit]) -> None:
        for unit_index, unit in enumerate(units.values()):
            for reaction_index, arrow in enumerate(unit.reactions):
                if arrow.target_id not in units:
                    self._fail(
                        source_name,
                        f"Reaction '{arrow.id}' targets missing unit '{arrow.target_id}'",
                        f"units[{unit_index}].reactions[{reaction_index}].target",
                    )

    def _require_mapping(
        self, source_name: str | None, value: object, context: str
    ) -> dict[str, object]:
        if not isinstance(value, dict):
            self._fail(source_name, f"{context} must be an object", context)
        return value

    def _require_id(self, source_name: str | None, value: object, context: str) -> str:
        if not isinstance(value, str) or not _ID_PATTERN.fullmatch(value):
            self._fail(source_name, "id must be a non-empty string without whitespace", context)
        return value

    def _fail(self, source_name: str | None, message: str, location: str) -> NoReturn:
        raise StoryParseError(message, location, source_name)

"""Domain structure exports."""

from .story_graph import PARAGRAPH_BREAK, ReactionArrow, StoryGraph, Unit

__all__ = [
    "PARAGRAPH_BREAK",
    "ReactionArrow",
    "StoryGraph",
    "Unit",
]

"""Branching gamebook engine: story graph, sessions with undo, and markup rendering."""

__version__ = "0.1.0"

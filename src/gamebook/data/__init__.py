"""Data layer utilities for loading authored stories."""

from .errors import DataError, DataLoadError, StoryParseError
from .paths import get_default_story_path, get_repo_root, get_stories_path
from .story_loader import StoryLoader

__all__ = [
    "DataError",
    "DataLoadError",
    "StoryParseError",
    "StoryLoader",
    "get_default_story_path",
    "get_repo_root",
    "get_stories_path",
]

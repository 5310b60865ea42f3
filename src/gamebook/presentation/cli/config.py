"""CLI configuration helpers."""
from __future__ import annotations

import json
import logging
import os
from pathlib import Path
from typing import Dict

from gamebook.data.paths import get_default_story_path

_DEFAULT_LOG_LEVEL = "WARNING"
_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
_KNOWN_KEYS = ("story_path", "save_dir", "log_level")

logger = logging.getLogger(__name__)


def get_user_data_dir() -> Path:
    """Return the per-user data directory."""
    if os.name == "nt":
        base = os.environ.get("APPDATA")
        if base:
            return Path(base) / "Gamebook"
        return Path.home() / "Gamebook"
    return Path.home() / ".config" / "gamebook"


def get_default_config_path() -> Path:
    """Return the default per-user config path."""
    return get_user_data_dir() / "config.json"


def get_save_dir() -> Path:
    """Return the per-user session record directory."""
    return get_user_data_dir() / "sessions"


def default_config() -> Dict[str, str]:
    return {
        "story_path": str(get_default_story_path()),
        "save_dir": str(get_save_dir()),
        "log_level": _DEFAULT_LOG_LEVEL,
    }


def _normalize_log_level(value: object) -> str:
    if isinstance(value, str) and value.upper() in _LOG_LEVELS:
        return value.upper()
    return _DEFAULT_LOG_LEVEL


def load_config(path: Path | None = None) -> Dict[str, str]:
    """Load config from disk, filling unset or invalid keys with defaults.

    ``GAMEBOOK_LOG_LEVEL`` overrides the stored log level.
    """
    config_path = path or get_default_config_path()
    config = default_config()
    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except FileNotFoundError:
        raw = {}
    except (OSError, ValueError) as exc:
        logger.warning("Ignoring unreadable config %s: %s", config_path, exc)
        raw = {}
    if isinstance(raw, dict):
        for key in ("story_path", "save_dir"):
            value = raw.get(key)
            if isinstance(value, str) and value:
                config[key] = value
        config["log_level"] = _normalize_log_level(raw.get("log_level"))
    env_level = os.environ.get("GAMEBOOK_LOG_LEVEL")
    if env_level:
        config["log_level"] = _normalize_log_level(env_level)
    return config


def save_config(config: Dict[str, str], path: Path | None = None) -> None:
    """Persist config to disk."""
    config_path = path or get_default_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    defaults = default_config()
    payload = {key: config.get(key, defaults[key]) for key in _KNOWN_KEYS}
    payload["log_level"] = _normalize_log_level(payload["log_level"])
    config_path.write_text(json.dumps(payload, indent=2, sort_keys=True), encoding="utf-8")

"""File-system storage for persisted session records."""
from __future__ import annotations

import logging
import os
import re
import secrets
import tempfile
from pathlib import Path

logger = logging.getLogger(__name__)

_SESSION_ID_PATTERN = re.compile(r"[A-Za-z0-9_-]{1,64}")
_RECORD_SUFFIX = ".session"


class SessionStore:
    """One record file per session id inside a single directory."""

    def __init__(self, base_dir: Path | str) -> None:
        self._base_dir = Path(base_dir)

    @property
    def base_dir(self) -> Path:
        return self._base_dir

    @staticmethod
    def new_session_id() -> str:
        """Return a fresh, unguessable session id."""
        return secrets.token_hex(16)

    def exists(self, session_id: str) -> bool:
        """Return True if a record is stored for the session."""
        return self._record_path(session_id).exists()

    def read(self, session_id: str) -> bytes:
        """Return the stored record; raises FileNotFoundError when absent."""
        return self._record_path(session_id).read_bytes()

    def write(self, session_id: str, data: bytes) -> None:
        """Replace the stored record in one step."""
        path = self._record_path(session_id)
        self._base_dir.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=self._base_dir, prefix=f".{session_id}.", suffix=".tmp")
        try:
            with os.fdopen(fd, "wb") as handle:
                handle.write(data)
            os.replace(temp_name, path)
        except BaseException:
            Path(temp_name).unlink(missing_ok=True)
            raise
        logger.debug("Wrote session record %s (%d bytes)", session_id, len(data))

    def delete(self, session_id: str) -> None:
        """Delete the stored record if it exists."""
        try:
            self._record_path(session_id).unlink()
        except FileNotFoundError:
            return

    def _record_path(self, session_id: str) -> Path:
        if not _SESSION_ID_PATTERN.fullmatch(session_id):
            raise ValueError(f"Invalid session id: {session_id!r}")
        return self._base_dir / f"{session_id}{_RECORD_SUFFIX}"

"""Line-based persistence format for game sessions."""
from __future__ import annotations

from typing import List

from gamebook.domain import StoryGraph
from gamebook.services.errors import SessionRecordError
from gamebook.services.game_session import GameSession

RECORD_MAGIC = "gamebook-session"


class SessionSerializer:
    """Converts a GameSession to/from a flat text record.

    Record layout, one item per line::

        gamebook-session <version>
        <current unit id>
        <history unit ids, oldest first>
    """

    RECORD_VERSION = 1

    def save(self, session: GameSession) -> bytes:
        """Return the persisted record for ``session``."""
        lines: List[str] = [f"{RECORD_MAGIC} {self.RECORD_VERSION}", session.current.id]
        lines.extend(unit.id for unit in session.history)
        return ("\n".join(lines) + "\n").encode("utf-8")

    def load(self, data: bytes, graph: StoryGraph) -> GameSession:
        """Rebuild a session against ``graph``.

        Raises SessionRecordError for a malformed record and
        UnknownUnitIdError when any id is absent from the graph.
        """
        try:
            text = data.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise SessionRecordError("Session record is not valid UTF-8.") from exc

        lines = text.splitlines()
        while lines and not lines[-1].strip():
            lines.pop()
        if not lines:
            raise SessionRecordError("Session record is empty.")

        self._check_header(lines[0])
        if len(lines) < 2:
            raise SessionRecordError("Session record is missing the current unit.")
        ids = [line.strip() for line in lines[1:]]
        if any(not unit_id for unit_id in ids):
            raise SessionRecordError("Session record contains a blank unit id.")
        return GameSession.restore(graph, ids[0], ids[1:])

    def _check_header(self, header: str) -> None:
        parts = header.split()
        if len(parts) != 2 or parts[0] != RECORD_MAGIC:
            raise SessionRecordError("Session record has no gamebook header.")
        if parts[1] != str(self.RECORD_VERSION):
            raise SessionRecordError(
                f"Session record version {parts[1]} is not supported. Please start a new game."
            )

"""In-memory store of editor sessions.

Sessions live for the lifetime of the server process. Nothing is persisted:
a restart forgets every canvas.
"""

import logging

from collageworks.core.canvas import Canvas
from collageworks.core.config import CollageworksConfig
from collageworks.core.session import EditorSession

logger = logging.getLogger(__name__)


class SessionStore:
    """Create, look up and drop :class:`EditorSession` objects by id."""

    def __init__(self, cfg: CollageworksConfig) -> None:
        self.config = cfg
        self._sessions: dict[str, EditorSession] = {}

    def __len__(self) -> int:
        return len(self._sessions)

    def create(self) -> EditorSession:
        canvas = Canvas(
            width=self.config.canvas_width,
            height=self.config.canvas_height,
            layer_max_size=self.config.layer_max_size,
        )
        session = EditorSession(canvas=canvas)
        self._sessions[session.id] = session
        logger.info(f"Created session {session.id} ({canvas.width}x{canvas.height})")
        return session

    def get(self, session_id: str) -> EditorSession | None:
        return self._sessions.get(session_id)

    def delete(self, session_id: str) -> bool:
        return self._sessions.pop(session_id, None) is not None

"""
Registry of connected viewer sessions.
"""

import logging
import threading
from typing import Optional

from serialrelay.core.models import ViewerSession

logger = logging.getLogger(__name__)


class SessionRegistry:
    """Tracks connected viewer sessions by session id."""

    def __init__(self):
        self._sessions: dict[str, ViewerSession] = {}
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: object) -> bool:
        with self._lock:
            return session_id in self._sessions

    def add(self, session: ViewerSession) -> None:
        """Register a session, replacing any entry with the same id."""
        with self._lock:
            self._sessions[session.session_id] = session
        logger.info(f"Viewer {session.session_id} connected from {session.address}")

    def remove(self, session_id: str) -> Optional[ViewerSession]:
        """Deregister a session. Returns the removed session, if any."""
        with self._lock:
            session = self._sessions.pop(session_id, None)
        if session:
            logger.info(f"Viewer {session_id} disconnected")
        return session

    def get(self, session_id: str) -> Optional[ViewerSession]:
        with self._lock:
            return self._sessions.get(session_id)

    def sessions(self) -> list[ViewerSession]:
        """Snapshot of all registered sessions, in join order."""
        with self._lock:
            return list(self._sessions.values())

    def get_sessions_info(self) -> list[dict]:
        return [s.to_dict() for s in self.sessions()]

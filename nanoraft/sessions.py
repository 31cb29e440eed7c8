"""Book-keeping of open sessions, keyed by session uid."""

from __future__ import annotations

import threading
from typing import Any

MAX_SESSIONS = 100


class SessionManager:
    """Tracks connected sessions and turns away those over the limit."""

    def __init__(self, max_sessions: int = MAX_SESSIONS) -> None:
        self.max_sessions = max_sessions
        self._lock = threading.Lock()
        self._sessions: dict[str, Any] = {}

    def on_connected(self, sender: Any) -> bool:
        """Record a new session; close it and return False when full."""
        with self._lock:
            accepted = len(self._sessions) < self.max_sessions
            if accepted:
                self._sessions[sender.uid] = sender
        if not accepted:
            sender.close()
        return accepted

    def on_closed(self, sender: Any) -> None:
        with self._lock:
            self._sessions.pop(sender.uid, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, uid: object) -> bool:
        with self._lock:
            return uid in self._sessions
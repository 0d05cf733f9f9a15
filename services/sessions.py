"""
Session Manager - One responder per conversation
================================================

Keeps a responder for each chat session so rotation cursors never
leak between unrelated conversations.
"""

import secrets
import threading
import time
from collections import OrderedDict
from dataclasses import dataclass, field
from typing import Callable, List, Optional

from core.logging import get_logger
from .responder import Responder

logger = get_logger("services.sessions")


def new_session_id() -> str:
    """Generate a random session id."""
    return secrets.token_hex(16)


@dataclass
class _Session:
    responder: Responder
    last_used: float = field(default_factory=time.time)


class SessionManager:
    """
    Thread-safe registry of per-session responders.

    Sessions are created on first use. When more than ``max_sessions``
    are alive the least recently used one is evicted; sessions idle
    for longer than ``ttl_seconds`` are purged (0 disables expiry).

    Example:
        sessions = SessionManager(responder_factory())
        sessions.get("abc").reply("hello")
    """

    def __init__(
        self,
        factory: Callable[[], Responder],
        max_sessions: int = 1000,
        ttl_seconds: float = 3600,
        clock: Callable[[], float] = time.time
    ):
        """
        Initialize session manager.

        Args:
            factory: Builds a new responder for a new session
            max_sessions: Maximum number of live sessions
            ttl_seconds: Idle time before a session expires
            clock: Time source (seconds)
        """
        self.factory = factory
        self.max_sessions = max_sessions
        self.ttl_seconds = ttl_seconds
        self.clock = clock
        self._sessions: "OrderedDict[str, _Session]" = OrderedDict()
        self._lock = threading.Lock()

    def __len__(self) -> int:
        with self._lock:
            return len(self._sessions)

    def __contains__(self, session_id: str) -> bool:
        with self._lock:
            return session_id in self._sessions

    def get(self, session_id: str) -> Responder:
        """
        Get the responder for a session, creating it if needed.

        Args:
            session_id: Session identifier

        Returns:
            The session's responder
        """
        with self._lock:
            now = self.clock()
            self._purge_expired(now)

            session = self._sessions.get(session_id)
            if session is None:
                session = _Session(responder=self.factory(), last_used=now)
                self._sessions[session_id] = session
                logger.debug(f"Created session {session_id[:8]}")

                while len(self._sessions) > self.max_sessions:
                    evicted, _ = self._sessions.popitem(last=False)
                    logger.info(f"Evicted least recently used session {evicted[:8]}")
            else:
                session.last_used = now
                self._sessions.move_to_end(session_id)

            return session.responder

    def reset(self, session_id: str) -> Optional[Responder]:
        """
        Rewind a session's cursors.

        Returns:
            The session's responder, None if the session does not exist
        """
        with self._lock:
            session = self._sessions.get(session_id)
        if session is None:
            return None
        session.responder.reset()
        return session.responder

    def drop(self, session_id: str) -> bool:
        """
        Forget a session.

        Returns:
            True if the session existed
        """
        with self._lock:
            return self._sessions.pop(session_id, None) is not None

    def session_ids(self) -> List[str]:
        """Session ids, least recently used first."""
        with self._lock:
            return list(self._sessions.keys())

    def clear(self) -> None:
        with self._lock:
            self._sessions.clear()

    def _purge_expired(self, now: float) -> None:
        if not self.ttl_seconds:
            return
        expired = [
            sid for sid, session in self._sessions.items()
            if now - session.last_used > self.ttl_seconds
        ]
        for sid in expired:
            del self._sessions[sid]
        if expired:
            logger.debug(f"Expired {len(expired)} idle session(s)")

"""
Test Session Manager Module
===========================

Unit tests for per-session responder management.
"""

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from services.responder import responder_factory
from services.sessions import SessionManager, new_session_id


class FakeClock:
    def __init__(self):
        self.now = 1000.0

    def __call__(self):
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sessions(clock):
    return SessionManager(responder_factory(), max_sessions=3, ttl_seconds=60, clock=clock)


class TestSessionManager:
    """Tests for SessionManager class."""

    def test_same_id_same_responder(self, sessions):
        """Test the same id returns the same responder."""
        assert sessions.get("a") is sessions.get("a")
        assert len(sessions) == 1

    def test_sessions_have_independent_cursors(self, sessions):
        """Test sessions rotate independently."""
        assert sessions.get("a").reply("asdf") == "Please go on."
        assert sessions.get("a").reply("asdf") == "Tell me more."
        assert sessions.get("b").reply("asdf") == "Please go on."

    def test_least_recently_used_is_evicted(self, sessions):
        """Test the least recently used session is evicted."""
        for sid in ("a", "b", "c"):
            sessions.get(sid)
        sessions.get("a")
        sessions.get("d")

        assert "b" not in sessions
        assert sessions.session_ids() == ["c", "a", "d"]

    def test_idle_sessions_expire(self, sessions, clock):
        """Test idle sessions expire after the TTL."""
        sessions.get("a")
        clock.now += 30
        sessions.get("b")
        clock.now += 45

        sessions.get("b")
        assert "a" not in sessions
        assert "b" in sessions

    def test_zero_ttl_never_expires(self, clock):
        """Test a zero TTL disables expiry."""
        sessions = SessionManager(responder_factory(), ttl_seconds=0, clock=clock)
        sessions.get("a")
        clock.now += 10 ** 6
        sessions.get("b")
        assert "a" in sessions

    def test_reset(self, sessions):
        """Test resetting a session."""
        responder = sessions.get("a")
        responder.reply("hello")
        assert sessions.reset("a") is responder
        assert responder.reply("hello") == "Hello. What is troubling you?"

    def test_reset_unknown_session(self, sessions):
        """Test resetting an unknown session."""
        assert sessions.reset("missing") is None

    def test_drop(self, sessions):
        """Test dropping a session."""
        sessions.get("a")
        assert sessions.drop("a") is True
        assert sessions.drop("a") is False
        assert len(sessions) == 0

    def test_dropped_session_starts_over(self, sessions):
        """Test a dropped session restarts its rotation."""
        sessions.get("a").reply("zzz")
        sessions.drop("a")
        assert sessions.get("a").reply("zzz") == "Please go on."

    def test_clear(self, sessions):
        """Test clearing all sessions."""
        sessions.get("a")
        sessions.get("b")
        sessions.clear()
        assert len(sessions) == 0


class TestNewSessionId:
    """Tests for new_session_id()."""

    def test_format(self):
        """Test session id format."""
        sid = new_session_id()
        assert len(sid) == 32
        int(sid, 16)

    def test_unique(self):
        """Test session ids are unique."""
        assert len({new_session_id() for _ in range(100)}) == 100

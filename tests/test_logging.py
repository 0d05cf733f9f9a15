"""
Test Logging Module
===================

Unit tests for log context handling and formatters.
"""

import json
import logging

import pytest
from pathlib import Path
import sys
sys.path.insert(0, str(Path(__file__).parent.parent))

from core.logging import (
    ContextFilter,
    JSONFormatter,
    get_logger,
    set_log_context,
    clear_log_context,
)


def make_record(msg="Reply sent", **extra_data):
    record = logging.LogRecord("doctor.test", logging.INFO, __file__, 10, msg, None, None)
    if extra_data:
        record.extra_data = extra_data
    return record


@pytest.fixture(autouse=True)
def clean_context():
    clear_log_context()
    yield
    clear_log_context()


class TestGetLogger:
    """Tests for get_logger()."""

    def test_names_are_namespaced(self):
        """Test logger names live under the doctor logger."""
        assert get_logger("rules.engine").logger.name == "doctor.rules.engine"
        assert get_logger("doctor.web").logger.name == "doctor.web"
        assert get_logger("doctor").logger.name == "doctor"

    def test_bound_fields_become_extra_data(self):
        """Test bound fields merge with per-call context."""
        adapter = get_logger("test", component="sessions")
        _, kwargs = adapter.process("msg", {"extra": {"extra_data": {"session_id": "ab"}}})
        assert kwargs["extra"]["extra_data"] == {"component": "sessions", "session_id": "ab"}

    def test_no_bound_fields_leaves_kwargs(self):
        """Test loggers without bound fields pass kwargs through."""
        _, kwargs = get_logger("test").process("msg", {})
        assert kwargs == {}


class TestContextFilter:
    """Tests for ContextFilter."""

    def test_adds_thread_context(self):
        """Test thread context is attached to records."""
        set_log_context(session_id="3f2a")
        record = make_record()
        ContextFilter().filter(record)
        assert record.extra_data == {"session_id": "3f2a"}
        assert record.context == " | session_id=3f2a"

    def test_record_fields_win(self):
        """Test per-record fields override thread context."""
        set_log_context(session_id="old")
        record = make_record(session_id="new")
        ContextFilter().filter(record)
        assert record.extra_data["session_id"] == "new"

    def test_empty_context(self):
        """Test records without context."""
        record = make_record()
        ContextFilter().filter(record)
        assert record.extra_data == {}
        assert record.context == ""

    def test_clear(self):
        """Test clearing the thread context."""
        set_log_context(session_id="3f2a")
        clear_log_context()
        record = make_record()
        ContextFilter().filter(record)
        assert record.extra_data == {}


class TestJSONFormatter:
    """Tests for JSONFormatter."""

    def test_formats_one_json_object(self):
        """Test JSON output carries the context."""
        set_log_context(session_id="3f2a")
        record = make_record("Matched rule 'feel'")
        ContextFilter().filter(record)

        entry = json.loads(JSONFormatter().format(record))
        assert entry["message"] == "Matched rule 'feel'"
        assert entry["level"] == "INFO"
        assert entry["logger"] == "doctor.test"
        assert entry["context"] == {"session_id": "3f2a"}

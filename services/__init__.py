"""
Services Module - Conversation services
=======================================

This module provides:
- The responder facade over the rules engine
- Per-session responder management
- Reply pacing helpers for front ends
"""

from .responder import Responder, ResponderResult, create_responder, responder_factory
from .sessions import SessionManager, new_session_id
from .pacing import HintRotator, type_out, stream_reply

__all__ = [
    "Responder",
    "ResponderResult",
    "create_responder",
    "responder_factory",
    "SessionManager",
    "new_session_id",
    "HintRotator",
    "type_out",
    "stream_reply",
]

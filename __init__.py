"""
Doctor Responder - Rule-based conversational responder
======================================================

A deterministic pattern-matching responder in the classic "doctor"
style. It can be used from:
1. An interactive console chat
2. A Textual terminal UI
3. A FastAPI web chat with per-session state

Author: Doctor Responder Team
License: MIT
Version: 1.0.0
"""

__version__ = "1.0.0"
__author__ = "Doctor Responder Team"
__license__ = "MIT"

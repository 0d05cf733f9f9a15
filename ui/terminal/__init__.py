"""
Terminal UI Module - Textual-based TUI
=====================================

This module provides a terminal chat interface using Textual.
"""

from .app import DoctorChatApp, run_tui

__all__ = [
    "DoctorChatApp",
    "run_tui",
]

"""
Web UI Module - FastAPI-based web interface
===========================================

This module provides a browser chat page and a JSON/streaming
reply API backed by per-session responders.
"""

from .app import create_app, run_app
from .routes import router

__all__ = [
    "create_app",
    "run_app",
    "router",
]

"""
Web Routes - API endpoints and page routes
=========================================

This module defines the chat page and the reply API.
"""

from typing import Optional

from fastapi import APIRouter, Request, HTTPException
from fastapi.responses import HTMLResponse, StreamingResponse
from pydantic import BaseModel, Field

from core.logging import get_logger, set_log_context, clear_log_context
from rules.loader import build_rule_set
from services.pacing import stream_reply
from services.sessions import new_session_id

logger = get_logger("web.routes")

router = APIRouter()


class ReplyRequest(BaseModel):
    """Body of a reply request."""
    message: str = Field("", max_length=2000)
    session_id: Optional[str] = Field(None, max_length=128)


class ReplyResponse(BaseModel):
    """Reply returned to the chat page."""
    reply: str
    source: str
    keyword: str = ""
    session_id: str


def _respond(request: Request, body: ReplyRequest):
    sessions = request.app.state.sessions
    session_id = body.session_id or new_session_id()

    set_log_context(session_id=session_id[:8])
    try:
        result = sessions.get(session_id).respond(body.message)
        logger.info(f"Replied via {result.source}" + (f" '{result.keyword}'" if result.keyword else ""))
    finally:
        clear_log_context()

    return session_id, result


# === Page Routes ===

@router.get("/", response_class=HTMLResponse)
async def chat_page(request: Request):
    """Render the chat page."""
    templates = request.app.state.templates
    config = request.app.state.config

    return templates.TemplateResponse(
        request,
        "chat.html",
        {
            "app_name": config.app_name,
            "ui": config.ui,
        }
    )


# === API Routes ===

@router.get("/health")
async def health(request: Request):
    """Health check endpoint."""
    return {
        "status": "ok",
        "sessions": len(request.app.state.sessions),
        "rules": request.app.state.declarations.source,
    }


@router.get("/api/hints")
async def get_hints(request: Request):
    """Placeholder hints and rotation interval for the input field."""
    ui = request.app.state.config.ui
    return {"hints": ui.hints, "interval": ui.hint_interval}


@router.get("/api/rules")
async def get_rules(request: Request):
    """List rules in matching order."""
    declarations = request.app.state.declarations
    return {
        "rules": build_rule_set(declarations).to_list(),
        "fallbacks": declarations.fallbacks,
    }


@router.post("/api/reply", response_model=ReplyResponse)
def post_reply(request: Request, body: ReplyRequest):
    """Return the doctor's reply in full."""
    session_id, result = _respond(request, body)
    return ReplyResponse(
        reply=result.response,
        source=result.source,
        keyword=result.keyword,
        session_id=session_id,
    )


@router.post("/api/reply/stream")
def post_reply_stream(request: Request, body: ReplyRequest):
    """Stream the doctor's reply one character at a time, after the typing pause."""
    ui = request.app.state.config.ui
    session_id, result = _respond(request, body)

    return StreamingResponse(
        stream_reply(result.response, delay=ui.reply_delay, interval=ui.stream_interval),
        media_type="text/plain; charset=utf-8",
        headers={"X-Session-Id": session_id, "X-Reply-Source": result.source},
    )


@router.delete("/api/sessions/{session_id}")
async def delete_session(request: Request, session_id: str):
    """Forget a conversation."""
    if not request.app.state.sessions.drop(session_id):
        raise HTTPException(status_code=404, detail="Session not found")
    return {"deleted": session_id}

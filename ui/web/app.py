"""
FastAPI Application - Main web application setup
===============================================

This module creates and configures the FastAPI application that
serves the chat page and the reply API.
"""

from pathlib import Path
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.templating import Jinja2Templates
from fastapi.responses import JSONResponse
from fastapi.middleware.cors import CORSMiddleware

from core.config import Config, load_config
from core.exceptions import DoctorError
from core.logging import setup_logging, get_logger
from services.responder import load_declarations, responder_factory
from services.sessions import SessionManager

logger = get_logger("web.app")


def create_app(
    config: Optional[Config] = None,
    sessions: Optional[SessionManager] = None,
    debug: bool = False
) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        config: Application configuration
        sessions: Session manager (built from config when omitted)
        debug: Enable debug mode

    Returns:
        Configured FastAPI application
    """
    if config is None:
        config = load_config()

    debug = debug or config.debug or config.ui.web_debug

    setup_logging(
        log_dir=config.log_dir or None,
        log_level="DEBUG" if debug else "INFO",
        console_output=True
    )

    declarations = load_declarations(config)

    if sessions is None:
        sessions = SessionManager(
            responder_factory(declarations),
            max_sessions=config.responder.max_sessions,
            ttl_seconds=config.responder.session_ttl_seconds,
        )

    app = FastAPI(
        title=config.app_name,
        description="Rule-based conversational responder",
        version=config.version,
        debug=debug,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Session-Id", "X-Reply-Source"],
    )

    templates_dir = Path(__file__).parent / "templates"
    templates = Jinja2Templates(directory=str(templates_dir))

    app.state.config = config
    app.state.declarations = declarations
    app.state.sessions = sessions
    app.state.templates = templates

    from .routes import router as main_router
    app.include_router(main_router, prefix="")

    @app.exception_handler(DoctorError)
    async def doctor_exception_handler(request: Request, exc: DoctorError):
        logger.error(f"Request failed: {exc}")
        return JSONResponse(
            status_code=500,
            content={"error": exc.message, "details": exc.details if debug else {}}
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        logger.error(f"Unhandled exception: {exc}", exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error", "detail": str(exc) if debug else "An error occurred"}
        )

    logger.info(f"Web application created ({declarations.source} rules)")

    return app


def run_app(
    host: str = "127.0.0.1",
    port: int = 8080,
    debug: bool = False,
    config: Optional[Config] = None
) -> None:
    """
    Run the web application server.

    Args:
        host: Host address to bind
        port: Port to listen on
        debug: Enable debug mode
        config: Application configuration
    """
    if config is None:
        config = load_config()

    app = create_app(config=config, debug=debug)

    logger.info(f"Starting web server on {host}:{port}")

    import uvicorn
    uvicorn.run(
        app,
        host=host,
        port=port,
        log_level="debug" if debug else "info"
    )

"""Application factory for the Project Assist discovery backend."""

import logging

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .config import get_settings
from .errors import (
    DiscoveryError,
    InvalidSelection,
    NotFound,
    SessionAlreadyCompleted,
    SessionNotFound,
    UnknownCommand,
    UpstreamAgentFailure,
)
from .log import setup_logging
from .routers import sessions


logger = logging.getLogger(__name__)

UPSTREAM_FAILURE_DETAIL = "Failed to process message, please try again."


def _error_response(status_code: int, detail: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"detail": detail})


async def _handle_discovery_error(request: Request, exc: DiscoveryError) -> JSONResponse:
    """Translate core failures into HTTP responses."""

    if isinstance(exc, (SessionNotFound, NotFound)):
        return _error_response(404, str(exc))
    if isinstance(exc, SessionAlreadyCompleted):
        return _error_response(400, "Session already ended")
    if isinstance(exc, (UnknownCommand, InvalidSelection)):
        return _error_response(400, str(exc))
    if isinstance(exc, UpstreamAgentFailure):
        logger.warning("Agent failure on %s %s: %s", request.method, request.url.path, exc)
        return _error_response(502, UPSTREAM_FAILURE_DETAIL)
    logger.error("Unhandled discovery error on %s: %s", request.url.path, exc)
    return _error_response(500, "Internal discovery error")


def create_app() -> FastAPI:
    """Create and configure a FastAPI application instance."""
    settings = get_settings()
    setup_logging(settings.log_level)

    app = FastAPI(
        title="Project Assist Discovery Backend",
        version="0.1.0",
        description="Guided brainstorming and product discovery sessions backed by role agents.",
    )
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_origin_regex=r"http://localhost:\d+$",
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(DiscoveryError, _handle_discovery_error)
    app.state.settings = settings
    app.include_router(sessions.router)
    logger.info("Discovery backend ready (llm enabled: %s)", settings.llm_enabled)
    return app


app = create_app()

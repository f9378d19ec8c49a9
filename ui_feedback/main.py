"""
UI Feedback HTTP API — FastAPI application.

Receives feedback from the browser widget (webhook) and direct HTTP
clients, and exposes read-only session views. Shares its FeedbackStore
with the MCP tool server when both run in one process.
"""
import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from ui_feedback.config import settings
from ui_feedback.core.errors import UIFeedbackError
from ui_feedback.core.errors.middleware import ui_feedback_error_handler
from ui_feedback.core.errors.registry import error_registry
from ui_feedback.core.log_middleware import CorrelationMiddleware
from ui_feedback.routers import feedback, health, sessions, webhook
from ui_feedback.services.memory_store import get_feedback_store
from ui_feedback.services.store import FeedbackStore

logger = logging.getLogger(__name__)

API_TITLE = "UI Feedback API"

TAGS_METADATA = [
    {"name": "health", "description": "Liveness check. No store access."},
    {"name": "sessions", "description": "Feedback sessions grouped by page URL."},
    {"name": "feedback", "description": "Direct feedback intake."},
    {"name": "webhook", "description": "Sync payloads from the browser widget."},
]


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(
        "Starting %s v%s on %s:%s",
        API_TITLE, settings.app_version, settings.http_host, settings.http_port,
    )
    yield
    logger.info("Shutting down %s", API_TITLE)


def create_app(store: Optional[FeedbackStore] = None) -> FastAPI:
    """Create and configure the FastAPI application.

    ``store`` defaults to the process-wide store also used by the MCP tools.
    """
    if len(error_registry) == 0:
        error_registry.load()

    app = FastAPI(
        title=API_TITLE,
        version=settings.app_version,
        openapi_tags=TAGS_METADATA,
        lifespan=lifespan,
    )
    app.state.store = store if store is not None else get_feedback_store()

    # CORS: localhost-style origin patterns only
    app.add_middleware(
        CORSMiddleware,
        allow_origin_regex=settings.origin_regex(),
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type"],
    )

    # Correlation ID middleware (request_id + correlation_id in every log)
    app.add_middleware(CorrelationMiddleware)

    app.add_exception_handler(UIFeedbackError, ui_feedback_error_handler)

    @app.exception_handler(RequestValidationError)
    async def _request_validation_handler(request: Request, exc: RequestValidationError):
        return JSONResponse(
            status_code=400,
            content={"error": "Validation failed", "details": jsonable_encoder(exc.errors())},
        )

    # Catch-all handler so unhandled exceptions return JSON (not bare text)
    @app.exception_handler(Exception)
    async def _unhandled_exception_handler(request: Request, exc: Exception):
        logger.error("Unhandled exception on %s %s: %s", request.method, request.url.path, exc, exc_info=True)
        return JSONResponse(
            status_code=500,
            content={"error": "Internal server error"},
        )

    app.include_router(health.router, prefix="/api", tags=["health"])
    app.include_router(sessions.router, prefix="/api", tags=["sessions"])
    app.include_router(feedback.router, prefix="/api", tags=["feedback"])
    app.include_router(webhook.router, prefix="/api", tags=["webhook"])

    return app

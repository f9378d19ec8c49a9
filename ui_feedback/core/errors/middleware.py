"""
FastAPI exception handler for UIFeedbackError.

Looks the error code up in the registry and returns a structured JSON
error response. Unknown codes are answered with the registered
UFB-SYS-001 entry (500).
"""

import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from ui_feedback.core.errors import UIFeedbackError
from ui_feedback.core.errors.registry import error_registry

logger = logging.getLogger(__name__)

FALLBACK_CODE = "UFB-SYS-001"


async def ui_feedback_error_handler(request: Request, exc: UIFeedbackError) -> JSONResponse:
    """Convert UIFeedbackError into a structured JSON response."""
    entry = error_registry.get(exc.code)

    if entry is None:
        logger.error(
            "unregistered_error_code",
            extra={"error.code": exc.code, "error.message": exc.detail},
        )
        entry = error_registry.get(FALLBACK_CODE)
        if entry is None:
            raise RuntimeError(f"Error registry has no {FALLBACK_CODE} entry; was it loaded?")

    log_extra = {
        "error.code": exc.code,
        "error.message": exc.detail,
        "http.path": request.url.path,
        **{f"error.ctx.{k}": v for k, v in exc.context.items()},
    }
    _severity_to_log_fn(entry.severity)(entry.title, extra=log_extra)

    return JSONResponse(
        status_code=entry.http_status,
        content={
            "error": {
                "code": entry.code,
                "title": entry.title,
                "message": entry.safe_message,
                "remediation": entry.remediation,
            }
        },
    )


def _severity_to_log_fn(severity: str):
    """Map registry severity to logger method."""
    return {
        "DEBUG": logger.debug,
        "INFO": logger.info,
        "WARN": logger.warning,
        "ERROR": logger.error,
        "CRITICAL": logger.critical,
    }.get(severity, logger.error)

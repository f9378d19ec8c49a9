"""
Health check endpoint.

- GET /api/health — cheap: process alive, version, uptime
"""
from datetime import datetime, timezone

from fastapi import APIRouter

from ui_feedback.config import settings
from ui_feedback.core.structured_logging import SERVICE_NAME, get_uptime_s

router = APIRouter()


@router.get("/health")
async def health_check():
    """Cheap health check — no store access."""
    return {
        "status": "ok",
        "service": SERVICE_NAME,
        "version": settings.app_version,
        "uptime_s": round(get_uptime_s(), 1),
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }

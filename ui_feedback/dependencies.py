"""FastAPI dependency injection for the feedback HTTP API."""
from __future__ import annotations

from fastapi import Request

from .services.store import FeedbackStore


def get_store(request: Request) -> FeedbackStore:
    """
    Get the FeedbackStore attached to the running app.

    FastAPI dependency. ``create_app`` sets ``app.state.store``.
    """
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise RuntimeError("Feedback store not initialized. Check create_app().")
    return store

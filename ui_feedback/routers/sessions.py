"""
Sessions Router
===============

Read-only views over feedback sessions.
"""

from fastapi import APIRouter, Depends

from ui_feedback.core.errors import UIFeedbackError
from ui_feedback.dependencies import get_store
from ui_feedback.services.store import FeedbackStore

router = APIRouter()


@router.get("/sessions")
def list_sessions(store: FeedbackStore = Depends(get_store)) -> list:
    """List all sessions in creation order."""
    return [s.to_wire() for s in store.list_sessions()]


@router.get("/sessions/{session_id}")
def get_session(session_id: str, store: FeedbackStore = Depends(get_store)) -> dict:
    """Session detail with every feedback item recorded for it."""
    session = store.get_session(session_id)
    if session is None:
        raise UIFeedbackError("UFB-API-003", detail=f"session {session_id}", context={"session_id": session_id})
    return session.to_wire()

"""
In-Memory Feedback Store
========================

Authoritative feedback table plus the external correlation index, backed
by plain dicts. Data is lost on process restart.

The HTTP adapter runs sync work in a thread pool while the MCP stdio loop
runs on the event loop, so every operation takes the store lock. Records
handed out are copies; mutating them never touches store state.
"""

import logging
import threading
import uuid
from typing import Dict, List, Optional

from ui_feedback.models.feedback import (
    ACTIVE_STATUSES,
    CreateFeedbackInput,
    Feedback,
    FeedbackStatus,
    Session,
    SessionWithFeedbacks,
    UpdateFeedbackInput,
    utc_now_iso,
)
from ui_feedback.services.lifecycle import (
    TransitionAction,
    TransitionResult,
    apply_transition,
)
from ui_feedback.services.session_registry import SessionRegistry
from ui_feedback.services.store import FeedbackStore

logger = logging.getLogger(__name__)

DELETED_RESOLUTION = "Deleted via widget"


class MemoryStore(FeedbackStore):

    def __init__(self) -> None:
        self._lock = threading.RLock()
        self._sessions = SessionRegistry()
        self._feedbacks: Dict[str, Feedback] = {}
        self._external_ids: Dict[str, str] = {}  # external ID -> feedback ID

    # =========================================================================
    # Sessions
    # =========================================================================

    def list_sessions(self) -> List[Session]:
        with self._lock:
            return self._sessions.list()

    def get_session(self, session_id: str) -> Optional[SessionWithFeedbacks]:
        with self._lock:
            session = self._sessions.get(session_id)
            if session is None:
                return None
            feedbacks = [
                f.model_copy(deep=True)
                for f in self._feedbacks.values()
                if f.session_id == session_id
            ]
            return SessionWithFeedbacks(**session.model_dump(), feedbacks=feedbacks)

    # =========================================================================
    # Feedback CRUD
    # =========================================================================

    def create_feedback(self, data: CreateFeedbackInput) -> Feedback:
        with self._lock:
            session_id = self._resolve_session(data)
            feedback = Feedback(
                id=str(uuid.uuid4()),
                session_id=session_id,
                comment=data.comment,
                element=data.element,
                element_path=data.element_path,
                screenshot_url=data.screenshot_url,
                page_url=data.page_url,
                intent=data.intent,
                severity=data.severity,
                status=FeedbackStatus.PENDING,
                external_id=data.external_id,
                metadata=data.metadata,
                created_at=utc_now_iso(),
            )
            self._feedbacks[feedback.id] = feedback
            if data.external_id:
                self._external_ids[data.external_id] = feedback.id

        logger.info(
            "feedback_created",
            extra={
                "feedback_id": feedback.id,
                "session_id": session_id,
                "external_id": data.external_id,
            },
        )
        return feedback.model_copy(deep=True)

    def get_feedback(self, feedback_id: str) -> Optional[Feedback]:
        with self._lock:
            feedback = self._feedbacks.get(feedback_id)
            return feedback.model_copy(deep=True) if feedback else None

    def update_feedback(self, feedback_id: str, fields: UpdateFeedbackInput) -> Optional[Feedback]:
        with self._lock:
            feedback = self._feedbacks.get(feedback_id)
            if feedback is None:
                return None
            if fields.comment is not None:
                feedback = feedback.model_copy(update={"comment": fields.comment})
                self._feedbacks[feedback_id] = feedback

        logger.info("feedback_updated", extra={"feedback_id": feedback_id})
        return feedback.model_copy(deep=True)

    def delete_feedback(self, feedback_id: str) -> Optional[Feedback]:
        return self.transition(feedback_id, TransitionAction.DISMISS, DELETED_RESOLUTION).feedback

    def get_pending_feedback(self, session_id: Optional[str] = None) -> List[Feedback]:
        with self._lock:
            return [
                f.model_copy(deep=True)
                for f in self._feedbacks.values()
                if f.status in ACTIVE_STATUSES
                and (not session_id or f.session_id == session_id)
            ]

    def find_by_external_id(self, external_id: str) -> Optional[str]:
        with self._lock:
            return self._external_ids.get(external_id)

    # =========================================================================
    # Lifecycle
    # =========================================================================

    def transition(
        self,
        feedback_id: str,
        action: TransitionAction,
        note: Optional[str] = None,
    ) -> TransitionResult:
        with self._lock:
            result = apply_transition(self._feedbacks.get(feedback_id), action, note)
            if result.ok:
                self._feedbacks[feedback_id] = result.feedback

        logger.info(
            "feedback_transitioned",
            extra={
                "feedback_id": feedback_id,
                "action": action.value,
                "outcome": result.outcome.value,
                "from_status": result.previous_status.value if result.previous_status else None,
            },
        )
        if result.ok:
            # Keep the stored record private to the store
            return TransitionResult(
                result.outcome,
                feedback=result.feedback.model_copy(deep=True),
                previous_status=result.previous_status,
            )
        return result

    # =========================================================================
    # Helpers
    # =========================================================================

    def _resolve_session(self, data: CreateFeedbackInput) -> str:
        if data.session_id:
            if data.session_id in self._sessions:
                return data.session_id
            logger.warning(
                "unknown_session_id",
                extra={"session_id": data.session_id, "page_url": data.page_url},
            )
        return self._sessions.find_or_create(data.page_url)


# Module-level singleton shared by the HTTP and MCP boundaries
_store: Optional[MemoryStore] = None
_store_lock = threading.Lock()


def get_feedback_store() -> MemoryStore:
    global _store
    with _store_lock:
        if _store is None:
            _store = MemoryStore()
        return _store


def reset_feedback_store() -> None:
    """Drop the process-wide store (tests)."""
    global _store
    with _store_lock:
        _store = None

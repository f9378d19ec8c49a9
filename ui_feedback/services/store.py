"""
Feedback Store Interface
========================

Abstract capability every backing store implements. The in-memory
``MemoryStore`` is the only implementation today; a durable store would
plug in behind the same contract.

Expected absence ("unknown ID", "illegal transition") is never raised:
lookups return None and lifecycle operations return a TransitionResult.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ui_feedback.models.feedback import (
    CreateFeedbackInput,
    Feedback,
    Session,
    SessionWithFeedbacks,
    UpdateFeedbackInput,
)
from ui_feedback.services.lifecycle import TransitionAction, TransitionResult


class FeedbackStore(ABC):

    # Sessions
    @abstractmethod
    def list_sessions(self) -> List[Session]:
        """All sessions in insertion order."""

    @abstractmethod
    def get_session(self, session_id: str) -> Optional[SessionWithFeedbacks]:
        """Session plus its current feedback set, or None."""

    # Feedback CRUD
    @abstractmethod
    def create_feedback(self, data: CreateFeedbackInput) -> Feedback:
        """Create a pending feedback item. Input is assumed valid."""

    @abstractmethod
    def get_feedback(self, feedback_id: str) -> Optional[Feedback]:
        ...

    @abstractmethod
    def update_feedback(self, feedback_id: str, fields: UpdateFeedbackInput) -> Optional[Feedback]:
        ...

    @abstractmethod
    def delete_feedback(self, feedback_id: str) -> Optional[Feedback]:
        """Soft delete: dismiss with a fixed note. None if unknown or already terminal."""

    @abstractmethod
    def get_pending_feedback(self, session_id: Optional[str] = None) -> List[Feedback]:
        """Pending and acknowledged items, optionally for one session."""

    @abstractmethod
    def find_by_external_id(self, external_id: str) -> Optional[str]:
        """Internal feedback ID registered for a widget-minted ID."""

    # Lifecycle
    @abstractmethod
    def transition(
        self,
        feedback_id: str,
        action: TransitionAction,
        note: Optional[str] = None,
    ) -> TransitionResult:
        ...

    def acknowledge_feedback(self, feedback_id: str) -> Optional[Feedback]:
        return self.transition(feedback_id, TransitionAction.ACKNOWLEDGE).feedback

    def resolve_feedback(self, feedback_id: str, resolution: str) -> Optional[Feedback]:
        return self.transition(feedback_id, TransitionAction.RESOLVE, resolution).feedback

    def dismiss_feedback(self, feedback_id: str, reason: str) -> Optional[Feedback]:
        return self.transition(feedback_id, TransitionAction.DISMISS, reason).feedback

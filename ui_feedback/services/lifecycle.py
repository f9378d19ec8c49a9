"""
Lifecycle State Machine
=======================

Legal status transitions for a feedback item:

    pending ──► acknowledged ──► resolved | dismissed
       └──────────────────────► resolved | dismissed

Acknowledgement is optional. ``resolved`` and ``dismissed`` are terminal.
This module is the only place transition legality is decided; stores call
``apply_transition`` and persist whatever record it hands back.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, FrozenSet, Optional, Tuple

from ui_feedback.models.feedback import (
    ACTIVE_STATUSES,
    Feedback,
    FeedbackStatus,
    TERMINAL_STATUSES,
    utc_now_iso,
)


class TransitionAction(str, Enum):
    ACKNOWLEDGE = "acknowledge"
    RESOLVE = "resolve"
    DISMISS = "dismiss"


class TransitionOutcome(str, Enum):
    OK = "ok"
    NOT_FOUND = "not_found"
    INVALID_STATE = "invalid_state"


# action -> (statuses it may start from, status it lands in)
ALLOWED_TRANSITIONS: Dict[TransitionAction, Tuple[FrozenSet[FeedbackStatus], FeedbackStatus]] = {
    TransitionAction.ACKNOWLEDGE: (frozenset({FeedbackStatus.PENDING}), FeedbackStatus.ACKNOWLEDGED),
    TransitionAction.RESOLVE: (ACTIVE_STATUSES, FeedbackStatus.RESOLVED),
    TransitionAction.DISMISS: (ACTIVE_STATUSES, FeedbackStatus.DISMISSED),
}


@dataclass(frozen=True)
class TransitionResult:
    """Tagged outcome of a lifecycle operation.

    ``feedback`` is the updated record when ``outcome`` is OK and None
    otherwise. ``previous_status`` is set whenever the record exists.
    """

    outcome: TransitionOutcome
    feedback: Optional[Feedback] = None
    previous_status: Optional[FeedbackStatus] = None

    @property
    def ok(self) -> bool:
        return self.outcome is TransitionOutcome.OK


def can_transition(status: FeedbackStatus, action: TransitionAction) -> bool:
    sources, _ = ALLOWED_TRANSITIONS[action]
    return status in sources


def apply_transition(
    feedback: Optional[Feedback],
    action: TransitionAction,
    note: Optional[str] = None,
) -> TransitionResult:
    """Compute the result of ``action`` on ``feedback`` without mutating it.

    Moving into a terminal status stamps ``resolved_at`` and stores ``note``
    as the resolution; acknowledgement touches neither.
    """
    if feedback is None:
        return TransitionResult(TransitionOutcome.NOT_FOUND)

    if not can_transition(feedback.status, action):
        return TransitionResult(TransitionOutcome.INVALID_STATE, previous_status=feedback.status)

    _, target = ALLOWED_TRANSITIONS[action]
    update: dict = {"status": target}
    if target in TERMINAL_STATUSES:
        update["resolution"] = note if note is not None else ""
        update["resolved_at"] = utc_now_iso()

    return TransitionResult(
        TransitionOutcome.OK,
        feedback=feedback.model_copy(update=update, deep=True),
        previous_status=feedback.status,
    )

"""
MCP Server — tool-call boundary for coding agents.

Invocation:
    ui-feedback-mcp server --mcp-only

Uses FastMCP from the `mcp` SDK. 5 tools delegate to the shared
FeedbackStore. stdout carries JSON-RPC; all logs go to stderr.
"""

import json
import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from ui_feedback.config import settings
from ui_feedback.services.lifecycle import TransitionAction, TransitionOutcome
from ui_feedback.services.memory_store import get_feedback_store
from ui_feedback.services.store import FeedbackStore

logger = logging.getLogger(__name__)

mcp_server = FastMCP(
    name=settings.app_name,
    instructions=(
        "UI feedback collected from a browser widget. List sessions, fetch "
        "pending feedback, then acknowledge, resolve, or dismiss each item."
    ),
)


class ToolCallError(Exception):
    """Expected tool failure, reported to the agent as an isError result."""

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(message)


def _format_error(code: str, message: str, details: Optional[Dict[str, Any]] = None) -> str:
    """Format a structured error as JSON string for MCP isError responses."""
    return json.dumps({
        "error": {
            "code": code,
            "message": message,
            "details": details or {},
        },
    })


def _to_json(data: Any) -> str:
    return json.dumps(data, indent=2)


def _get_store() -> FeedbackStore:
    return get_feedback_store()


def _transition(feedback_id: str, action: TransitionAction, note: Optional[str] = None) -> str:
    result = _get_store().transition(feedback_id, action, note)
    if result.outcome is TransitionOutcome.NOT_FOUND:
        raise ToolCallError(
            "feedback_not_found",
            f"Feedback not found: {feedback_id}",
            {"feedback_id": feedback_id},
        )
    if result.outcome is TransitionOutcome.INVALID_STATE:
        status = result.previous_status.value
        raise ToolCallError(
            "invalid_state",
            f"Cannot {action.value} feedback {feedback_id}: status is {status}",
            {"feedback_id": feedback_id, "status": status, "action": action.value},
        )
    return _to_json(result.feedback.to_wire())


def _internal_error(tool_name: str) -> ValueError:
    logger.exception("Unexpected error in %s", tool_name)
    return ValueError(_format_error("internal_error", "An internal error occurred. Check server logs for details."))


@mcp_server.tool()
async def list_sessions() -> str:
    """List all active UI feedback sessions. Each session represents a page with annotations."""
    try:
        sessions = _get_store().list_sessions()
        return _to_json([s.to_wire() for s in sessions])
    except Exception:
        raise _internal_error("list_sessions")


@mcp_server.tool()
async def get_pending_feedback(session_id: str = "") -> str:
    """Get all unresolved (pending or acknowledged) feedback. Optionally filter by session ID; omit it for all pending feedback."""
    try:
        feedbacks = _get_store().get_pending_feedback(session_id or None)
        return _to_json([f.to_wire() for f in feedbacks])
    except Exception:
        raise _internal_error("get_pending_feedback")


@mcp_server.tool()
async def acknowledge_feedback(feedback_id: str) -> str:
    """Mark a pending feedback item as seen/acknowledged by the agent."""
    try:
        return _transition(feedback_id, TransitionAction.ACKNOWLEDGE)
    except ToolCallError as e:
        raise ValueError(_format_error(e.code, e.message, e.details))
    except Exception:
        raise _internal_error("acknowledge_feedback")


@mcp_server.tool()
async def resolve_feedback(feedback_id: str, resolution: str) -> str:
    """Mark feedback as resolved with a summary of what was done to address it."""
    try:
        return _transition(feedback_id, TransitionAction.RESOLVE, resolution)
    except ToolCallError as e:
        raise ValueError(_format_error(e.code, e.message, e.details))
    except Exception:
        raise _internal_error("resolve_feedback")


@mcp_server.tool()
async def dismiss_feedback(feedback_id: str, reason: str) -> str:
    """Dismiss/reject feedback with a reason."""
    try:
        return _transition(feedback_id, TransitionAction.DISMISS, reason)
    except ToolCallError as e:
        raise ValueError(_format_error(e.code, e.message, e.details))
    except Exception:
        raise _internal_error("dismiss_feedback")

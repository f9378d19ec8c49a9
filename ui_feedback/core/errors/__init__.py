"""
Error code system.

UIFeedbackError is the base exception for structured adapter-level errors.
Raise it with an error code from the registry, and the error handler
will produce a structured JSON response.

Usage:
    from ui_feedback.core.errors import UIFeedbackError
    raise UIFeedbackError("UFB-API-003", detail="session abc not found")
"""

from __future__ import annotations

import re

CODE_PATTERN = re.compile(r"^UFB-[A-Z]{2,6}-\d{3}$")


class UIFeedbackError(Exception):
    """Structured application error tied to the error registry.

    Args:
        code: Registry error code, e.g. "UFB-API-001".
        detail: Internal-only detail message (never exposed to callers).
        context: Arbitrary key-value context for structured logging.
    """

    def __init__(
        self,
        code: str,
        detail: str | None = None,
        context: dict | None = None,
    ) -> None:
        if not CODE_PATTERN.match(code):
            raise ValueError(f"Invalid error code format: {code!r}")
        self.code = code
        self.detail = detail
        self.context = context or {}
        super().__init__(f"{code}: {detail}" if detail else code)

"""
Request body helpers for routes that validate payloads themselves.

FastAPI's automatic body validation answers 422; the feedback API answers
400 with a pydantic issue list, and caps body size before parsing.
"""

import json
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ui_feedback.config import settings
from ui_feedback.core.errors import UIFeedbackError


async def read_json_body(request: Request, max_size: int | None = None) -> Any:
    """Read and parse a JSON body, enforcing the configured size cap.

    The body is streamed; reading stops at the first chunk that takes the
    total past the cap, so undeclared (chunked) uploads are bounded too.
    """
    limit = max_size if max_size is not None else settings.max_body_size

    declared = request.headers.get("content-length")
    if declared and declared.isdigit() and int(declared) > limit:
        raise UIFeedbackError("UFB-API-002", detail=f"content-length {declared} > {limit}")

    chunks = []
    received = 0
    async for chunk in request.stream():
        received += len(chunk)
        if received > limit:
            raise UIFeedbackError("UFB-API-002", detail=f"body exceeded {limit} bytes while streaming")
        chunks.append(chunk)
    raw = b"".join(chunks)

    try:
        return json.loads(raw)
    except (json.JSONDecodeError, UnicodeDecodeError) as e:
        raise UIFeedbackError("UFB-API-001", detail=str(e))


def validation_error_response(exc: ValidationError) -> JSONResponse:
    return JSONResponse(
        status_code=400,
        content={
            "error": "Validation failed",
            "details": json.loads(exc.json(include_url=False)),
        },
    )

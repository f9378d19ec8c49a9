"""
Feedback Router
===============

Direct feedback intake from HTTP clients (validated against the creation
schema; webhook intake lives in routers/webhook.py).
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ui_feedback.core.request_body import read_json_body, validation_error_response
from ui_feedback.dependencies import get_store
from ui_feedback.models.feedback import CreateFeedbackInput, CreateFeedbackRequest
from ui_feedback.services.store import FeedbackStore

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/feedback", status_code=201)
async def create_feedback(request: Request, store: FeedbackStore = Depends(get_store)):
    """Create one pending feedback item; its session is found or created from pageUrl."""
    body = await read_json_body(request)
    try:
        req = CreateFeedbackRequest.model_validate(body)
    except ValidationError as e:
        logger.info("feedback_validation_failed", extra={"issue_count": e.error_count()})
        return validation_error_response(e)

    feedback = store.create_feedback(CreateFeedbackInput.model_validate(req.model_dump()))
    return JSONResponse(status_code=201, content=feedback.to_wire())

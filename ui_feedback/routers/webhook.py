"""
Webhook Router
==============

POST /api/webhook — sync payloads from the browser widget.
"""

import logging

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse
from pydantic import ValidationError

from ui_feedback.core.request_body import read_json_body, validation_error_response
from ui_feedback.dependencies import get_store
from ui_feedback.models.sync_payload import SyncPayload
from ui_feedback.services.store import FeedbackStore
from ui_feedback.services.webhook_handler import WebhookDispatcher

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post("/webhook", summary="Widget Sync Webhook")
async def receive_webhook(request: Request, store: FeedbackStore = Depends(get_store)):
    body = await read_json_body(request)
    try:
        payload = SyncPayload.model_validate(body)
    except ValidationError as e:
        logger.info("webhook_validation_failed", extra={"issue_count": e.error_count()})
        return validation_error_response(e)

    result = WebhookDispatcher(store).dispatch(payload)
    return JSONResponse(status_code=200 if result.ok else 400, content=result.to_wire())

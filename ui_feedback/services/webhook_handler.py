"""
Webhook Transform / Dispatcher
==============================

Converts widget sync payloads into store operations.

The widget never learns server-assigned feedback IDs, so update and delete
events address records by the widget's own ID through the store's
external correlation index.
"""

import logging
from typing import Callable, Dict, Optional

from ui_feedback.config import settings
from ui_feedback.models.feedback import (
    CreateFeedbackInput,
    FeedbackIntent,
    FeedbackMetadata,
    FeedbackSeverity,
    PageCoords,
    RelatedElement,
    UpdateFeedbackInput,
    Viewport,
)
from ui_feedback.models.sync_payload import (
    SyncEvent,
    SyncFeedbackData,
    SyncPayload,
    WebhookResult,
)
from ui_feedback.services.store import FeedbackStore

logger = logging.getLogger(__name__)


def transform_feedback(
    fb: SyncFeedbackData,
    page_url: str,
    viewport: Optional[Viewport] = None,
) -> CreateFeedbackInput:
    """Map one widget feedback record onto the store's creation input.

    The widget has no notion of intent or severity, so they are fixed to
    fix/suggestion. Everything else it sends is kept in the metadata bundle.
    """
    element = fb.element
    metadata = FeedbackMetadata(
        bounding_box=element.bounding_box if element else None,
        accessibility=element.accessibility if element else None,
        element_description=element.element_description if element else None,
        full_path=element.full_path if element else None,
        step_number=fb.step_number,
        page_coords=PageCoords(x=fb.page_x, y=fb.page_y),
        area_data=fb.area_data,
        is_area_only=fb.is_area_only,
        elements=[
            RelatedElement(
                selector=el.selector,
                tag_name=el.tag_name,
                element_path=el.element_path,
                element_description=el.element_description,
                bounding_box=el.bounding_box,
            )
            for el in fb.elements
        ] if fb.elements is not None else None,
        viewport=viewport,
    )
    return CreateFeedbackInput(
        comment=fb.content,
        page_url=page_url,
        element=fb.selector,
        element_path=element.element_path if element else None,
        external_id=fb.id,
        intent=FeedbackIntent.FIX,
        severity=FeedbackSeverity.SUGGESTION,
        metadata=metadata,
    )


class WebhookDispatcher:
    """Routes a validated SyncPayload to the store by event kind."""

    def __init__(self, store: FeedbackStore, max_batch_size: Optional[int] = None):
        self.store = store
        self.max_batch_size = max_batch_size if max_batch_size is not None else settings.max_batch_size
        self._handlers: Dict[SyncEvent, Callable[[SyncPayload], WebhookResult]] = {
            SyncEvent.CREATED: self._handle_created,
            SyncEvent.UPDATED: self._handle_updated,
            SyncEvent.DELETED: self._handle_deleted,
            SyncEvent.BATCH: self._handle_batch,
        }

    @property
    def handled_events(self) -> frozenset:
        return frozenset(self._handlers)

    def dispatch(self, payload: SyncPayload) -> WebhookResult:
        # KeyError here means a SyncEvent member was added without a handler
        handler = self._handlers[payload.event]
        result = handler(payload)
        logger.info(
            "webhook_dispatched",
            extra={"event": payload.event.value, "result": result.to_wire()},
        )
        return result

    # ------------------------------------------------------------------
    # Handlers
    # ------------------------------------------------------------------

    def _create(self, fb: SyncFeedbackData, payload: SyncPayload) -> None:
        self.store.create_feedback(
            transform_feedback(fb, payload.page.url, payload.page.viewport)
        )

    def _handle_created(self, payload: SyncPayload) -> WebhookResult:
        if payload.feedback is None:
            return WebhookResult(ok=True, created=0)
        self._create(payload.feedback, payload)
        return WebhookResult(ok=True, created=1)

    def _handle_updated(self, payload: SyncPayload) -> WebhookResult:
        if not payload.feedback_id or not payload.updated_content:
            return WebhookResult(ok=True, updated=False)
        feedback_id = self.store.find_by_external_id(payload.feedback_id)
        if feedback_id is None:
            # Created before this process started, or never synced
            return WebhookResult(ok=True, updated=False)
        self.store.update_feedback(feedback_id, UpdateFeedbackInput(comment=payload.updated_content))
        return WebhookResult(ok=True, updated=True)

    def _handle_deleted(self, payload: SyncPayload) -> WebhookResult:
        if not payload.feedback_id:
            return WebhookResult(ok=True, deleted=False)
        feedback_id = self.store.find_by_external_id(payload.feedback_id)
        if feedback_id is None:
            return WebhookResult(ok=True, deleted=False)
        self.store.delete_feedback(feedback_id)
        return WebhookResult(ok=True, deleted=True)

    def _handle_batch(self, payload: SyncPayload) -> WebhookResult:
        items = payload.feedbacks or []
        if len(items) > self.max_batch_size:
            logger.warning(
                "webhook_batch_rejected",
                extra={"batch_size": len(items), "max_batch_size": self.max_batch_size},
            )
            return WebhookResult(
                ok=False,
                error=f"Batch size {len(items)} exceeds limit of {self.max_batch_size}",
            )
        for fb in items:
            self._create(fb, payload)
        return WebhookResult(ok=True, created=len(items))


def handle_webhook(
    store: FeedbackStore,
    payload: SyncPayload,
    max_batch_size: Optional[int] = None,
) -> WebhookResult:
    """Dispatch one payload against ``store``."""
    return WebhookDispatcher(store, max_batch_size=max_batch_size).dispatch(payload)

"""
Sync Payload Models — webhook wire messages sent by the browser widget.

One payload describes one feedback lifecycle event. The widget mints its
own feedback IDs; those become external correlation IDs in the store.
"""

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, Field, field_validator

from ui_feedback.models.feedback import (
    Accessibility,
    AreaData,
    BoundingBox,
    CamelModel,
    Number,
    Viewport,
    validate_comment_length,
    validate_http_url,
)


class SyncEvent(str, Enum):
    CREATED = "feedback.created"
    UPDATED = "feedback.updated"
    DELETED = "feedback.deleted"
    BATCH = "feedback.batch"


class SyncElementData(CamelModel):
    selector: str
    tag_name: str
    class_name: str
    element_id: str
    element_path: Optional[str] = None
    full_path: Optional[str] = None
    element_description: Optional[str] = None
    bounding_box: Optional[BoundingBox] = None
    accessibility: Optional[Accessibility] = None


class SyncFeedbackData(CamelModel):
    id: str
    step_number: Number
    content: str = Field(..., min_length=1)
    selector: str
    page_x: Number
    page_y: Number
    created_at: Number
    element: Optional[SyncElementData] = None
    area_data: Optional[AreaData] = None
    is_area_only: Optional[bool] = None
    elements: Optional[List[SyncElementData]] = None

    @field_validator("content")
    @classmethod
    def _content_length(cls, v: str) -> str:
        return validate_comment_length(v)


class SyncPage(CamelModel):
    url: str
    pathname: str
    viewport: Viewport

    @field_validator("url")
    @classmethod
    def _url(cls, v: str) -> str:
        return validate_http_url(v)


class SyncPayload(CamelModel):
    event: SyncEvent
    timestamp: Number
    page: SyncPage
    feedback: Optional[SyncFeedbackData] = None
    feedbacks: Optional[List[SyncFeedbackData]] = None
    feedback_id: Optional[str] = None
    updated_content: Optional[str] = None

    @field_validator("updated_content")
    @classmethod
    def _updated_content_length(cls, v: Optional[str]) -> Optional[str]:
        return validate_comment_length(v) if v is not None else v


class WebhookResult(BaseModel):
    """Outcome of one dispatched sync payload."""

    ok: bool
    created: Optional[int] = None
    updated: Optional[bool] = None
    deleted: Optional[bool] = None
    error: Optional[str] = None

    def to_wire(self) -> dict:
        return self.model_dump(exclude_none=True)

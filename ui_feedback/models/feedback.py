"""
Feedback Models
===============

Pydantic models for feedback items, sessions, and the creation/update
inputs accepted by the store. All models serialize with camelCase keys
(the widget and agent wire format) and accept snake_case on input too.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional, Union

from pydantic import (
    AnyHttpUrl,
    BaseModel,
    ConfigDict,
    Field,
    TypeAdapter,
    ValidationError,
    field_validator,
    model_validator,
)
from pydantic.alias_generators import to_camel

from ui_feedback.config import settings

Number = Union[int, float]

_http_url = TypeAdapter(AnyHttpUrl)


def utc_now_iso() -> str:
    """Current UTC time as ISO-8601 with millisecond precision and a Z suffix."""
    return datetime.now(timezone.utc).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def validate_http_url(value: str) -> str:
    """Reject anything that is not an absolute http(s) URL; keep the original string."""
    try:
        _http_url.validate_python(value)
    except ValidationError:
        raise ValueError("must be a valid http(s) URL") from None
    return value


def validate_comment_length(value: str) -> str:
    limit = settings.max_comment_length
    if len(value) > limit:
        raise ValueError(f"must be at most {limit} characters")
    return value


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    def to_wire(self) -> dict:
        """JSON-ready dict with camelCase keys and unset optionals omitted."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------

class FeedbackIntent(str, Enum):
    FIX = "fix"
    CHANGE = "change"
    QUESTION = "question"
    APPROVE = "approve"


class FeedbackSeverity(str, Enum):
    BLOCKING = "blocking"
    IMPORTANT = "important"
    SUGGESTION = "suggestion"


class FeedbackStatus(str, Enum):
    PENDING = "pending"
    ACKNOWLEDGED = "acknowledged"
    RESOLVED = "resolved"
    DISMISSED = "dismissed"


ACTIVE_STATUSES = frozenset({FeedbackStatus.PENDING, FeedbackStatus.ACKNOWLEDGED})
TERMINAL_STATUSES = frozenset({FeedbackStatus.RESOLVED, FeedbackStatus.DISMISSED})


# ---------------------------------------------------------------------------
# Metadata bundle (populated from widget payloads)
# ---------------------------------------------------------------------------

class BoundingBox(CamelModel):
    x: Number
    y: Number
    width: Number
    height: Number


class Accessibility(CamelModel):
    role: Optional[str] = None
    label: Optional[str] = None


class Viewport(CamelModel):
    width: Number
    height: Number


class PageCoords(CamelModel):
    x: Number
    y: Number


class AreaData(CamelModel):
    center_x: Number
    center_y: Number
    width: Number
    height: Number
    element_count: Number


class RelatedElement(CamelModel):
    """Summary of one element inside an area selection."""

    selector: str
    tag_name: str
    element_path: Optional[str] = None
    element_description: Optional[str] = None
    bounding_box: Optional[BoundingBox] = None


class FeedbackMetadata(CamelModel):
    bounding_box: Optional[BoundingBox] = None
    accessibility: Optional[Accessibility] = None
    element_description: Optional[str] = None
    full_path: Optional[str] = None
    step_number: Optional[Number] = None
    page_coords: Optional[PageCoords] = None
    area_data: Optional[AreaData] = None
    is_area_only: Optional[bool] = None
    elements: Optional[List[RelatedElement]] = None
    viewport: Optional[Viewport] = None


# ---------------------------------------------------------------------------
# Records
# ---------------------------------------------------------------------------

class Session(CamelModel):
    """A grouping of feedback items by canonical page URL (origin + path)."""

    id: str
    page_url: str
    title: str
    created_at: str


class Feedback(CamelModel):
    """A single comment anchored to a page element."""

    id: str
    session_id: str
    comment: str
    element: Optional[str] = None
    element_path: Optional[str] = None
    screenshot_url: Optional[str] = None
    page_url: str
    intent: FeedbackIntent
    severity: FeedbackSeverity
    status: FeedbackStatus
    external_id: Optional[str] = None
    metadata: Optional[FeedbackMetadata] = None
    created_at: str
    resolved_at: Optional[str] = None
    resolution: Optional[str] = None


class SessionWithFeedbacks(Session):
    feedbacks: List[Feedback] = Field(default_factory=list)


# ---------------------------------------------------------------------------
# Inputs
# ---------------------------------------------------------------------------

class CreateFeedbackRequest(CamelModel):
    """Body of POST /api/feedback."""

    comment: str = Field(..., min_length=1)
    page_url: str
    element: Optional[str] = None
    element_path: Optional[str] = None
    screenshot_url: Optional[str] = None
    intent: FeedbackIntent = FeedbackIntent.FIX
    severity: FeedbackSeverity = FeedbackSeverity.SUGGESTION
    session_id: Optional[str] = None

    @field_validator("comment")
    @classmethod
    def _comment_length(cls, v: str) -> str:
        return validate_comment_length(v)

    @field_validator("page_url")
    @classmethod
    def _page_url(cls, v: str) -> str:
        return validate_http_url(v)

    @field_validator("screenshot_url")
    @classmethod
    def _screenshot_url(cls, v: Optional[str]) -> Optional[str]:
        return validate_http_url(v) if v is not None else v


class CreateFeedbackInput(CreateFeedbackRequest):
    """Store-level creation input; webhook intake also carries correlation data."""

    external_id: Optional[str] = None
    metadata: Optional[FeedbackMetadata] = None


class UpdateFeedbackInput(CamelModel):
    """Partial update. Only the comment is mutable after creation."""

    comment: Optional[str] = Field(None, min_length=1)

    @field_validator("comment")
    @classmethod
    def _comment_length(cls, v: Optional[str]) -> Optional[str]:
        return validate_comment_length(v) if v is not None else v

    @model_validator(mode="after")
    def _at_least_one_field(self) -> "UpdateFeedbackInput":
        if self.comment is None:
            raise ValueError("at least one field must be provided")
        return self

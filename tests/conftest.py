"""
Pytest configuration for the UI feedback server tests.

Provides fresh in-memory stores and parsed widget sync payloads.
"""

import os

# Keep test runs independent of local UI_FEEDBACK_* overrides
for _key in [k for k in os.environ if k.startswith("UI_FEEDBACK_")]:
    del os.environ[_key]

import pytest

from ui_feedback.core.errors.registry import error_registry
from ui_feedback.models.sync_payload import SyncPayload
from ui_feedback.services.memory_store import MemoryStore

from sync_payloads import AREA_FEEDBACK, VALID_FEEDBACK, make_feedback, make_payload

# Load error registry so UIFeedbackError returns correct HTTP status codes
error_registry.load()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def created_payload():
    return SyncPayload.model_validate(make_payload("feedback.created", feedback=VALID_FEEDBACK))


@pytest.fixture
def updated_payload():
    return SyncPayload.model_validate(
        make_payload("feedback.updated", feedbackId="fb-001", updatedContent="Change to green for better UX")
    )


@pytest.fixture
def deleted_payload():
    return SyncPayload.model_validate(make_payload("feedback.deleted", feedbackId="fb-001"))


@pytest.fixture
def batch_payload():
    return SyncPayload.model_validate(
        make_payload(
            "feedback.batch",
            feedbacks=[
                make_feedback(id="fb-001", content="First feedback"),
                make_feedback(id="fb-002", content="Second feedback", stepNumber=2),
                make_feedback(id="fb-003", content="Third feedback", stepNumber=3),
            ],
        )
    )


@pytest.fixture
def area_payload():
    return SyncPayload.model_validate(make_payload("feedback.created", feedback=AREA_FEEDBACK))

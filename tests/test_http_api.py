"""
Tests for the HTTP API — health, direct intake, sessions, webhook, CORS,
and body limits.

Each test gets a fresh app bound to its own MemoryStore.
"""

import json
from unittest.mock import patch

import pytest
from fastapi.testclient import TestClient
from starlette.requests import Request

from ui_feedback.core.errors import UIFeedbackError
from ui_feedback.core.request_body import read_json_body
from ui_feedback.main import create_app
from ui_feedback.services.memory_store import MemoryStore

from sync_payloads import VALID_FEEDBACK, make_feedback, make_payload


@pytest.fixture
def client(store):
    return TestClient(create_app(store=store))


def _create(client, **overrides):
    body = {"comment": "Make the header sticky", "pageUrl": "https://example.com/home"}
    body.update(overrides)
    return client.post("/api/feedback", json=body)


def _streaming_request(chunks):
    """A Request whose body arrives as separate ASGI messages, counting reads."""
    pending = iter(chunks)
    consumed = []

    async def receive():
        try:
            chunk = next(pending)
        except StopIteration:
            return {"type": "http.request", "body": b"", "more_body": False}
        consumed.append(chunk)
        return {"type": "http.request", "body": chunk, "more_body": True}

    scope = {
        "type": "http",
        "method": "POST",
        "path": "/api/feedback",
        "headers": [(b"content-type", b"application/json")],
        "query_string": b"",
    }
    return Request(scope, receive), consumed


class TestHealth:
    def test_health(self, client):
        resp = client.get("/api/health")
        assert resp.status_code == 200
        data = resp.json()
        assert data["status"] == "ok"
        assert data["service"] == "ui-feedback-mcp"
        assert "uptime_s" in data

    def test_unknown_route_404(self, client):
        assert client.get("/api/nope").status_code == 404


class TestCreateFeedback:
    def test_create_returns_201(self, client):
        resp = _create(client)
        assert resp.status_code == 201
        data = resp.json()
        assert data["status"] == "pending"
        assert data["intent"] == "fix"
        assert data["severity"] == "suggestion"
        assert data["comment"] == "Make the header sticky"
        assert data["pageUrl"] == "https://example.com/home"
        assert data["sessionId"]
        assert data["createdAt"].endswith("Z")
        assert "resolvedAt" not in data

    def test_explicit_fields(self, client):
        resp = _create(client, intent="question", severity="blocking", element="#hero", screenshotUrl="https://cdn.example.com/s.png")
        assert resp.status_code == 201
        data = resp.json()
        assert data["intent"] == "question"
        assert data["severity"] == "blocking"
        assert data["element"] == "#hero"

    def test_two_items_same_page_share_session(self, client):
        a = _create(client).json()
        b = _create(client, comment="Second", pageUrl="https://example.com/home?ref=nav").json()
        assert a["sessionId"] == b["sessionId"]

        session = client.get(f"/api/sessions/{a['sessionId']}").json()
        assert [f["id"] for f in session["feedbacks"]] == [a["id"], b["id"]]

    @pytest.mark.parametrize(
        "body",
        [
            {"pageUrl": "https://example.com/home"},
            {"comment": "", "pageUrl": "https://example.com/home"},
            {"comment": "x", "pageUrl": "not-a-url"},
            {"comment": "x", "pageUrl": "ftp://example.com/file"},
            {"comment": "x", "pageUrl": "https://example.com", "intent": "complain"},
            {"comment": "x", "pageUrl": "https://example.com", "severity": "minor"},
            {"comment": "x" * 10001, "pageUrl": "https://example.com"},
        ],
    )
    def test_validation_failures(self, client, store, body):
        resp = client.post("/api/feedback", json=body)
        assert resp.status_code == 400
        data = resp.json()
        assert data["error"] == "Validation failed"
        assert isinstance(data["details"], list) and data["details"]
        assert store.list_sessions() == []

    def test_non_object_body(self, client):
        resp = client.post("/api/feedback", json=["not", "an", "object"])
        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation failed"

    def test_invalid_json(self, client):
        resp = client.post(
            "/api/feedback",
            content=b"{not json",
            headers={"Content-Type": "application/json"},
        )
        assert resp.status_code == 400
        assert resp.json()["error"]["code"] == "UFB-API-001"

    def test_body_too_large(self, client, store):
        body = json.dumps({"comment": "x", "pageUrl": "https://example.com", "pad": "y" * (1024 * 1024)})
        resp = client.post("/api/feedback", content=body, headers={"Content-Type": "application/json"})
        assert resp.status_code == 413
        assert resp.json()["error"]["code"] == "UFB-API-002"
        assert store.list_sessions() == []

    def test_chunked_body_too_large(self, client, store):
        def chunks():
            for _ in range(100):
                yield b"y" * 64 * 1024

        resp = client.post("/api/feedback", content=chunks(), headers={"Content-Type": "application/json"})
        assert resp.status_code == 413
        assert resp.json()["error"]["code"] == "UFB-API-002"
        assert store.list_sessions() == []

    @pytest.mark.asyncio
    async def test_streamed_body_stops_at_limit(self):
        request, consumed = _streaming_request([b"y" * 64 * 1024] * 100)
        with pytest.raises(UIFeedbackError) as exc_info:
            await read_json_body(request, max_size=1024 * 1024)
        assert exc_info.value.code == "UFB-API-002"
        # 17 x 64KB is the first total over 1MB; nothing after it is pulled
        assert len(consumed) == 17

    @pytest.mark.asyncio
    async def test_streamed_body_under_limit(self):
        request, consumed = _streaming_request([b'{"comment": ', b'"hi"}'])
        assert await read_json_body(request, max_size=1024) == {"comment": "hi"}
        assert len(consumed) == 2


class TestSessions:
    def test_empty(self, client):
        resp = client.get("/api/sessions")
        assert resp.status_code == 200
        assert resp.json() == []

    def test_list_and_detail(self, client):
        created = _create(client).json()
        sessions = client.get("/api/sessions").json()
        assert len(sessions) == 1
        assert sessions[0]["id"] == created["sessionId"]
        assert sessions[0]["title"] == "/home"
        assert "feedbacks" not in sessions[0]

        detail = client.get(f"/api/sessions/{created['sessionId']}").json()
        assert detail["pageUrl"] == "https://example.com/home"
        assert detail["feedbacks"][0]["id"] == created["id"]

    def test_unknown_session_404(self, client):
        resp = client.get("/api/sessions/does-not-exist")
        assert resp.status_code == 404
        err = resp.json()["error"]
        assert err["code"] == "UFB-API-003"
        assert err["message"]


class TestWebhook:
    def test_created(self, client, store):
        resp = client.post("/api/webhook", json=make_payload("feedback.created", feedback=VALID_FEEDBACK))
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "created": 1}
        assert len(store.get_pending_feedback()) == 1

    def test_created_then_updated_then_deleted(self, client, store):
        client.post("/api/webhook", json=make_payload("feedback.created", feedback=VALID_FEEDBACK))

        resp = client.post(
            "/api/webhook",
            json=make_payload("feedback.updated", feedbackId="fb-001", updatedContent="Use green"),
        )
        assert resp.json() == {"ok": True, "updated": True}
        assert store.get_pending_feedback()[0].comment == "Use green"

        resp = client.post("/api/webhook", json=make_payload("feedback.deleted", feedbackId="fb-001"))
        assert resp.json() == {"ok": True, "deleted": True}
        assert store.get_pending_feedback() == []

    def test_update_unknown_id(self, client):
        resp = client.post(
            "/api/webhook",
            json=make_payload("feedback.updated", feedbackId="nope", updatedContent="x"),
        )
        assert resp.status_code == 200
        assert resp.json() == {"ok": True, "updated": False}

    def test_batch_over_limit(self, client, store):
        items = [make_feedback(id=f"fb-{i}") for i in range(101)]
        resp = client.post("/api/webhook", json=make_payload("feedback.batch", feedbacks=items))
        assert resp.status_code == 400
        data = resp.json()
        assert data["ok"] is False
        assert "exceeds limit" in data["error"]
        assert store.get_pending_feedback() == []

    def test_unknown_event(self, client):
        resp = client.post("/api/webhook", json=make_payload("feedback.exploded"))
        assert resp.status_code == 400
        assert resp.json()["error"] == "Validation failed"

    def test_missing_page(self, client):
        payload = make_payload("feedback.created", feedback=VALID_FEEDBACK)
        del payload["page"]
        resp = client.post("/api/webhook", json=payload)
        assert resp.status_code == 400

    def test_empty_content_rejected(self, client, store):
        resp = client.post(
            "/api/webhook",
            json=make_payload("feedback.created", feedback=make_feedback(content="")),
        )
        assert resp.status_code == 400
        assert store.list_sessions() == []


class TestCors:
    def test_localhost_origin_allowed(self, client):
        resp = client.get("/api/health", headers={"Origin": "http://localhost:3000"})
        assert resp.headers["access-control-allow-origin"] == "http://localhost:3000"

    def test_foreign_origin_gets_no_header(self, client):
        resp = client.get("/api/health", headers={"Origin": "https://evil.example.com"})
        assert resp.status_code == 200
        assert "access-control-allow-origin" not in resp.headers

    def test_preflight(self, client):
        resp = client.options(
            "/api/feedback",
            headers={
                "Origin": "http://127.0.0.1:5173",
                "Access-Control-Request-Method": "POST",
                "Access-Control-Request-Headers": "Content-Type",
            },
        )
        assert resp.status_code == 200
        assert resp.headers["access-control-allow-origin"] == "http://127.0.0.1:5173"
        assert "POST" in resp.headers["access-control-allow-methods"]


class TestErrorHandling:
    def test_request_ids_echoed(self, client):
        resp = client.get("/api/health", headers={"X-Correlation-ID": "corr-123"})
        assert resp.headers["x-correlation-id"] == "corr-123"
        assert resp.headers["x-request-id"]

    def test_unhandled_exception_returns_json_500(self):
        store = MemoryStore()
        app = create_app(store=store)
        client = TestClient(app, raise_server_exceptions=False)
        with patch.object(store, "list_sessions", side_effect=RuntimeError("boom")):
            resp = client.get("/api/sessions")
        assert resp.status_code == 500
        assert resp.json() == {"error": "Internal server error"}

    def test_unregistered_error_code_uses_system_entry(self, store):
        app = create_app(store=store)

        @app.get("/api/boom")
        async def boom():
            raise UIFeedbackError("UFB-API-999", detail="not in the registry")

        resp = TestClient(app).get("/api/boom")
        assert resp.status_code == 500
        err = resp.json()["error"]
        assert err["code"] == "UFB-SYS-001"
        assert err["title"] == "Internal error"
        assert err["remediation"]

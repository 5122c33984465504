# tests/test_events.py
import json
import uuid

import httpx
import pytest
from fastapi.testclient import TestClient

from app.api.v1.endpoints.events import SIGNATURE_HEADER
from app.core.settings import settings
from app.main import app
from app.models.chat_cache import ChatCache
from app.services import events_service
from app.services.chat_cache_service import get_cached_response, set_cached_response
from app.services.events_service import (
    SECTION_UPDATED, section_updated_payload, send_event, sign_body, verify_signature,
)

INBOUND = f"{settings.API_V1_STR}/events/task-queue"


@pytest.fixture
def queue_enabled(monkeypatch):
    cfg = events_service.config
    enabled = cfg.model_copy(update={"queue": cfg.queue.model_copy(update={"enabled": True})})
    monkeypatch.setattr(events_service, "config", enabled)
    return enabled


def test_disabled_queue_sends_nothing():
    def handler(request):
        raise AssertionError("no request expected")

    assert send_event(SECTION_UPDATED, {"section_id": "x"}, transport=httpx.MockTransport(handler)) is False


def test_event_is_posted_once(queue_enabled):
    seen = []

    def handler(request: httpx.Request):
        seen.append(request)
        return httpx.Response(200, json={"ids": ["01"], "status": 200})

    ok = send_event(SECTION_UPDATED, {"section_id": "abc"}, transport=httpx.MockTransport(handler))

    assert ok is True
    assert len(seen) == 1
    req = seen[0]
    assert req.method == "POST"
    assert str(req.url) == f"https://inn.gs/e/{queue_enabled.queue.event_key}"
    body = json.loads(req.content)
    assert body["name"] == SECTION_UPDATED
    assert body["data"] == {"section_id": "abc"}
    assert isinstance(body["ts"], int)


def test_rejected_event_is_not_retried(queue_enabled):
    calls = []

    def handler(request):
        calls.append(request)
        return httpx.Response(500)

    assert send_event("docx/test", {}, transport=httpx.MockTransport(handler)) is False
    assert len(calls) == 1


def test_transport_error_is_reported(queue_enabled):
    def handler(request):
        raise httpx.ConnectError("boom", request=request)

    assert send_event("docx/test", {}, transport=httpx.MockTransport(handler)) is False


def test_signature_round_trip():
    body = b'{"name":"docx/section.updated"}'
    header = sign_body(body, "signkey", timestamp=1_700_000_000)
    assert header.startswith("t=1700000000&s=")
    assert verify_signature(body, header, "signkey", now=1_700_000_010)


@pytest.mark.parametrize(
    "header",
    [None, "", "t=abc&s=00", "s=deadbeef", "t=1700000000"],
)
def test_malformed_signature_headers(header):
    assert verify_signature(b"{}", header, "signkey", now=1_700_000_000) is False


def test_signature_rejects_tampering_and_stale_timestamps():
    body = b'{"a":1}'
    header = sign_body(body, "signkey", timestamp=1_700_000_000)
    assert not verify_signature(b'{"a":2}', header, "signkey", now=1_700_000_000)
    assert not verify_signature(body, header, "other-key", now=1_700_000_000)
    assert not verify_signature(body, header, "signkey", now=1_700_000_000 + 301)


def _signed(payload: dict) -> tuple:
    body = json.dumps(payload).encode("utf-8")
    return body, {SIGNATURE_HEADER: sign_body(body, settings.INNGEST_SIGNING_KEY), "content-type": "application/json"}


def test_inbound_event_requires_a_valid_signature():
    client = TestClient(app)
    body, headers = _signed({"name": "docx/other", "data": {}})

    assert client.post(INBOUND, content=body).status_code == 401
    headers[SIGNATURE_HEADER] = sign_body(body, "wrong-key")
    assert client.post(INBOUND, content=body, headers=headers).status_code == 401


def test_inbound_unknown_event_is_acknowledged():
    body, headers = _signed({"name": "docx/other", "data": {"x": 1}})
    r = TestClient(app).post(INBOUND, content=body, headers=headers)
    assert r.status_code == 200
    assert r.json() == {"name": "docx/other", "handled": False, "purged": 0}


def test_inbound_section_update_with_bad_data_is_rejected():
    body, headers = _signed({"name": SECTION_UPDATED, "data": {"section_id": "nope"}})
    assert TestClient(app).post(INBOUND, content=body, headers=headers).status_code == 422


def test_inbound_section_update_purges_document_cache(client, db, make_section):
    section = make_section("cached")
    kept = set_cached_response(db, query_text=f"global {uuid.uuid4()}", response_data={}, ttl_seconds=60)
    set_cached_response(
        db, query_text=f"scoped {uuid.uuid4()}", response_data={}, document_id=section.document_id, ttl_seconds=60
    )

    body, headers = _signed({"name": SECTION_UPDATED, "data": section_updated_payload(section)})
    r = client.post(INBOUND, content=body, headers=headers)

    assert r.status_code == 200, r.text
    assert r.json() == {"name": SECTION_UPDATED, "handled": True, "purged": 1}
    db.expire_all()
    assert db.query(ChatCache).filter(ChatCache.document_id == section.document_id).count() == 0
    assert get_cached_response(db, kept.query_hash) is not None

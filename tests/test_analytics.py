# tests/test_analytics.py
import uuid

from app.core.settings import settings
from app.schemas.analytics import AnalyticsEventCreate
from app.services.analytics_service import list_events_by_type, track_event

API = settings.API_V1_STR


def test_events_are_listed_newest_first(db, document):
    kind = f"page_view_{uuid.uuid4().hex[:6]}"
    ids = [
        track_event(db, AnalyticsEventCreate(event_type=kind, document_id=document.id, metadata={"n": i})).id
        for i in range(3)
    ]
    track_event(db, AnalyticsEventCreate(event_type="other"))

    events = list_events_by_type(db, kind)
    assert [e.id for e in events] == list(reversed(ids))
    assert events[0].meta == {"n": 2}

    assert [e.id for e in list_events_by_type(db, kind, limit=1, offset=1)] == [ids[1]]


def test_event_survives_section_deletion(db, make_section):
    section = make_section("tracked")
    event = track_event(db, AnalyticsEventCreate(event_type="section_view", section_id=section.id))
    db.delete(section)
    db.flush()
    db.refresh(event)
    assert event.section_id is None


def test_analytics_api(client, document, anon_headers, service_headers):
    kind = f"chat_query_{uuid.uuid4().hex[:6]}"
    r = client.post(
        f"{API}/analytics/events",
        json={"event_type": kind, "document_id": str(document.id), "user_role": "manager",
              "metadata": {"q": "budget"}},
        headers=anon_headers,
    )
    assert r.status_code == 201, r.text
    assert r.json()["metadata"] == {"q": "budget"}

    r = client.get(f"{API}/analytics/events", params={"event_type": kind}, headers=service_headers)
    body = r.json()
    assert body["limit"] == 100 and body["offset"] == 0
    assert [e["user_role"] for e in body["items"]] == ["manager"]


def test_tracking_unknown_document_is_a_conflict(client, anon_headers):
    r = client.post(
        f"{API}/analytics/events",
        json={"event_type": "page_view", "document_id": str(uuid.uuid4())},
        headers=anon_headers,
    )
    assert r.status_code == 409

    r = client.post(
        f"{API}/analytics/events",
        json={"event_type": "section_view", "section_id": str(uuid.uuid4())},
        headers=anon_headers,
    )
    assert r.status_code == 409

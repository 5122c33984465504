# tests/test_sections.py
import uuid

import pytest
from sqlalchemy.exc import IntegrityError, NoResultFound

from app.core.constants import ROLE_ALL
from app.core.settings import settings
from app.models.content import Document
from app.schemas.content import SectionCreate
from app.services.section_service import (
    create_section, get_section_by_slugs, list_sections_by_role, list_sections_for_document, search_sections,
)

API = settings.API_V1_STR


def _other_document(db) -> Document:
    doc = Document(
        title="Other", slug=f"other-{uuid.uuid4().hex[:8]}", domain="credo",
        template_id="guide-linear", render_mode="static",
    )
    db.add(doc)
    db.flush()
    return doc


def test_slug_unique_per_document_only(db, make_section):
    make_section("overview")
    make_section("overview", doc=_other_document(db))
    with pytest.raises(IntegrityError):
        with db.begin_nested():
            make_section("overview")


def test_sections_come_back_in_order(db, document, make_section):
    make_section("third", order_index=3)
    make_section("first", order_index=1)
    make_section("second", order_index=2)
    assert [s.slug for s in list_sections_for_document(db, document.id)] == ["first", "second", "third"]


def test_lookup_by_slug_pair(db, document, make_section):
    section = make_section("stage-1")
    found = get_section_by_slugs(db, document_slug=document.slug, section_slug="stage-1")
    assert found.id == section.id
    with pytest.raises(NoResultFound):
        get_section_by_slugs(db, document_slug=document.slug, section_slug="stage-9")


def test_defaults(db, make_section):
    section = make_section("defaults")
    db.refresh(section)
    assert section.level == 1
    assert section.lock_mode == "locked"
    assert section.roles == ["all"]


def test_section_roles_default_to_everyone(db, document):
    payload = SectionCreate(document_id=document.id, title="Open", slug="open", order_index=0, content_mdx="x")
    assert payload.roles == [ROLE_ALL]

    section = create_section(db, payload)
    assert list_sections_by_role(db, ROLE_ALL, document_id=document.id)[0].id == section.id


def test_role_filter_is_exact(db, document, make_section):
    a = make_section("a", order_index=0, roles=["all"])
    b = make_section("b", order_index=1, roles=["all", "manager"])
    c = make_section("c", order_index=2, roles=["safety-officer", "technician"])

    assert [s.id for s in list_sections_by_role(db, "all", document_id=document.id)] == [a.id, b.id]
    assert [s.id for s in list_sections_by_role(db, "manager", document_id=document.id)] == [b.id]
    assert [s.id for s in list_sections_by_role(db, "technician", document_id=document.id)] == [c.id]
    assert list_sections_by_role(db, "admin", document_id=document.id) == []


def test_full_text_search_ranks_and_scopes(db, document, make_section):
    make_section("boundary", content="Define the zone boundary. The boundary sets which assets are in scope.")
    make_section("budget", content="Agree the budget with the council.")
    other = _other_document(db)
    make_section("boundary", content="Boundary work elsewhere.", doc=other)

    hits = search_sections(db, "boundary", document_id=document.id)
    assert [h.slug for h in hits] == ["boundary"]
    assert hits[0].document_slug == document.slug
    assert hits[0].rank > 0

    assert len(search_sections(db, "boundary")) >= 2
    assert search_sections(db, "xylophone", document_id=document.id) == []


def test_search_vector_follows_updates(db, document, make_section):
    section = make_section("evolving", content="Nothing about trains yet.")
    section.content_mdx = "All about hydrogen buses."
    db.flush()
    assert [h.id for h in search_sections(db, "hydrogen", document_id=document.id)] == [section.id]


def test_section_api(client, db, document, anon_headers, service_headers):
    body = {
        "document_id": str(document.id), "title": "Scoping", "slug": "scoping",
        "order_index": 1, "content_mdx": "Scope the zone.", "roles": ["all", "manager"],
    }
    r = client.post(f"{API}/sections", json=body, headers=service_headers)
    assert r.status_code == 201, r.text
    section_id = r.json()["id"]

    r = client.get(f"{API}/documents/{document.id}/sections", headers=anon_headers)
    assert [s["slug"] for s in r.json()] == ["scoping"]

    r = client.get(f"{API}/documents/{document.slug}/sections/scoping", headers=anon_headers)
    assert r.status_code == 200
    assert r.json()["id"] == section_id

    r = client.get(f"{API}/sections/by-role/manager", params={"document_id": str(document.id)}, headers=anon_headers)
    assert [s["id"] for s in r.json()] == [section_id]

    r = client.get(f"{API}/sections/search", params={"q": "zone", "document_id": str(document.id)}, headers=anon_headers)
    assert [h["id"] for h in r.json()] == [section_id]

    r = client.post(f"{API}/sections", json=body, headers=service_headers)
    assert r.status_code == 409


def test_section_api_rejects_bad_lock_mode_and_unknown_document(client, document, service_headers):
    body = {"document_id": str(document.id), "title": "T", "slug": "t", "order_index": 0,
            "content_mdx": "x", "lock_mode": "frozen"}
    assert client.post(f"{API}/sections", json=body, headers=service_headers).status_code == 422

    body.update(lock_mode="dynamic", document_id=str(uuid.uuid4()))
    assert client.post(f"{API}/sections", json=body, headers=service_headers).status_code == 404

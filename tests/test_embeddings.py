# tests/test_embeddings.py
import pytest
from sqlalchemy import func, select

from app.core.constants import EMBEDDING_DIMENSIONS
from app.core.settings import settings
from app.models.embedding import Embedding
from app.schemas.retrieval import EmbeddingCreate
from app.services.embedding_service import (
    compute_content_hash, create_embedding, list_embeddings_for_section, similarity_search,
)
from app.services.section_service import delete_section

API = settings.API_V1_STR


def _axis(i: int, *, weight: float = 1.0, tilt: float = 0.0) -> list:
    v = [0.0] * EMBEDDING_DIMENSIONS
    v[i] = weight
    if tilt:
        v[(i + 1) % EMBEDDING_DIMENSIONS] = tilt
    return v


def _embed(db, section, vector, content=None):
    return create_embedding(
        db,
        EmbeddingCreate(
            section_id=section.id,
            content_hash=compute_content_hash(content or section.content_mdx),
            embedding=vector,
        ),
    )


def test_content_hash_is_sha256_hex():
    h = compute_content_hash("hello")
    assert h == "2cf24dba5fb0a30e26e83b2ac5b9e29e1b161e5c1fa7425e73043362938b9824"


def test_wrong_dimension_is_rejected():
    with pytest.raises(ValueError):
        EmbeddingCreate(section_id="00000000-0000-0000-0000-000000000000", content_hash="x", embedding=[0.1, 0.2])


def test_same_section_and_hash_is_stored_once(db, make_section):
    section = make_section("once")
    first = _embed(db, section, _axis(0))
    again = _embed(db, section, _axis(1))

    assert again.id == first.id
    count = db.scalar(select(func.count()).select_from(Embedding).where(Embedding.section_id == section.id))
    assert count == 1

    _embed(db, section, _axis(1), content="new text")
    assert len(list_embeddings_for_section(db, section.id)) == 2


def test_similarity_search_threshold_and_dedup(db, make_section):
    near = make_section("near", order_index=0)
    far = make_section("far", order_index=1)
    _embed(db, near, _axis(0))
    _embed(db, near, _axis(0, tilt=0.1), content="near v2")
    _embed(db, far, _axis(5))

    matches = similarity_search(db, _axis(0), threshold=0.8, limit=5)
    ids = [m.section_id for m in matches]
    assert near.id in ids
    assert far.id not in ids
    assert ids.count(near.id) == 1
    best = next(m for m in matches if m.section_id == near.id)
    assert best.similarity == pytest.approx(1.0, abs=1e-6)


def test_similarity_search_limit_counts_sections_not_embeddings(db, make_section):
    busy = make_section("busy", order_index=0)
    other = make_section("other", order_index=1)
    for n, tilt in enumerate([0.0, 0.05, 0.1, 0.15]):
        _embed(db, busy, _axis(100, tilt=tilt), content=f"busy v{n}")
    _embed(db, other, _axis(100, tilt=0.2))

    matches = similarity_search(db, _axis(100), threshold=0.8, limit=2)

    assert [m.section_id for m in matches] == [busy.id, other.id]
    assert matches[0].similarity == pytest.approx(1.0, abs=1e-6)
    assert 0.8 < matches[1].similarity < 1.0


def test_deleting_section_removes_its_embeddings(db, make_section):
    section = make_section("doomed")
    _embed(db, section, _axis(200))
    _embed(db, section, _axis(201), content="second")
    section_id = section.id

    delete_section(db, section)
    db.expire_all()

    count = db.scalar(select(func.count()).select_from(Embedding).where(Embedding.section_id == section_id))
    assert count == 0


def test_embedding_api(client, make_section, anon_headers, service_headers):
    section = make_section("api-embed")
    body = {"section_id": str(section.id), "content_hash": compute_content_hash("api"), "embedding": _axis(7)}

    r1 = client.post(f"{API}/embeddings", json=body, headers=service_headers)
    r2 = client.post(f"{API}/embeddings", json=body, headers=service_headers)
    assert r1.status_code == 201, r1.text
    assert r1.json()["id"] == r2.json()["id"]
    assert r1.json()["model_version"] == "text-embedding-3-small"

    r = client.get(f"{API}/sections/{section.id}/embeddings", headers=anon_headers)
    assert len(r.json()) == 1

    r = client.post(
        f"{API}/embeddings/search",
        json={"query_embedding": _axis(7), "match_threshold": 0.9, "match_count": 3},
        headers=anon_headers,
    )
    assert r.status_code == 200
    assert str(section.id) in [m["section_id"] for m in r.json()]

    r = client.post(f"{API}/embeddings/search", json={"query_embedding": [1.0]}, headers=anon_headers)
    assert r.status_code == 422

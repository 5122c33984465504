# app/services/embedding_service.py
from __future__ import annotations

import hashlib
from typing import List, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.orm import Session

from app.core.constants import SEARCH_RESULTS_LIMIT
from app.models.content import Section
from app.models.embedding import Embedding
from app.schemas.retrieval import EmbeddingCreate, SimilarityMatch


def compute_content_hash(content: str) -> str:
    """sha256 hex of the text that was embedded."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()


def list_embeddings_for_section(db: Session, section_id: UUID) -> Sequence[Embedding]:
    return db.scalars(
        select(Embedding).where(Embedding.section_id == section_id).order_by(Embedding.created_at.asc())
    ).all()


def create_embedding(db: Session, payload: EmbeddingCreate) -> Embedding:
    """
    INSERT ... ON CONFLICT (section_id, content_hash) DO NOTHING, then read
    the stored row back. Re-embedding unchanged content returns the existing row.
    """
    stmt = (
        pg_insert(Embedding)
        .values(
            section_id=payload.section_id,
            content_hash=payload.content_hash,
            embedding=payload.embedding,
            model_version=payload.model_version,
        )
        .on_conflict_do_nothing(index_elements=["section_id", "content_hash"])
    )
    db.execute(stmt)
    return db.execute(
        select(Embedding).where(
            Embedding.section_id == payload.section_id,
            Embedding.content_hash == payload.content_hash,
        )
    ).scalar_one()


def similarity_search(
    db: Session,
    query_embedding: List[float],
    *,
    threshold: float = 0.8,
    limit: int = SEARCH_RESULTS_LIMIT,
) -> List[SimilarityMatch]:
    """
    Nearest sections by cosine distance. similarity = 1 - distance; only
    matches above `threshold` are kept and a section appears once, ranked by
    its best embedding before `limit` applies.
    """
    # closest embedding per section
    best = (
        select(
            Embedding.section_id,
            func.min(Embedding.embedding.cosine_distance(query_embedding)).label("distance"),
        )
        .group_by(Embedding.section_id)
        .subquery()
    )

    stmt = (
        select(Section.id, Section.document_id, Section.title, Section.slug, Section.content_mdx, best.c.distance)
        .join(best, best.c.section_id == Section.id)
        .where(1 - best.c.distance > threshold)
        .order_by(best.c.distance.asc(), Section.id)
        .limit(limit)
    )

    return [
        SimilarityMatch(
            section_id=row.id,
            document_id=row.document_id,
            title=row.title,
            slug=row.slug,
            content_mdx=row.content_mdx,
            similarity=1 - float(row.distance),
        )
        for row in db.execute(stmt).all()
    ]

# app/api/v1/endpoints/embeddings.py
from __future__ import annotations

from typing import List
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session

from app.api.deps.auth import require_read_access, require_service_role
from app.db.session import get_db
from app.schemas.retrieval import EmbeddingCreate, EmbeddingOut, SimilarityMatch, SimilaritySearchIn
from app.services.embedding_service import create_embedding, list_embeddings_for_section, similarity_search
from app.services.section_service import get_section

router = APIRouter()


@router.get(
    "/sections/{section_id}/embeddings",
    response_model=List[EmbeddingOut],
    dependencies=[Depends(require_read_access)],
)
def list_section_embeddings_endpoint(section_id: UUID, db: Session = Depends(get_db)):
    return list_embeddings_for_section(db, section_id)


@router.post(
    "/embeddings",
    response_model=EmbeddingOut,
    status_code=201,
    dependencies=[Depends(require_service_role)],
)
def create_embedding_endpoint(payload: EmbeddingCreate, db: Session = Depends(get_db)):
    """Idempotent per (section_id, content_hash): repeats return the stored row."""
    if not get_section(db, payload.section_id):
        raise HTTPException(status_code=404, detail="Section not found")
    embedding = create_embedding(db, payload)
    db.commit()
    db.refresh(embedding)
    return embedding


@router.post(
    "/embeddings/search",
    response_model=List[SimilarityMatch],
    dependencies=[Depends(require_read_access)],
)
def similarity_search_endpoint(payload: SimilaritySearchIn, db: Session = Depends(get_db)):
    return similarity_search(
        db,
        payload.query_embedding,
        threshold=payload.match_threshold,
        limit=payload.match_count,
    )

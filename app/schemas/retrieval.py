# app/schemas/retrieval.py
# Embeddings, similarity search and chat cache
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.constants import (
    CHAT_QUERY_MAX_LENGTH, DEFAULT_EMBEDDING_MODEL, EMBEDDING_DIMENSIONS, SEARCH_RESULTS_LIMIT,
)


def _check_dimensions(v: List[float]) -> List[float]:
    if len(v) != EMBEDDING_DIMENSIONS:
        raise ValueError(f"embedding must have {EMBEDDING_DIMENSIONS} dimensions, got {len(v)}")
    return v


# ---------- Embedding ----------
class EmbeddingCreate(BaseModel):
    section_id: UUID
    content_hash: str = Field(..., min_length=1)
    embedding: List[float]
    model_version: str = DEFAULT_EMBEDDING_MODEL

    @field_validator("embedding")
    @classmethod
    def check_embedding_dimensions(cls, v: List[float]) -> List[float]:
        return _check_dimensions(v)

class EmbeddingOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    section_id: UUID
    content_hash: str
    model_version: str
    created_at: datetime

class SimilaritySearchIn(BaseModel):
    query_embedding: List[float]
    match_threshold: float = Field(0.8, ge=-1.0, le=1.0)
    match_count: int = Field(SEARCH_RESULTS_LIMIT, ge=1, le=100)

    @field_validator("query_embedding")
    @classmethod
    def check_query_dimensions(cls, v: List[float]) -> List[float]:
        return _check_dimensions(v)

class SimilarityMatch(BaseModel):
    section_id: UUID
    document_id: UUID
    title: str
    slug: str
    content_mdx: str
    similarity: float


# ---------- Chat cache ----------
class ChatCacheSet(BaseModel):
    query_text: str = Field(..., min_length=1, max_length=CHAT_QUERY_MAX_LENGTH)
    response_data: Dict[str, Any]
    document_id: Optional[UUID] = None
    # either an absolute expiry or a TTL; TTL falls back to the chat default
    expires_at: Optional[datetime] = None
    ttl_seconds: Optional[int] = Field(None, ge=1)

class ChatCacheOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    query_hash: str
    query_text: str
    response_data: Dict[str, Any]
    document_id: Optional[UUID] = None
    expires_at: datetime
    created_at: datetime

class PurgeOut(BaseModel):
    deleted: int

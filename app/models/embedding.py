# app/models/embedding.py
from __future__ import annotations

import uuid
from datetime import datetime

from pgvector.sqlalchemy import Vector
from sqlalchemy import DateTime, ForeignKey, Index, Text, UniqueConstraint, func, text
from sqlalchemy.dialects.postgresql import UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.constants import DEFAULT_EMBEDDING_MODEL, EMBEDDING_DIMENSIONS
from app.db.base import Base


class Embedding(Base):
    __tablename__ = "embeddings"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("uuid_generate_v4()")
    )
    section_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"))
    content_hash: Mapped[str] = mapped_column(Text)
    embedding = mapped_column(Vector(EMBEDDING_DIMENSIONS), nullable=True)
    model_version: Mapped[str] = mapped_column(
        Text, default=DEFAULT_EMBEDDING_MODEL, server_default=text(f"'{DEFAULT_EMBEDDING_MODEL}'")
    )
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    section = relationship("Section")

    __table_args__ = (
        # re-embedding unchanged text is a no-op
        UniqueConstraint("section_id", "content_hash", name="embeddings_section_id_content_hash_key"),
        Index("idx_embeddings_section_id", "section_id"),
        Index(
            "idx_embeddings_vector",
            "embedding",
            postgresql_using="hnsw",
            postgresql_ops={"embedding": "vector_cosine_ops"},
        ),
    )

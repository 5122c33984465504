# app/models/chat_cache.py
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Dict, Optional

from sqlalchemy import DateTime, ForeignKey, Index, Text, func, text
from sqlalchemy.dialects.postgresql import JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class ChatCache(Base):
    __tablename__ = "chat_cache"

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True, server_default=text("uuid_generate_v4()")
    )
    query_hash: Mapped[str] = mapped_column(Text, unique=True)
    query_text: Mapped[str] = mapped_column(Text)
    response_data: Mapped[Dict[str, Any]] = mapped_column(JSONB)
    document_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        UUID(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"), nullable=True
    )
    # rows past this instant are logically gone
    expires_at: Mapped[datetime] = mapped_column(DateTime(timezone=True))
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())

    __table_args__ = (
        Index("idx_chat_cache_query_hash", "query_hash"),
        Index("idx_chat_cache_expires_at", "expires_at"),
    )

# app/services/chat_cache_service.py
# Cache of AI chat answers keyed by a hash of the question
from __future__ import annotations

import hashlib
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional
from uuid import UUID

from sqlalchemy import delete, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.orm import Session

from app.core.constants import CACHE_TTL_CHAT_RESPONSE
from app.models.chat_cache import ChatCache


def _now_utc() -> datetime:
    return datetime.now(timezone.utc)


def normalize_query(query_text: str) -> str:
    return " ".join(query_text.lower().split())


def compute_query_hash(query_text: str, *, document_id: Optional[UUID] = None) -> str:
    """
    sha256 of the lower-cased, whitespace-collapsed question. A document id
    scopes the key so the same question asked about two playbooks differs.
    """
    key = normalize_query(query_text)
    if document_id:
        key = f"{document_id}:{key}"
    return hashlib.sha256(key.encode("utf-8")).hexdigest()


def get_cached_response(db: Session, query_hash: str, *, now: Optional[datetime] = None) -> Optional[ChatCache]:
    """Live entry or None. A miss is not an error."""
    now = now or _now_utc()
    return db.scalar(
        select(ChatCache).where(ChatCache.query_hash == query_hash, ChatCache.expires_at > now)
    )


def set_cached_response(
    db: Session,
    *,
    query_text: str,
    response_data: Dict[str, Any],
    document_id: Optional[UUID] = None,
    expires_at: Optional[datetime] = None,
    ttl_seconds: Optional[int] = None,
    query_hash: Optional[str] = None,
) -> ChatCache:
    """Insert or replace by query_hash."""
    if expires_at is None:
        expires_at = _now_utc() + timedelta(seconds=ttl_seconds or CACHE_TTL_CHAT_RESPONSE)
    query_hash = query_hash or compute_query_hash(query_text, document_id=document_id)

    values = {
        "query_hash": query_hash,
        "query_text": query_text,
        "response_data": response_data,
        "document_id": document_id,
        "expires_at": expires_at,
    }
    stmt = (
        pg_insert(ChatCache)
        .values(**values)
        .on_conflict_do_update(
            index_elements=["query_hash"],
            set_={k: v for k, v in values.items() if k != "query_hash"},
        )
        .returning(ChatCache)
    )
    return db.scalars(stmt, execution_options={"populate_existing": True}).one()


def purge_expired(db: Session, *, now: Optional[datetime] = None) -> int:
    """Deletes rows whose expiry is strictly in the past. Returns the count."""
    now = now or _now_utc()
    result = db.execute(
        delete(ChatCache).where(ChatCache.expires_at < now),
        execution_options={"synchronize_session": False},
    )
    return int(result.rowcount or 0)


def purge_for_document(db: Session, document_id: UUID) -> int:
    """Drops every cached answer scoped to `document_id`, live or not."""
    result = db.execute(
        delete(ChatCache).where(ChatCache.document_id == document_id),
        execution_options={"synchronize_session": False},
    )
    return int(result.rowcount or 0)

# app/api/v1/endpoints/chat_cache.py
from __future__ import annotations

from typing import Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps.auth import require_read_access, require_service_role
from app.core.constants import CHAT_QUERY_MAX_LENGTH
from app.db.session import get_db
from app.schemas.retrieval import ChatCacheOut, ChatCacheSet, PurgeOut
from app.services.chat_cache_service import (
    compute_query_hash, get_cached_response, purge_expired, set_cached_response,
)

router = APIRouter()


@router.get(
    "/chat-cache/lookup",
    response_model=ChatCacheOut,
    dependencies=[Depends(require_read_access)],
)
def lookup_by_query_endpoint(
    q: str = Query(..., min_length=1, max_length=CHAT_QUERY_MAX_LENGTH),
    document_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
):
    entry = get_cached_response(db, compute_query_hash(q, document_id=document_id))
    if not entry:
        raise HTTPException(status_code=404, detail="Cache miss")
    return entry


@router.get(
    "/chat-cache/{query_hash}",
    response_model=ChatCacheOut,
    dependencies=[Depends(require_read_access)],
)
def get_cached_response_endpoint(query_hash: str, db: Session = Depends(get_db)):
    entry = get_cached_response(db, query_hash)
    if not entry:
        raise HTTPException(status_code=404, detail="Cache miss")
    return entry


@router.post(
    "/chat-cache",
    response_model=ChatCacheOut,
    dependencies=[Depends(require_service_role)],
)
def set_cached_response_endpoint(payload: ChatCacheSet, db: Session = Depends(get_db)):
    try:
        entry = set_cached_response(
            db,
            query_text=payload.query_text,
            response_data=payload.response_data,
            document_id=payload.document_id,
            expires_at=payload.expires_at,
            ttl_seconds=payload.ttl_seconds,
        )
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Document {payload.document_id} does not exist")
    return entry


@router.delete(
    "/chat-cache/expired",
    response_model=PurgeOut,
    dependencies=[Depends(require_service_role)],
)
def purge_expired_endpoint(db: Session = Depends(get_db)):
    deleted = purge_expired(db)
    db.commit()
    return PurgeOut(deleted=deleted)

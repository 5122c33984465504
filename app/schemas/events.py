# app/schemas/events.py
from __future__ import annotations
from typing import Any, Dict, Optional
from uuid import UUID

from pydantic import BaseModel, Field


class InboundEvent(BaseModel):
    name: str = Field(..., min_length=1)
    data: Dict[str, Any] = Field(default_factory=dict)
    ts: Optional[int] = None


class SectionUpdatedData(BaseModel):
    section_id: UUID
    document_id: UUID
    content_hash: Optional[str] = None


class InboundEventOut(BaseModel):
    name: str
    handled: bool
    purged: int = 0

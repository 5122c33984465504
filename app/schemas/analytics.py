# app/schemas/analytics.py
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field


class AnalyticsEventCreate(BaseModel):
    event_type: str = Field(..., min_length=1, max_length=100)
    document_id: Optional[UUID] = None
    section_id: Optional[UUID] = None
    user_role: Optional[str] = None
    session_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict)

class AnalyticsEventOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    event_type: str
    document_id: Optional[UUID] = None
    section_id: Optional[UUID] = None
    user_role: Optional[str] = None
    session_id: Optional[str] = None
    metadata: Dict[str, Any] = Field(default_factory=dict, validation_alias="meta")
    created_at: datetime

class AnalyticsEventListOut(BaseModel):
    limit: int
    offset: int
    items: List[AnalyticsEventOut]

# app/schemas/content.py
# Pydantic requests/responses for Documents, Sections, SectionVersions and Assets
from __future__ import annotations
from datetime import datetime
from typing import Any, Dict, List, Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from app.core.constants import ROLE_ALL, LockMode, RenderMode

# ORM attribute is `meta`; the wire name stays `metadata`.
def _meta_from_orm():
    return Field(default_factory=dict, validation_alias="meta")


# ---------- Document ----------
class DocumentBase(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, max_length=200)
    domain: str = Field(..., min_length=1)
    template_id: str = Field(..., min_length=1)
    theme_id: Optional[str] = None
    render_mode: RenderMode = "static"
    cache_key: Optional[str] = None
    last_rendered: Optional[datetime] = None
    embeddings_version: int = Field(1, ge=1)

class DocumentCreate(DocumentBase):
    metadata: Dict[str, Any] = Field(default_factory=dict)

class DocumentUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    domain: Optional[str] = None
    template_id: Optional[str] = None
    theme_id: Optional[str] = None
    render_mode: Optional[RenderMode] = None
    cache_key: Optional[str] = None
    last_rendered: Optional[datetime] = None
    embeddings_version: Optional[int] = Field(None, ge=1)
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")

class DocumentOut(DocumentBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    metadata: Dict[str, Any] = _meta_from_orm()
    created_at: datetime
    updated_at: datetime


# ---------- Section ----------
class SectionBase(BaseModel):
    title: str = Field(..., min_length=1)
    slug: str = Field(..., min_length=1, max_length=200)
    order_index: int
    level: int = Field(1, ge=1)
    content_mdx: str
    lock_mode: LockMode = "locked"
    roles: List[str] = Field(default_factory=lambda: [ROLE_ALL])

class SectionCreate(SectionBase):
    document_id: UUID
    metadata: Dict[str, Any] = Field(default_factory=dict)

class SectionUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    slug: Optional[str] = Field(None, min_length=1, max_length=200)
    order_index: Optional[int] = None
    level: Optional[int] = Field(None, ge=1)
    content_mdx: Optional[str] = None
    lock_mode: Optional[LockMode] = None
    roles: Optional[List[str]] = None
    metadata: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="ignore")

class SectionOut(SectionBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    document_id: UUID
    metadata: Dict[str, Any] = _meta_from_orm()
    created_at: datetime
    updated_at: datetime

class SectionSearchHit(BaseModel):
    id: UUID
    document_id: UUID
    document_title: str
    document_slug: str
    title: str
    slug: str
    order_index: int
    content_mdx: str
    roles: List[str]
    rank: float


# ---------- SectionVersion ----------
class SectionVersionOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    section_id: UUID
    version_number: int
    content_mdx: str
    metadata: Dict[str, Any] = _meta_from_orm()
    created_at: datetime


# ---------- Asset ----------
class AssetBase(BaseModel):
    filename: str = Field(..., min_length=1)
    storage_path: str = Field(..., min_length=1)
    cdn_url: str = Field(..., min_length=1)
    mime_type: str = Field(..., min_length=1)
    size_bytes: Optional[int] = Field(None, ge=0)
    width: Optional[int] = Field(None, ge=0)
    height: Optional[int] = Field(None, ge=0)
    alt_text: Optional[str] = None

class AssetIn(AssetBase):
    metadata: Dict[str, Any] = Field(default_factory=dict)

class AssetCreate(AssetIn):
    document_id: UUID

class AssetOut(AssetBase):
    model_config = ConfigDict(from_attributes=True)
    id: UUID
    document_id: UUID
    metadata: Dict[str, Any] = _meta_from_orm()
    created_at: datetime

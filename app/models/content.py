# app/models/content.py
# Content models: Document, Section, SectionVersion, Asset
from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any, Optional

from sqlalchemy import (
    CheckConstraint, DateTime, FetchedValue, ForeignKey, Integer, Text, UniqueConstraint, Index, func, text
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, TSVECTOR, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.core.constants import ROLE_ALL
from app.db.base import Base, utcnow

# "metadata" is reserved on declarative classes; the attribute is `meta`.
def _meta_column():
    return mapped_column("metadata", JSONB, default=dict, server_default=text("'{}'::jsonb"))


def _uuid_pk():
    return mapped_column(UUID(as_uuid=True), primary_key=True, server_default=text("uuid_generate_v4()"))


class Document(Base):
    __tablename__ = "documents"

    id: Mapped[uuid.UUID] = _uuid_pk()
    title: Mapped[str] = mapped_column(Text)
    slug: Mapped[str] = mapped_column(Text, unique=True)     # globally unique
    domain: Mapped[str] = mapped_column(Text)
    template_id: Mapped[str] = mapped_column(Text)
    theme_id: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    render_mode: Mapped[str] = mapped_column(Text)
    cache_key: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    last_rendered: Mapped[Optional[datetime]] = mapped_column(DateTime(timezone=True), nullable=True)
    embeddings_version: Mapped[int] = mapped_column(Integer, default=1, server_default=text("1"))
    meta: Mapped[dict[str, Any]] = _meta_column()

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    # unloaded children are left to ON DELETE CASCADE
    sections: Mapped[list["Section"]] = relationship(
        "Section",
        back_populates="document",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="Section.order_index",
    )
    assets: Mapped[list["Asset"]] = relationship(
        "Asset", back_populates="document", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        CheckConstraint("render_mode IN ('static', 'dynamic')", name="render_mode"),
        Index("idx_documents_domain", "domain"),
        Index("idx_documents_template", "template_id"),
    )


class Section(Base):
    __tablename__ = "sections"

    id: Mapped[uuid.UUID] = _uuid_pk()
    document_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"))

    title: Mapped[str] = mapped_column(Text)
    slug: Mapped[str] = mapped_column(Text)                  # unique per document
    order_index: Mapped[int] = mapped_column(Integer)
    level: Mapped[int] = mapped_column(Integer, default=1, server_default=text("1"))
    content_mdx: Mapped[str] = mapped_column(Text)
    lock_mode: Mapped[str] = mapped_column(Text, default="locked", server_default=text("'locked'"))
    roles: Mapped[list[str]] = mapped_column(
        ARRAY(Text), default=lambda: [ROLE_ALL], server_default=text(f"ARRAY['{ROLE_ALL}']")
    )
    # maintained by the update_sections_search_vector trigger
    search_vector: Mapped[Optional[str]] = mapped_column(
        TSVECTOR, nullable=True, server_default=FetchedValue(), server_onupdate=FetchedValue(), deferred=True
    )
    meta: Mapped[dict[str, Any]] = _meta_column()

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    document: Mapped["Document"] = relationship("Document", back_populates="sections")
    versions: Mapped[list["SectionVersion"]] = relationship(
        "SectionVersion",
        back_populates="section",
        cascade="all, delete-orphan",
        passive_deletes=True,
        order_by="SectionVersion.version_number",
    )

    __table_args__ = (
        UniqueConstraint("document_id", "slug", name="sections_document_id_slug_key"),
        CheckConstraint("lock_mode IN ('locked', 'semi-dynamic', 'dynamic')", name="lock_mode"),
        Index("idx_sections_order", "document_id", "order_index"),
        Index("idx_sections_search_vector", "search_vector", postgresql_using="gin"),
        Index("idx_sections_roles", "roles", postgresql_using="gin"),
    )


class SectionVersion(Base):
    """Written only by the save_section_version_trigger trigger."""
    __tablename__ = "section_versions"

    id: Mapped[uuid.UUID] = _uuid_pk()
    section_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("sections.id", ondelete="CASCADE"))
    version_number: Mapped[int] = mapped_column(Integer)
    content_mdx: Mapped[str] = mapped_column(Text)
    meta: Mapped[dict[str, Any]] = _meta_column()
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    section: Mapped["Section"] = relationship("Section", back_populates="versions")

    __table_args__ = (
        UniqueConstraint("section_id", "version_number", name="section_versions_section_id_version_number_key"),
    )


class Asset(Base):
    __tablename__ = "assets"

    id: Mapped[uuid.UUID] = _uuid_pk()
    document_id: Mapped[uuid.UUID] = mapped_column(UUID(as_uuid=True), ForeignKey("documents.id", ondelete="CASCADE"))
    filename: Mapped[str] = mapped_column(Text)
    storage_path: Mapped[str] = mapped_column(Text)
    cdn_url: Mapped[str] = mapped_column(Text)
    mime_type: Mapped[str] = mapped_column(Text)
    size_bytes: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    width: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    height: Mapped[Optional[int]] = mapped_column(Integer, nullable=True)
    alt_text: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    meta: Mapped[dict[str, Any]] = _meta_column()
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now())

    document: Mapped["Document"] = relationship("Document", back_populates="assets")

    __table_args__ = (
        Index("idx_assets_document_id", "document_id"),
        Index("idx_assets_mime_type", "mime_type"),
    )

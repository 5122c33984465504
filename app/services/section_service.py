# app/services/section_service.py
# Section lookups: ordering, slug pairs, full-text search, role visibility
from __future__ import annotations

from typing import List, Optional, Sequence
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from app.core.constants import SEARCH_RESULTS_LIMIT
from app.models.content import Document, Section
from app.schemas.content import SectionCreate, SectionSearchHit, SectionUpdate


def get_section(db: Session, section_id: UUID) -> Optional[Section]:
    return db.get(Section, section_id)


def list_sections_for_document(db: Session, document_id: UUID) -> Sequence[Section]:
    return db.scalars(
        select(Section)
        .where(Section.document_id == document_id)
        .order_by(Section.order_index.asc())
    ).all()


def get_section_by_slugs(db: Session, *, document_slug: str, section_slug: str) -> Section:
    """Raises NoResultFound when the pair does not exist."""
    return db.execute(
        select(Section)
        .join(Document, Document.id == Section.document_id)
        .where(Document.slug == document_slug, Section.slug == section_slug)
    ).scalar_one()


def search_sections(
    db: Session,
    query: str,
    *,
    document_id: Optional[UUID] = None,
    limit: int = SEARCH_RESULTS_LIMIT,
) -> List[SectionSearchHit]:
    """
    websearch_to_tsquery against the trigger-maintained search_vector,
    best ts_rank first. Never more than SEARCH_RESULTS_LIMIT hits.
    """
    tsquery = func.websearch_to_tsquery("english", query)
    rank = func.ts_rank(Section.search_vector, tsquery).label("rank")

    stmt = (
        select(Section, Document.title, Document.slug, rank)
        .join(Document, Document.id == Section.document_id)
        .where(Section.search_vector.op("@@")(tsquery))
    )
    if document_id:
        stmt = stmt.where(Section.document_id == document_id)

    stmt = stmt.order_by(rank.desc(), Section.order_index.asc()).limit(min(limit, SEARCH_RESULTS_LIMIT))

    hits: List[SectionSearchHit] = []
    for section, doc_title, doc_slug, score in db.execute(stmt).all():
        hits.append(
            SectionSearchHit(
                id=section.id,
                document_id=section.document_id,
                document_title=doc_title,
                document_slug=doc_slug,
                title=section.title,
                slug=section.slug,
                order_index=section.order_index,
                content_mdx=section.content_mdx,
                roles=list(section.roles or []),
                rank=float(score or 0.0),
            )
        )
    return hits


def list_sections_by_role(db: Session, role: str, *, document_id: Optional[UUID] = None) -> Sequence[Section]:
    # roles @> ARRAY[role]
    stmt = select(Section).where(Section.roles.contains([role]))
    if document_id:
        stmt = stmt.where(Section.document_id == document_id)
    return db.scalars(stmt.order_by(Section.order_index.asc())).all()


def create_section(db: Session, payload: SectionCreate) -> Section:
    data = payload.model_dump(exclude={"metadata"})
    section = Section(**data, meta=dict(payload.metadata))
    db.add(section)
    db.flush()
    return section


def update_section(db: Session, section: Section, patch: SectionUpdate) -> Section:
    """
    Every UPDATE on sections makes the database append a SectionVersion
    and recompute search_vector; nothing to do here for either.
    """
    changes = patch.model_dump(exclude_unset=True)
    if "metadata" in changes:
        section.meta = dict(changes.pop("metadata") or {})
    for key, value in changes.items():
        setattr(section, key, value)
    db.flush()
    db.refresh(section)
    return section


def delete_section(db: Session, section: Section) -> None:
    db.delete(section)
    db.flush()

# app/services/document_service.py
from __future__ import annotations

from typing import Optional, Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.content import Document
from app.schemas.content import DocumentCreate, DocumentUpdate


def list_documents(db: Session) -> Sequence[Document]:
    return db.scalars(select(Document).order_by(Document.created_at.desc())).all()


def get_document(db: Session, document_id: UUID) -> Optional[Document]:
    return db.get(Document, document_id)


def get_document_by_slug(db: Session, slug: str) -> Document:
    """
    Exactly one row or an error: NoResultFound when absent,
    MultipleResultsFound if the uniqueness invariant was ever broken.
    """
    return db.execute(select(Document).where(Document.slug == slug)).scalar_one()


def list_documents_by_domain(db: Session, domain: str) -> Sequence[Document]:
    return db.scalars(
        select(Document).where(Document.domain == domain).order_by(Document.created_at.desc())
    ).all()


def create_document(db: Session, payload: DocumentCreate) -> Document:
    data = payload.model_dump(exclude={"metadata"})
    document = Document(**data, meta=dict(payload.metadata))
    db.add(document)
    db.flush()
    return document


def update_document(db: Session, document: Document, patch: DocumentUpdate) -> Document:
    changes = patch.model_dump(exclude_unset=True)
    if "metadata" in changes:
        document.meta = dict(changes.pop("metadata") or {})
    for key, value in changes.items():
        setattr(document, key, value)
    db.flush()
    db.refresh(document)
    return document


def delete_document(db: Session, document: Document) -> None:
    # sections, versions, embeddings, assets and cache rows cascade in the database
    db.delete(document)
    db.flush()

# app/api/v1/endpoints/documents.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Query, Response
from sqlalchemy.exc import IntegrityError, MultipleResultsFound, NoResultFound
from sqlalchemy.orm import Session

from app.api.deps.auth import require_read_access, require_service_role
from app.db.session import get_db
from app.models.content import Document
from app.schemas.content import DocumentCreate, DocumentOut, DocumentUpdate, SectionOut
from app.services.document_service import (
    create_document, delete_document, get_document, get_document_by_slug,
    list_documents, list_documents_by_domain, update_document,
)
from app.services.section_service import get_section_by_slugs, list_sections_for_document

router = APIRouter()


def _get_document_or_404(db: Session, document_id: UUID) -> Document:
    document = get_document(db, document_id)
    if not document:
        raise HTTPException(status_code=404, detail="Document not found")
    return document


@router.get(
    "/documents",
    response_model=List[DocumentOut],
    dependencies=[Depends(require_read_access)],
)
def list_documents_endpoint(
    domain: Optional[str] = Query(None),
    db: Session = Depends(get_db),
):
    if domain:
        return list_documents_by_domain(db, domain)
    return list_documents(db)


@router.post(
    "/documents",
    response_model=DocumentOut,
    status_code=201,
    dependencies=[Depends(require_service_role)],
)
def create_document_endpoint(payload: DocumentCreate, db: Session = Depends(get_db)):
    try:
        document = create_document(db, payload)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Document slug '{payload.slug}' already exists")
    db.refresh(document)
    return document


@router.get(
    "/documents/by-slug/{slug}",
    response_model=DocumentOut,
    dependencies=[Depends(require_read_access)],
)
def get_document_by_slug_endpoint(slug: str, db: Session = Depends(get_db)):
    try:
        return get_document_by_slug(db, slug)
    except NoResultFound:
        raise HTTPException(status_code=404, detail="Document not found")
    except MultipleResultsFound:
        raise HTTPException(status_code=409, detail="Document slug is not unique")


@router.get(
    "/documents/{document_id}",
    response_model=DocumentOut,
    dependencies=[Depends(require_read_access)],
)
def get_document_endpoint(document_id: UUID, db: Session = Depends(get_db)):
    return _get_document_or_404(db, document_id)


@router.patch(
    "/documents/{document_id}",
    response_model=DocumentOut,
    dependencies=[Depends(require_service_role)],
)
def update_document_endpoint(document_id: UUID, patch: DocumentUpdate, db: Session = Depends(get_db)):
    document = _get_document_or_404(db, document_id)
    try:
        update_document(db, document, patch)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Document slug already exists")
    db.refresh(document)
    return document


@router.delete(
    "/documents/{document_id}",
    status_code=204,
    dependencies=[Depends(require_service_role)],
)
def delete_document_endpoint(document_id: UUID, db: Session = Depends(get_db)):
    document = _get_document_or_404(db, document_id)
    delete_document(db, document)
    db.commit()
    return Response(status_code=204)


@router.get(
    "/documents/{document_id}/sections",
    response_model=List[SectionOut],
    dependencies=[Depends(require_read_access)],
)
def list_document_sections_endpoint(document_id: UUID, db: Session = Depends(get_db)):
    _get_document_or_404(db, document_id)
    return list_sections_for_document(db, document_id)


@router.get(
    "/documents/{document_slug}/sections/{section_slug}",
    response_model=SectionOut,
    dependencies=[Depends(require_read_access)],
)
def get_section_by_slugs_endpoint(document_slug: str, section_slug: str, db: Session = Depends(get_db)):
    try:
        return get_section_by_slugs(db, document_slug=document_slug, section_slug=section_slug)
    except NoResultFound:
        raise HTTPException(status_code=404, detail="Section not found")

# app/api/v1/endpoints/sections.py
# Sections, full-text search, role visibility and version history
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Response
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps.auth import require_read_access, require_service_role
from app.core.constants import CHAT_QUERY_MAX_LENGTH, SEARCH_RESULTS_LIMIT
from app.db.session import get_db
from app.models.content import Section
from app.schemas.content import (
    SectionCreate, SectionOut, SectionSearchHit, SectionUpdate, SectionVersionOut,
)
from app.services.document_service import get_document
from app.services.events_service import publish_section_updated, section_updated_payload
from app.services.section_service import (
    create_section, delete_section, get_section, list_sections_by_role,
    search_sections, update_section,
)
from app.services.versioning_service import get_section_version, list_versions_for_section

router = APIRouter()


def _get_section_or_404(db: Session, section_id: UUID) -> Section:
    section = get_section(db, section_id)
    if not section:
        raise HTTPException(status_code=404, detail="Section not found")
    return section


@router.post(
    "/sections",
    response_model=SectionOut,
    status_code=201,
    dependencies=[Depends(require_service_role)],
)
def create_section_endpoint(payload: SectionCreate, db: Session = Depends(get_db)):
    if not get_document(db, payload.document_id):
        raise HTTPException(status_code=404, detail="Document not found")
    try:
        section = create_section(db, payload)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail=f"Section slug '{payload.slug}' already exists in this document")
    db.refresh(section)
    return section


@router.get(
    "/sections/search",
    response_model=List[SectionSearchHit],
    dependencies=[Depends(require_read_access)],
)
def search_sections_endpoint(
    q: str = Query(..., min_length=1, max_length=CHAT_QUERY_MAX_LENGTH),
    document_id: Optional[UUID] = Query(None),
    limit: int = Query(SEARCH_RESULTS_LIMIT, ge=1, le=SEARCH_RESULTS_LIMIT),
    db: Session = Depends(get_db),
):
    return search_sections(db, q, document_id=document_id, limit=limit)


@router.get(
    "/sections/by-role/{role}",
    response_model=List[SectionOut],
    dependencies=[Depends(require_read_access)],
)
def list_sections_by_role_endpoint(
    role: str,
    document_id: Optional[UUID] = Query(None),
    db: Session = Depends(get_db),
):
    return list_sections_by_role(db, role, document_id=document_id)


@router.get(
    "/sections/{section_id}",
    response_model=SectionOut,
    dependencies=[Depends(require_read_access)],
)
def get_section_endpoint(section_id: UUID, db: Session = Depends(get_db)):
    return _get_section_or_404(db, section_id)


@router.patch(
    "/sections/{section_id}",
    response_model=SectionOut,
    dependencies=[Depends(require_service_role)],
)
def update_section_endpoint(
    section_id: UUID,
    patch: SectionUpdate,
    background_tasks: BackgroundTasks,
    db: Session = Depends(get_db),
):
    section = _get_section_or_404(db, section_id)
    try:
        update_section(db, section, patch)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Section slug already exists in this document")
    db.refresh(section)

    # re-embedding is done by an external worker
    background_tasks.add_task(publish_section_updated, section_updated_payload(section))
    return section


@router.delete(
    "/sections/{section_id}",
    status_code=204,
    dependencies=[Depends(require_service_role)],
)
def delete_section_endpoint(section_id: UUID, db: Session = Depends(get_db)):
    section = _get_section_or_404(db, section_id)
    delete_section(db, section)
    db.commit()
    return Response(status_code=204)


@router.get(
    "/sections/{section_id}/versions",
    response_model=List[SectionVersionOut],
    dependencies=[Depends(require_read_access)],
)
def list_section_versions_endpoint(section_id: UUID, db: Session = Depends(get_db)):
    _get_section_or_404(db, section_id)
    return list_versions_for_section(db, section_id=section_id)


@router.get(
    "/sections/{section_id}/versions/{version_number}",
    response_model=SectionVersionOut,
    dependencies=[Depends(require_read_access)],
)
def get_section_version_endpoint(section_id: UUID, version_number: int, db: Session = Depends(get_db)):
    version = get_section_version(db, section_id=section_id, version_number=version_number)
    if not version:
        raise HTTPException(status_code=404, detail="Version not found")
    return version

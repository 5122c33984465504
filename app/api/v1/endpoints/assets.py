# app/api/v1/endpoints/assets.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile
from sqlalchemy.orm import Session

from app.api.deps.auth import require_read_access, require_service_role
from app.core.settings import settings
from app.db.session import get_db
from app.schemas.content import AssetCreate, AssetIn, AssetOut
from app.services import firebase_storage
from app.services.asset_service import create_asset, list_assets_for_document
from app.services.document_service import get_document

router = APIRouter()


def _require_document(db: Session, document_id: UUID) -> None:
    if not get_document(db, document_id):
        raise HTTPException(status_code=404, detail="Document not found")


@router.get(
    "/documents/{document_id}/assets",
    response_model=List[AssetOut],
    dependencies=[Depends(require_read_access)],
)
def list_assets_endpoint(document_id: UUID, db: Session = Depends(get_db)):
    _require_document(db, document_id)
    return list_assets_for_document(db, document_id)


@router.post(
    "/documents/{document_id}/assets",
    response_model=AssetOut,
    status_code=201,
    dependencies=[Depends(require_service_role)],
)
def create_asset_endpoint(document_id: UUID, payload: AssetIn, db: Session = Depends(get_db)):
    """Registers an object that is already in storage."""
    _require_document(db, document_id)
    asset = create_asset(db, AssetCreate(document_id=document_id, **payload.model_dump()))
    db.commit()
    db.refresh(asset)
    return asset


@router.post(
    "/documents/{document_id}/assets/upload",
    response_model=AssetOut,
    status_code=201,
    dependencies=[Depends(require_service_role)],
)
def upload_asset_endpoint(
    document_id: UUID,
    file: UploadFile = File(...),
    alt_text: Optional[str] = Form(None),
    db: Session = Depends(get_db),
):
    _require_document(db, document_id)

    content_type = file.content_type or "application/octet-stream"
    max_bytes = int(settings.UPLOAD_MAX_MB) * 1024 * 1024
    file.file.seek(0, 2)
    size = file.file.tell()
    file.file.seek(0)
    if size > max_bytes:
        raise HTTPException(status_code=413, detail=f"File exceeds {settings.UPLOAD_MAX_MB} MB")

    if not firebase_storage.is_firebase_configured():
        raise HTTPException(status_code=503, detail="Asset storage is not configured")

    stored = firebase_storage.upload_asset(
        file.file,
        document_id=document_id,
        filename=file.filename or "file",
        content_type=content_type,
    )
    asset = create_asset(
        db,
        AssetCreate(
            document_id=document_id,
            filename=file.filename or "file",
            storage_path=stored.storage_path,
            cdn_url=stored.cdn_url,
            mime_type=content_type,
            size_bytes=size,
            alt_text=alt_text,
        ),
    )
    db.commit()
    db.refresh(asset)
    return asset

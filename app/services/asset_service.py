# app/services/asset_service.py
from __future__ import annotations

from typing import Sequence
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.content import Asset
from app.schemas.content import AssetCreate


def list_assets_for_document(db: Session, document_id: UUID) -> Sequence[Asset]:
    return db.scalars(
        select(Asset).where(Asset.document_id == document_id).order_by(Asset.created_at.desc())
    ).all()


def create_asset(db: Session, payload: AssetCreate) -> Asset:
    data = payload.model_dump(exclude={"metadata"})
    asset = Asset(**data, meta=dict(payload.metadata))
    db.add(asset)
    db.flush()
    return asset

# app/services/versioning_service.py
from __future__ import annotations

from typing import List, Optional
from uuid import UUID

from sqlalchemy import select, func
from sqlalchemy.orm import Session

from app.models.content import SectionVersion

# Rows come only from save_section_version_trigger (AFTER UPDATE ON sections).


def list_versions_for_section(db: Session, *, section_id: UUID) -> List[SectionVersion]:
    """
    Snapshots of a section in ascending version_number order.
    """
    return list(
        db.scalars(
            select(SectionVersion)
            .where(SectionVersion.section_id == section_id)
            .order_by(SectionVersion.version_number.asc())
        )
    )


def get_section_version(db: Session, *, section_id: UUID, version_number: int) -> Optional[SectionVersion]:
    return db.scalar(
        select(SectionVersion).where(
            SectionVersion.section_id == section_id,
            SectionVersion.version_number == version_number,
        )
    )


def latest_version_number(db: Session, *, section_id: UUID) -> int:
    """0 when the section was never updated."""
    max_idx = db.scalar(
        select(func.max(SectionVersion.version_number)).where(SectionVersion.section_id == section_id)
    )
    return 0 if max_idx is None else int(max_idx)

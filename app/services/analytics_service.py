# app/services/analytics_service.py
from __future__ import annotations

from typing import Sequence

from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.analytics import AnalyticsEvent
from app.schemas.analytics import AnalyticsEventCreate


def track_event(db: Session, payload: AnalyticsEventCreate) -> AnalyticsEvent:
    event = AnalyticsEvent(
        event_type=payload.event_type,
        document_id=payload.document_id,
        section_id=payload.section_id,
        user_role=payload.user_role,
        session_id=payload.session_id,
        meta=dict(payload.metadata),
    )
    db.add(event)
    db.flush()
    return event


def list_events_by_type(
    db: Session,
    event_type: str,
    *,
    limit: int = 100,
    offset: int = 0,
) -> Sequence[AnalyticsEvent]:
    stmt = (
        select(AnalyticsEvent)
        .where(AnalyticsEvent.event_type == event_type)
        .order_by(AnalyticsEvent.created_at.desc(), AnalyticsEvent.id.desc())
        .limit(limit)
        .offset(offset)
    )
    return db.scalars(stmt).all()

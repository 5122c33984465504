# app/api/v1/endpoints/analytics.py
from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from app.api.deps.auth import require_read_access, require_service_role
from app.db.session import get_db
from app.schemas.analytics import AnalyticsEventCreate, AnalyticsEventListOut, AnalyticsEventOut
from app.services.analytics_service import list_events_by_type, track_event

router = APIRouter()


# public clients only hold the anon key, so tracking accepts it
@router.post(
    "/analytics/events",
    response_model=AnalyticsEventOut,
    status_code=201,
    dependencies=[Depends(require_read_access)],
)
def track_event_endpoint(payload: AnalyticsEventCreate, db: Session = Depends(get_db)):
    try:
        event = track_event(db, payload)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=409, detail="Unknown document or section")
    db.refresh(event)
    return event


@router.get(
    "/analytics/events",
    response_model=AnalyticsEventListOut,
    dependencies=[Depends(require_service_role)],
)
def list_events_endpoint(
    event_type: str = Query(..., min_length=1),
    limit: int = Query(100, ge=1, le=500),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
):
    items = list_events_by_type(db, event_type, limit=limit, offset=offset)
    return {"limit": limit, "offset": offset, "items": items}

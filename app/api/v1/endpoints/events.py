# app/api/v1/endpoints/events.py
from __future__ import annotations

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Request
from pydantic import ValidationError
from sqlalchemy.orm import Session

from app.core.settings import config
from app.db.session import get_db
from app.schemas.events import InboundEvent, InboundEventOut, SectionUpdatedData
from app.services.chat_cache_service import purge_for_document
from app.services.events_service import SECTION_UPDATED, verify_signature

logger = logging.getLogger(__name__)

router = APIRouter()

SIGNATURE_HEADER = "X-Inngest-Signature"


async def _raw_body(request: Request) -> bytes:
    return await request.body()


@router.post(
    "/events/task-queue",
    response_model=InboundEventOut,
    # authenticated by the signature header, not an API key
    openapi_extra={"security": []},
)
def receive_task_queue_event(
    body: bytes = Depends(_raw_body),
    signature: Optional[str] = Header(None, alias=SIGNATURE_HEADER),
    db: Session = Depends(get_db),
):
    """
    Inbound calls from the task queue. A `docx/section.updated` event drops
    the cached chat answers of the section's document; other names are
    acknowledged and ignored.
    """
    if not verify_signature(body, signature, config.queue.signing_key):
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        event = InboundEvent.model_validate_json(body)
        data = SectionUpdatedData.model_validate(event.data) if event.name == SECTION_UPDATED else None
    except ValidationError:
        raise HTTPException(status_code=422, detail="Invalid event payload")

    if data is None:
        logger.info("Ignoring task-queue event %s", event.name)
        return InboundEventOut(name=event.name, handled=False)

    purged = purge_for_document(db, data.document_id)
    db.commit()
    logger.info("Section %s updated; purged %s cached answers", data.section_id, purged)
    return InboundEventOut(name=event.name, handled=True, purged=purged)

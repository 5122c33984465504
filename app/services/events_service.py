# app/services/events_service.py
# Task-queue (Inngest) events: outbound send, inbound signature check
from __future__ import annotations

import hmac
import hashlib
import logging
import time
from typing import Any, Dict, Optional

import httpx

from app.core.settings import config
from app.services.embedding_service import compute_content_hash

logger = logging.getLogger(__name__)

SECTION_UPDATED = "docx/section.updated"


def _event_url(base_url: str, event_key: str) -> str:
    return f"{base_url.rstrip('/')}/e/{event_key}"


def send_event(
    name: str,
    data: Dict[str, Any],
    *,
    transport: Optional[httpx.BaseTransport] = None,
) -> bool:
    """
    One POST, no retries. Returns True on a 2xx.
    Disabled (returns False without any I/O) unless TASK_QUEUE_ENABLED.
    """
    queue = config.queue
    if not queue.enabled:
        logger.debug("Task queue disabled, dropping event %s", name)
        return False

    body = {"name": name, "data": data, "ts": int(time.time() * 1000)}
    url = _event_url(queue.base_url, queue.event_key)
    try:
        with httpx.Client(timeout=queue.timeout_seconds, transport=transport) as client:
            resp = client.post(url, json=body)
    except httpx.HTTPError as exc:
        logger.warning("Event %s not delivered: %s", name, exc)
        return False

    if not 200 <= resp.status_code < 300:
        logger.warning("Event %s rejected with HTTP %s", name, resp.status_code)
        return False
    logger.info("Event %s sent", name)
    return True


def _sign(signing_key: str, timestamp: str, body_bytes: bytes) -> str:
    # HMAC-SHA256 over the raw body followed by the timestamp
    msg = body_bytes + timestamp.encode("utf-8")
    return hmac.new(signing_key.encode("utf-8"), msg, hashlib.sha256).hexdigest()


def sign_body(body: bytes, signing_key: str, *, timestamp: Optional[int] = None) -> str:
    """Header value `t=<ts>&s=<hex>` for `body`."""
    ts = str(timestamp if timestamp is not None else int(time.time()))
    return f"t={ts}&s={_sign(signing_key, ts, body)}"


def verify_signature(
    body: bytes,
    header: Optional[str],
    signing_key: str,
    *,
    max_age_seconds: int = 300,
    now: Optional[int] = None,
) -> bool:
    if not header:
        return False
    parts: Dict[str, str] = {}
    for chunk in header.split("&"):
        key, sep, value = chunk.partition("=")
        if sep:
            parts[key.strip()] = value.strip()

    ts, sig = parts.get("t"), parts.get("s")
    if not ts or not sig or not ts.isdigit():
        return False
    current = now if now is not None else int(time.time())
    if abs(current - int(ts)) > max_age_seconds:
        return False
    return hmac.compare_digest(_sign(signing_key, ts, body), sig)


def section_updated_payload(section) -> Dict[str, Any]:
    return {
        "section_id": str(section.id),
        "document_id": str(section.document_id),
        "content_hash": compute_content_hash(section.content_mdx),
    }


def publish_section_updated(section_data: Dict[str, Any]) -> None:
    """BackgroundTasks entrypoint; runs after the response is sent."""
    send_event(SECTION_UPDATED, section_data)

# app/seeds/document_loader.py
# Loads a document and its sections from a JSON file.
from __future__ import annotations

import json
import logging
import pathlib
from dataclasses import dataclass
from typing import Any, Dict, List

from pydantic import TypeAdapter
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.models.content import Document, Section
from app.schemas.content import DocumentCreate, DocumentUpdate, SectionBase, SectionCreate, SectionUpdate
from app.services.document_service import create_document, update_document
from app.services.section_service import create_section, update_section

logger = logging.getLogger(__name__)


class _SectionIn(SectionBase):
    metadata: Dict[str, Any] = {}


_sections_adapter = TypeAdapter(List[_SectionIn])


@dataclass(frozen=True)
class LoadResult:
    document_id: str
    document_created: bool
    sections_created: int
    sections_updated: int
    sections_unchanged: int


def _read_json(path: pathlib.Path) -> dict:
    if not path.exists():
        raise FileNotFoundError(f"Document file does not exist: {path.as_posix()}")
    txt = path.read_bytes().decode("utf-8-sig")  # tolerate BOM
    data = json.loads(txt)
    if not isinstance(data, dict):
        raise ValueError(f"{path.name} must be a JSON object.")
    return data


def _section_changes(section: Section, incoming: _SectionIn) -> Dict[str, Any]:
    changes: Dict[str, Any] = {}
    for key in ("title", "order_index", "level", "content_mdx", "lock_mode"):
        value = getattr(incoming, key)
        if getattr(section, key) != value:
            changes[key] = value
    if list(section.roles or []) != incoming.roles:
        changes["roles"] = incoming.roles
    if dict(section.meta or {}) != incoming.metadata:
        changes["metadata"] = incoming.metadata
    return changes


def load_document_data(db: Session, data: dict) -> LoadResult:
    """
    Upserts by slug: the document by its slug, sections by (document, slug).
    Only sections whose fields differ are updated, so re-loading an
    unchanged file creates no new versions.
    No commit/rollback here: the caller owns the transaction.
    """
    if "document" not in data:
        raise ValueError("Missing 'document' object")
    doc_in = DocumentCreate.model_validate(data["document"])
    sections_in = _sections_adapter.validate_python(data.get("sections") or [])

    document = db.scalar(select(Document).where(Document.slug == doc_in.slug))
    created = document is None
    if created:
        document = create_document(db, doc_in)
    else:
        update_document(db, document, DocumentUpdate(**doc_in.model_dump(exclude={"slug"})))

    existing = {
        s.slug: s for s in db.scalars(select(Section).where(Section.document_id == document.id))
    }
    n_created = n_updated = n_same = 0
    for item in sections_in:
        section = existing.get(item.slug)
        if section is None:
            create_section(db, SectionCreate(document_id=document.id, **item.model_dump()))
            n_created += 1
            continue
        changes = _section_changes(section, item)
        if changes:
            update_section(db, section, SectionUpdate(**changes))
            n_updated += 1
        else:
            n_same += 1

    logger.info(
        "Loaded document %s: %d created, %d updated, %d unchanged sections",
        doc_in.slug, n_created, n_updated, n_same,
    )
    return LoadResult(
        document_id=str(document.id),
        document_created=created,
        sections_created=n_created,
        sections_updated=n_updated,
        sections_unchanged=n_same,
    )


def load_document_file(db: Session, file_path: str) -> LoadResult:
    return load_document_data(db, _read_json(pathlib.Path(file_path)))

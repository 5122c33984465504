# app/services/firebase_storage.py
# Asset binaries live in Firebase Storage; rows in `assets` point at them.
from __future__ import annotations

import logging
import os
import re
import urllib.parse
import uuid
from typing import BinaryIO, NamedTuple, Optional
from uuid import UUID

import firebase_admin
from firebase_admin import credentials, storage

from app.core.settings import settings

logger = logging.getLogger(__name__)

_FIREBASE_APP = None
_UNSAFE = re.compile(r"[^A-Za-z0-9._-]+")


class StoredObject(NamedTuple):
    storage_path: str
    cdn_url: str


class StorageNotConfigured(RuntimeError):
    pass


def _normalize_bucket(bucket: str) -> str:
    if bucket.startswith("gs://"):
        return bucket[5:]
    return bucket


def is_firebase_configured() -> bool:
    cred_path = settings.FIREBASE_CREDENTIALS_PATH or ""
    bucket = settings.FIREBASE_STORAGE_BUCKET or ""
    if not cred_path or not bucket:
        return False
    return os.path.exists(cred_path)


def _get_firebase_app():
    global _FIREBASE_APP
    if _FIREBASE_APP is not None:
        return _FIREBASE_APP
    try:
        _FIREBASE_APP = firebase_admin.get_app()
        return _FIREBASE_APP
    except ValueError:
        pass

    if not is_firebase_configured():
        raise StorageNotConfigured("FIREBASE_CREDENTIALS_PATH / FIREBASE_STORAGE_BUCKET are not usable")

    cred = credentials.Certificate(settings.FIREBASE_CREDENTIALS_PATH)
    _FIREBASE_APP = firebase_admin.initialize_app(
        cred,
        {"storageBucket": _normalize_bucket(settings.FIREBASE_STORAGE_BUCKET or "")},
    )
    return _FIREBASE_APP


def asset_storage_path(document_id: UUID, filename: str) -> str:
    """documents/<document id>/<random>-<sanitized filename>"""
    name = _UNSAFE.sub("-", os.path.basename(filename or "")).strip("-.") or "file"
    return f"documents/{document_id}/{uuid.uuid4().hex[:12]}-{name}"


def upload_asset(
    file_obj: BinaryIO,
    *,
    document_id: UUID,
    filename: str,
    content_type: Optional[str],
) -> StoredObject:
    app = _get_firebase_app()
    bucket = storage.bucket(app=app)

    dest_path = asset_storage_path(document_id, filename)
    token = uuid.uuid4().hex
    blob = bucket.blob(dest_path)
    blob.metadata = {"firebaseStorageDownloadTokens": token}
    blob.upload_from_file(file_obj, content_type=(content_type or "application/octet-stream"))
    logger.info("Uploaded asset %s for document %s", dest_path, document_id)

    bucket_name = _normalize_bucket(settings.FIREBASE_STORAGE_BUCKET or "")
    encoded_path = urllib.parse.quote(dest_path, safe="")
    return StoredObject(
        storage_path=dest_path,
        cdn_url=f"https://firebasestorage.googleapis.com/v0/b/{bucket_name}/o/{encoded_path}?alt=media&token={token}",
    )

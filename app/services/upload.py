"""Direct-to-storage upload hand-off: presigned PUT targets and metadata commit."""

import logging
import re
import secrets
import time
from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.recording import PORTAL_SENTINEL_NAME
from app.services.record_store import RecordStore, RecordStoreError
from app.services.recording import get_recording_service
from app.services.result import ErrorKind, ServiceResult
from app.services.storage import StorageConfigError, StorageError, get_object_store

logger = logging.getLogger("clip_portal")

EXTENSIONS_BY_MIME = {
    "video/webm": "webm",
    "video/mp4": "mp4",
    "video/quicktime": "mov",
    "video/x-matroska": "mkv",
}
DEFAULT_EXTENSION = "webm"

MAX_NAME_LENGTH = 256  # matches Recording.name
MAX_KEY_NAME_LENGTH = 64
KEY_SUFFIX_BYTES = 4

OBJECT_KEY_PATTERN = re.compile(r"^recording-\d+-[A-Za-z0-9]{1,64}-[0-9a-f]{8}\.[a-z0-9]+$")
_NON_ALNUM = re.compile(r"[^A-Za-z0-9]")


@dataclass
class UploadTarget:
    """Where the browser should PUT the video bytes."""

    put_url: str
    object_key: str
    expires_in: int


def validate_display_name(display_name: str | None) -> str | None:
    """Validate a respondent-supplied name. Returns error message or None if valid."""
    if not display_name or not display_name.strip():
        return "Name is required"
    if len(display_name) > MAX_NAME_LENGTH:
        return f"Name is too long (maximum {MAX_NAME_LENGTH} characters)"
    if display_name == PORTAL_SENTINEL_NAME:
        return "Name is reserved"
    return None


def sanitize_name(display_name: str) -> str:
    """Reduce a free-text name to a bounded run of alphanumerics for use inside an object key."""
    return _NON_ALNUM.sub("", display_name or "")[:MAX_KEY_NAME_LENGTH] or "anonymous"


def extension_for(content_type: str) -> str:
    """File extension for a MIME type, ignoring codec parameters."""
    mime = content_type.split(";", 1)[0].strip().lower()
    return EXTENSIONS_BY_MIME.get(mime, DEFAULT_EXTENSION)


def build_object_key(
    display_name: str, content_type: str, timestamp_ms: int | None = None, suffix: str | None = None
) -> str:
    """``recording-<epoch ms>-<sanitized name>-<random hex>.<ext>``."""
    if timestamp_ms is None:
        timestamp_ms = int(time.time() * 1000)
    if suffix is None:
        suffix = secrets.token_hex(KEY_SUFFIX_BYTES)
    return f"recording-{timestamp_ms}-{sanitize_name(display_name)}-{suffix}.{extension_for(content_type)}"


class UploadService:
    """Issues presigned PUT targets and records metadata once the browser confirms."""

    def __init__(self) -> None:
        self.put_url_ttl = get_settings().UPLOAD_URL_EXPIRE_SECONDS

    def request_upload_target(self, display_name: str, content_type: str | None) -> ServiceResult:
        """Mint a short-lived PUT URL for a new, uniquely named object.

        The name is validated here as well as on commit so a respondent never
        uploads bytes that could not be recorded.
        """
        store = get_object_store()
        try:
            store.ensure_configured()
        except StorageConfigError as e:
            logger.error("Upload target requested but storage is not configured: %s", e)
            return ServiceResult.fail(ErrorKind.CONFIGURATION, str(e))

        error = validate_display_name(display_name)
        if error:
            return ServiceResult.fail(ErrorKind.VALIDATION, error)
        if not content_type or not content_type.strip():
            return ServiceResult.fail(ErrorKind.VALIDATION, "Content type is required")

        key = build_object_key(display_name, content_type)
        try:
            put_url = store.presign("PUT", key, self.put_url_ttl, content_type=content_type)
        except StorageError as e:
            logger.error("Presigning upload for %s failed: %s", key, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        logger.info("Issued upload target %s", key)
        return ServiceResult.ok(UploadTarget(put_url=put_url, object_key=key, expires_in=self.put_url_ttl))

    def commit_metadata(self, db: Session, display_name: str, object_key: str) -> ServiceResult:
        """Record an uploaded object. The raw display name is stored as given.

        The object must already exist in the bucket; no row is written otherwise.
        """
        error = validate_display_name(display_name)
        if error:
            return ServiceResult.fail(ErrorKind.VALIDATION, error)
        if not OBJECT_KEY_PATTERN.match(object_key or ""):
            return ServiceResult.fail(ErrorKind.VALIDATION, "Invalid object key")

        store = get_object_store()
        try:
            exists = store.object_exists(object_key)
        except StorageConfigError as e:
            return ServiceResult.fail(ErrorKind.CONFIGURATION, str(e))
        except StorageError as e:
            logger.error("Checking upload %s failed: %s", object_key, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        if not exists:
            logger.warning("Commit for %s rejected: object was never uploaded", object_key)
            return ServiceResult.fail(ErrorKind.VALIDATION, "Upload not found")

        try:
            row = RecordStore(db).insert(display_name, store.canonical_url(object_key))
        except RecordStoreError as e:
            logger.error("Saving metadata for %s failed: %s", object_key, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        logger.info("Recording %s committed for %s", row.id, object_key)
        return ServiceResult.ok(get_recording_service().to_view(row))


_upload_service: UploadService | None = None


def get_upload_service() -> UploadService:
    """Get singleton upload service instance."""
    global _upload_service
    if _upload_service is None:
        _upload_service = UploadService()
    return _upload_service

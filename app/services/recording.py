"""Recording lifecycle: listing, viewing, renewal and deletion."""

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.recording import PORTAL_SENTINEL_NAME, Recording
from app.services.record_store import RecordStore, RecordStoreError
from app.services.result import ErrorKind, ServiceResult
from app.services.storage import StorageConfigError, StorageError, get_object_store

logger = logging.getLogger("clip_portal")


@dataclass
class RecordingView:
    """Recording as returned to callers, with its derived expiry state."""

    id: int
    name: str
    url: str
    created_at: datetime
    expires_at: datetime
    is_expired: bool
    share_path: str
    view_url: str | None = None


@dataclass
class ExpiredRecording:
    """What remains visible of a recording past its window: the name only."""

    name: str


class RecordingService:
    """Owns the list of submitted recordings and their expiry state."""

    def __init__(self) -> None:
        settings = get_settings()
        self.window = timedelta(days=settings.EXPIRY_WINDOW_DAYS)
        self.view_url_ttl = settings.VIEW_URL_EXPIRE_SECONDS

    def is_expired(self, row: Recording, now: datetime | None = None) -> bool:
        now = now or datetime.utcnow()
        return now - row.created_at > self.window

    def to_view(self, row: Recording, now: datetime | None = None) -> RecordingView:
        return RecordingView(
            id=row.id,
            name=row.name,
            url=row.url,
            created_at=row.created_at,
            expires_at=row.created_at + self.window,
            is_expired=self.is_expired(row, now),
            share_path=f"/v/{row.id}",
        )

    def list_recordings(self, db: Session) -> ServiceResult:
        """All recordings, newest first, each flagged expired or not."""
        try:
            rows = RecordStore(db).list_recordings()
        except RecordStoreError as e:
            logger.error("Listing recordings failed: %s", e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))
        now = datetime.utcnow()
        return ServiceResult.ok([self.to_view(row, now) for row in rows])

    def get_recording(self, db: Session, record_id: int) -> ServiceResult:
        """Fetch one recording with a freshly signed view URL.

        Expired recordings come back as a LINK_EXPIRED failure carrying only
        the name.
        """
        try:
            row = RecordStore(db).get(record_id)
        except RecordStoreError as e:
            logger.error("Fetching recording %s failed: %s", record_id, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        if row is None or row.name == PORTAL_SENTINEL_NAME:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Recording not found")

        if self.is_expired(row):
            return ServiceResult.fail(ErrorKind.EXPIRED, "Recording link has expired", ExpiredRecording(name=row.name))

        store = get_object_store()
        try:
            view_url = store.presign("GET", store.key_from_url(row.url), self.view_url_ttl)
        except StorageConfigError as e:
            return ServiceResult.fail(ErrorKind.CONFIGURATION, str(e))
        except StorageError as e:
            logger.error("Signing view URL for recording %s failed: %s", record_id, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        view = self.to_view(row)
        view.view_url = view_url
        return ServiceResult.ok(view)

    def renew(self, db: Session, record_id: int) -> ServiceResult:
        """Give a recording a fresh window by re-inserting it under a new id.

        The new row is written before the old one is removed; a failed removal
        leaves a harmless duplicate and is only logged.
        """
        store = RecordStore(db)
        try:
            row = store.get(record_id)
        except RecordStoreError as e:
            logger.error("Fetching recording %s for renewal failed: %s", record_id, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        if row is None or row.name == PORTAL_SENTINEL_NAME:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Recording not found")

        object_store = get_object_store()
        try:
            renewed = store.insert(row.name, object_store.strip_signing(row.url))
        except RecordStoreError as e:
            logger.error("Renewal insert for recording %s failed: %s", record_id, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        try:
            store.delete(record_id)
        except RecordStoreError as e:
            logger.warning("Renewed recording %s as %s but could not remove the old row: %s", record_id, renewed.id, e)

        logger.info("Renewed recording %s as %s", record_id, renewed.id)
        return ServiceResult.ok(self.to_view(renewed))

    def delete(self, db: Session, record_id: int) -> ServiceResult:
        """Delete the stored object, then the row.

        An object-store failure aborts before the row is touched, so a row
        never outlives its object.
        """
        store = RecordStore(db)
        try:
            row = store.get(record_id)
        except RecordStoreError as e:
            logger.error("Fetching recording %s for deletion failed: %s", record_id, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        if row is None or row.name == PORTAL_SENTINEL_NAME:
            return ServiceResult.fail(ErrorKind.NOT_FOUND, "Recording not found")

        object_store = get_object_store()
        key = object_store.key_from_url(row.url)
        try:
            object_store.delete_object(key)
        except StorageConfigError as e:
            return ServiceResult.fail(ErrorKind.CONFIGURATION, str(e))
        except StorageError as e:
            logger.error("Deleting object %s for recording %s failed, keeping row: %s", key, record_id, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        try:
            store.delete(record_id)
        except RecordStoreError as e:
            logger.error("Object %s deleted but row %s could not be removed: %s", key, record_id, e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        logger.info("Deleted recording %s (%s)", record_id, key)
        return ServiceResult.ok()


_recording_service: RecordingService | None = None


def get_recording_service() -> RecordingService:
    """Get singleton recording service instance."""
    global _recording_service
    if _recording_service is None:
        _recording_service = RecordingService()
    return _recording_service

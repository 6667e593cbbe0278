"""Portal link lifecycle: slug rotation and access checks."""

import hmac
import logging
import secrets
from dataclasses import dataclass
from datetime import datetime, timedelta

from sqlalchemy.orm import Session

from app.config import get_settings
from app.models.recording import PORTAL_SENTINEL_NAME
from app.services.record_store import RecordStore, RecordStoreError
from app.services.result import ErrorKind, ServiceResult

logger = logging.getLogger("clip_portal")

SLUG_BYTES = 8


@dataclass
class PortalState:
    """Freshly rotated portal."""

    slug: str
    created_at: datetime
    expires_at: datetime


@dataclass
class PortalAccess:
    """Outcome of an access check. Slug and expiry are set whenever a portal exists."""

    allowed: bool
    expires_at: datetime | None = None
    active_slug: str | None = None


class PortalService:
    """Owns the single active portal slug stored in the sentinel row."""

    def __init__(self) -> None:
        self.window = timedelta(days=get_settings().EXPIRY_WINDOW_DAYS)

    def rotate(self, db: Session) -> ServiceResult:
        """Replace the active portal with a new slug. Older links stop working at once."""
        store = RecordStore(db)
        slug = secrets.token_hex(SLUG_BYTES)
        try:
            # Delete before insert: a failure in between leaves no portal, which denies access
            removed = store.delete_by_name(PORTAL_SENTINEL_NAME)
            row = store.insert(PORTAL_SENTINEL_NAME, slug)
        except RecordStoreError as e:
            logger.error("Portal rotation failed: %s", e)
            return ServiceResult.fail(ErrorKind.UPSTREAM, str(e))

        logger.info("Portal rotated (replaced %d previous config rows)", removed)
        return ServiceResult.ok(
            PortalState(slug=row.url, created_at=row.created_at, expires_at=row.created_at + self.window)
        )

    def check_access(self, db: Session, candidate_slug: str | None = None) -> PortalAccess:
        """Check whether the portal (optionally addressed by ``candidate_slug``) is open.

        Store errors fail closed.
        """
        try:
            row = RecordStore(db).find_by_name(PORTAL_SENTINEL_NAME)
        except RecordStoreError as e:
            logger.error("Portal lookup failed, denying access: %s", e)
            return PortalAccess(allowed=False)

        if row is None:
            return PortalAccess(allowed=False)

        expires_at = row.created_at + self.window
        access = PortalAccess(allowed=False, expires_at=expires_at, active_slug=row.url)

        if candidate_slug is not None and not hmac.compare_digest(
            candidate_slug.encode("utf-8"), row.url.encode("utf-8")
        ):
            return access

        access.allowed = datetime.utcnow() - row.created_at <= self.window
        return access


_portal_service: PortalService | None = None


def get_portal_service() -> PortalService:
    """Get singleton portal service instance."""
    global _portal_service
    if _portal_service is None:
        _portal_service = PortalService()
    return _portal_service

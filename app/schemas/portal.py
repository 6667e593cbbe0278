"""Pydantic schemas for portal endpoints."""

from datetime import datetime

from pydantic import BaseModel


class PortalAccessResponse(BaseModel):
    """Public access check. The active slug is never echoed here."""

    allowed: bool
    expires_at: datetime | None = None


class PortalStatusResponse(BaseModel):
    allowed: bool
    slug: str | None = None
    expires_at: datetime | None = None
    portal_path: str | None = None

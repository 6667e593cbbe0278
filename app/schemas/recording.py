"""Pydantic schemas for recording endpoints."""

from datetime import datetime

from pydantic import BaseModel


class RecordingResponse(BaseModel):
    id: int
    name: str
    url: str
    created_at: datetime
    expires_at: datetime
    is_expired: bool
    share_path: str
    view_url: str | None = None

    model_config = {"from_attributes": True}


class RecordingListResponse(BaseModel):
    items: list[RecordingResponse]
    total: int

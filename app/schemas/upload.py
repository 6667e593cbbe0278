"""Pydantic schemas for the upload hand-off endpoints."""

from pydantic import BaseModel, Field

from app.services.upload import MAX_NAME_LENGTH


class UploadTargetRequest(BaseModel):
    slug: str
    name: str = Field(max_length=MAX_NAME_LENGTH)
    content_type: str | None = None


class UploadTargetResponse(BaseModel):
    put_url: str
    object_key: str
    expires_in: int

    model_config = {"from_attributes": True}


class CommitRequest(BaseModel):
    slug: str
    name: str = Field(max_length=MAX_NAME_LENGTH)
    object_key: str = Field(max_length=1024)

from pydantic import BaseModel, Field
from datetime import datetime, timezone
from typing import Optional
from uuid import UUID


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VideoRecord(BaseModel):
    id: UUID
    user_id: UUID
    title: str = Field(..., max_length=200)
    description: str = Field("", max_length=2000)
    thumbnail_url: Optional[str] = None
    video_url: Optional[str] = None
    created_at: datetime = Field(default_factory=_utcnow)
    updated_at: datetime = Field(default_factory=_utcnow)


class CreateVideoRequest(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field("", max_length=2000)

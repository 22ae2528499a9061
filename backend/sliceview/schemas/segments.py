from __future__ import annotations

from datetime import datetime
from pydantic import BaseModel, Field


class DimensionsInfo(BaseModel):
    original_width: int = Field(gt=0)
    original_height: int = Field(gt=0)
    scaled_width: int = Field(gt=0)
    scaled_height: int = Field(gt=0)
    was_scaled: bool
    summary: str


class SegmentInfo(BaseModel):
    index: int = Field(ge=1)
    y_offset: int = Field(ge=0)
    width: int = Field(gt=0)
    height: int = Field(gt=0)
    byte_size: int = Field(ge=0)
    size_kb: float = Field(ge=0.0)
    filename: str
    download_url: str
    preview_url: str | None = None


class SegmentationResponse(BaseModel):
    session_id: str
    base_name: str | None = None
    dimensions: DimensionsInfo | None = None
    segment_count: int = 0
    summary: str | None = None
    archive_available: bool = False
    archive_filename: str | None = None
    archive_url: str | None = None
    segments: list[SegmentInfo] = Field(default_factory=list)
    updated_at: datetime

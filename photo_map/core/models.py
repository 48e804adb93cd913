from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class PhotoMetadata(BaseModel):
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    latitude: float
    longitude: float
    captured_at: Optional[datetime] = None
    # False when latitude/longitude hold the configured fallback coordinate.
    has_gps: bool = False


class PhotoPayload(BaseModel):
    """Shape handed to the map UI for a single photo."""

    src: str
    thumbnail: str
    lat: float
    lng: float
    width: int
    height: int
    filename: Optional[str] = None


class PhotoRecord(BaseModel):
    model_config = ConfigDict(frozen=True)

    source_path: str
    thumbnail_path: Optional[str] = None
    latitude: float
    longitude: float
    width: int = Field(default=0, ge=0)
    height: int = Field(default=0, ge=0)
    captured_at: Optional[datetime] = None
    has_gps: bool = False

    @property
    def filename(self) -> str:
        return Path(self.source_path).name

    def to_payload(self, public_prefix: str = "/photos", thumbnails_prefix: str | None = None) -> PhotoPayload:
        """Map local paths to the public URLs the UI loads images from."""
        prefix = public_prefix.rstrip("/")
        src = f"{prefix}/{self.filename}"
        thumbnail = src
        if self.thumbnail_path:
            thumb_prefix = (thumbnails_prefix or f"{prefix}/thumbnails").rstrip("/")
            thumbnail = f"{thumb_prefix}/{Path(self.thumbnail_path).name}"
        return PhotoPayload(
            src=src,
            thumbnail=thumbnail,
            lat=self.latitude,
            lng=self.longitude,
            width=self.width,
            height=self.height,
            filename=self.filename,
        )


Cluster = list[PhotoRecord]


class ThumbnailResult(BaseModel):
    source_path: str
    thumbnail_path: Optional[str] = None
    status: Literal["created", "skipped", "failed"]
    error: Optional[str] = None


class RenamedSource(BaseModel):
    original_path: str
    new_path: str
    sidecar_path: Optional[str] = None


class BatchReport(BaseModel):
    results: list[ThumbnailResult] = Field(default_factory=list)
    renamed: list[RenamedSource] = Field(default_factory=list)
    removed_orphans: list[str] = Field(default_factory=list)

    def _count(self, status: str) -> int:
        return sum(1 for result in self.results if result.status == status)

    @property
    def created(self) -> int:
        return self._count("created")

    @property
    def skipped(self) -> int:
        return self._count("skipped")

    @property
    def failed(self) -> int:
        return self._count("failed")

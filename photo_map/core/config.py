from __future__ import annotations

import os
from pathlib import Path
from typing import Literal, Optional

from pydantic import BaseModel, Field, model_validator

# Default map center, used for photos that carry no usable GPS tags (Taipei).
DEFAULT_FALLBACK_LAT = 25.0330
DEFAULT_FALLBACK_LNG = 121.5654
DEFAULT_CLUSTER_DISTANCE = 0.005


def default_workers() -> int:
    return min(32, (os.cpu_count() or 1) + 4)


class Settings(BaseModel):
    photos_dir: Path = Path("public/photos")
    thumbnails_dir: Optional[Path] = None
    thumb_max_size: int = Field(default=300, gt=0)
    normalize_max_size: int = Field(default=1024, gt=0)
    jpeg_quality: int = Field(default=80, ge=1, le=100)
    cluster_distance: float = Field(default=DEFAULT_CLUSTER_DISTANCE, ge=0)
    cluster_strategy: Literal["first", "nearest"] = "first"
    fallback_lat: float = Field(default=DEFAULT_FALLBACK_LAT, ge=-90, le=90)
    fallback_lng: float = Field(default=DEFAULT_FALLBACK_LNG, ge=-180, le=180)
    file_timeout: float = Field(default=30.0, gt=0)
    max_workers: int = Field(default_factory=default_workers, gt=0)
    public_prefix: str = "/photos"

    @model_validator(mode="after")
    def _default_thumbnails_dir(self) -> "Settings":
        if self.thumbnails_dir is None:
            self.thumbnails_dir = self.photos_dir / "thumbnails"
        return self

    @property
    def fallback_coordinate(self) -> tuple[float, float]:
        return self.fallback_lat, self.fallback_lng

    @classmethod
    def from_env(cls, **overrides: object) -> "Settings":
        """Build settings from environment variables; explicit overrides win."""
        env_map = {
            "photos_dir": "PHOTOS_DIR",
            "thumbnails_dir": "THUMB_CACHE_DIR",
            "thumb_max_size": "THUMB_MAX_SIZE",
            "normalize_max_size": "NORMALIZE_MAX_SIZE",
            "jpeg_quality": "JPEG_QUALITY",
            "cluster_distance": "CLUSTER_DISTANCE",
            "cluster_strategy": "CLUSTER_STRATEGY",
            "fallback_lat": "PHOTO_MAP_FALLBACK_LAT",
            "fallback_lng": "PHOTO_MAP_FALLBACK_LNG",
            "file_timeout": "FILE_TIMEOUT_SECONDS",
            "max_workers": "MAX_WORKERS",
            "public_prefix": "PUBLIC_PHOTOS_PREFIX",
        }
        values: dict[str, object] = {}
        for field_name, env_name in env_map.items():
            raw = os.getenv(env_name)
            if raw not in (None, ""):
                values[field_name] = raw
        values.update({key: value for key, value in overrides.items() if value is not None})
        return cls(**values)

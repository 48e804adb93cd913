from __future__ import annotations

from pathlib import Path
from typing import Callable, Optional

import pytest
from PIL import Image

from photo_map.core.config import Settings


def _to_dms(value: float) -> tuple[float, float, float]:
    value = abs(value)
    degrees = int(value)
    minutes = int((value - degrees) * 60)
    seconds = (value - degrees - minutes / 60.0) * 3600.0
    return float(degrees), float(minutes), round(seconds, 4)


def make_image(
    path: Path,
    size: tuple[int, int] = (10, 10),
    *,
    taken: Optional[str] = None,
    gps: Optional[tuple[float, float]] = None,
    mode: str = "RGB",
) -> Path:
    """Write a solid-color test image, optionally tagged with capture time and GPS."""
    img = Image.new(mode, size, color="red")
    exif = Image.Exif()
    if taken:
        exif[36867] = taken  # DateTimeOriginal
        exif[306] = taken  # DateTime
    if gps:
        lat, lng = gps
        exif[34853] = {
            1: "N" if lat >= 0 else "S",
            2: _to_dms(lat),
            3: "E" if lng >= 0 else "W",
            4: _to_dms(lng),
        }
    if taken or gps:
        img.save(path, exif=exif)
    else:
        img.save(path)
    return path


@pytest.fixture
def photo_factory() -> Callable[..., Path]:
    return make_image


@pytest.fixture
def photos_dir(tmp_path: Path) -> Path:
    directory = tmp_path / "photos"
    directory.mkdir()
    return directory


@pytest.fixture
def settings(photos_dir: Path) -> Settings:
    return Settings(photos_dir=photos_dir)

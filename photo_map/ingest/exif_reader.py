from __future__ import annotations

import logging
import math
import numbers
from datetime import datetime
from io import BytesIO
from pathlib import Path
from typing import Optional, Union

from PIL import Image

from photo_map.core.config import DEFAULT_FALLBACK_LAT, DEFAULT_FALLBACK_LNG
from photo_map.core.errors import DecodeError, TagError
from photo_map.core.models import PhotoMetadata

logger = logging.getLogger(__name__)

DATETIME_ORIGINAL_TAG = 36867  # EXIF DateTimeOriginal
DATETIME_TAG = 306  # EXIF DateTime fallback
EXIF_IFD_TAG = 34665  # ExifOffset
GPS_INFO_TAG = 34853  # GPSInfo
GPS_LATITUDE_TAG = 2
GPS_LONGITUDE_TAG = 4
EXIF_DATETIME_FORMAT = "%Y:%m:%d %H:%M:%S"

ImageSource = Union[str, Path, bytes]


def _to_float(value: object) -> Optional[float]:
    if isinstance(value, tuple) and len(value) == 2 and value[1]:
        return float(value[0]) / float(value[1])
    if isinstance(value, numbers.Real):
        return float(value)
    return None


def parse_gps_coordinate(value: object) -> Optional[float]:
    """Convert a GPS tag value to decimal degrees.

    Accepts a (degrees, minutes, seconds) triple of rationals, a single number,
    or a textual description such as "25.033". The hemisphere reference tag is
    not applied. Returns None for anything unparsable or non-finite.
    """
    coordinate: Optional[float]
    if isinstance(value, bytes):
        value = value.decode("ascii", errors="ignore")
    if isinstance(value, str):
        try:
            coordinate = float(value.strip().rstrip("\x00"))
        except ValueError:
            return None
    elif isinstance(value, tuple) and len(value) == 3:
        parts = [_to_float(v) for v in value]
        if any(p is None for p in parts):
            return None
        degrees, minutes, seconds = parts  # type: ignore[misc]
        coordinate = degrees + minutes / 60.0 + seconds / 3600.0
    else:
        coordinate = _to_float(value)
    if coordinate is None or not math.isfinite(coordinate):
        return None
    return coordinate


def _open_image(source: ImageSource) -> Image.Image:
    label = "<bytes>" if isinstance(source, bytes) else source
    try:
        if isinstance(source, bytes):
            return Image.open(BytesIO(source))
        return Image.open(source)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(label, f"unsupported or unreadable image ({exc})") from exc


def read_tags(img: Image.Image, label: str | Path = "<image>") -> Image.Exif:
    """Tag step: return the EXIF container, raising TagError when absent or malformed."""
    try:
        exif = img.getexif()
    except Exception as exc:
        raise TagError(label, f"malformed EXIF ({exc})") from exc
    if not exif:
        raise TagError(label, "no EXIF data")
    return exif


def read_capture_time(exif: Image.Exif) -> Optional[datetime]:
    raw = None
    try:
        raw = exif.get_ifd(EXIF_IFD_TAG).get(DATETIME_ORIGINAL_TAG)
    except Exception:
        logger.debug("Metadata: unreadable Exif IFD", exc_info=True)
    raw = raw or exif.get(DATETIME_ORIGINAL_TAG) or exif.get(DATETIME_TAG)
    if not raw:
        return None
    if isinstance(raw, bytes):
        raw = raw.decode("ascii", errors="ignore")
    try:
        return datetime.strptime(str(raw).strip().rstrip("\x00"), EXIF_DATETIME_FORMAT)
    except ValueError:
        return None


def read_gps(exif: Image.Exif) -> Optional[tuple[float, float]]:
    """Return (latitude, longitude) when both tags are present and finite."""
    try:
        gps_info = exif.get_ifd(GPS_INFO_TAG)
    except Exception:
        logger.debug("Metadata: unreadable GPS IFD", exc_info=True)
        return None
    if not gps_info:
        return None
    raw_lat = gps_info.get(GPS_LATITUDE_TAG)
    raw_lng = gps_info.get(GPS_LONGITUDE_TAG)
    if raw_lat is None or raw_lng is None:
        return None
    lat = parse_gps_coordinate(raw_lat)
    lng = parse_gps_coordinate(raw_lng)
    if lat is None or lng is None:
        logger.warning("Metadata: unparsable GPS tags %r / %r", raw_lat, raw_lng)
        return None
    return lat, lng


def extract_metadata(
    source: ImageSource,
    fallback: tuple[float, float] = (DEFAULT_FALLBACK_LAT, DEFAULT_FALLBACK_LNG),
) -> PhotoMetadata:
    """Read dimensions, GPS position and capture time from an image.

    Raises DecodeError when the image cannot be decoded. EXIF problems never
    propagate: the fallback coordinate is used instead.
    """
    label = "<bytes>" if isinstance(source, bytes) else str(source)
    fallback_lat, fallback_lng = fallback
    with _open_image(source) as img:
        width, height = img.size
        width, height = max(int(width or 0), 0), max(int(height or 0), 0)
        try:
            exif = read_tags(img, label)
        except TagError as exc:
            logger.warning("Metadata: %s; using fallback coordinate", exc)
            return PhotoMetadata(
                width=width, height=height, latitude=fallback_lat, longitude=fallback_lng
            )

        captured_at = read_capture_time(exif)
        gps = read_gps(exif)

    if gps is None:
        return PhotoMetadata(
            width=width,
            height=height,
            latitude=fallback_lat,
            longitude=fallback_lng,
            captured_at=captured_at,
        )
    return PhotoMetadata(
        width=width,
        height=height,
        latitude=gps[0],
        longitude=gps[1],
        captured_at=captured_at,
        has_gps=True,
    )

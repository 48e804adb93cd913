from __future__ import annotations

import logging
from io import BytesIO
from pathlib import Path

from PIL import Image, ImageOps

from photo_map.core.errors import DecodeError, PhotoMapError, WriteError
from photo_map.core.models import ThumbnailResult

logger = logging.getLogger(__name__)

THUMBNAIL_SUFFIX = ".jpg"


def thumbnail_path_for(photo_path: Path, cache_dir: Path) -> Path:
    """Deterministic derived-asset location for a source photo."""
    return cache_dir / f"{photo_path.stem}{THUMBNAIL_SUFFIX}"


def encode_jpeg(
    photo_path: Path, max_size: int, quality: int = 80, keep_exif: bool = False
) -> bytes:
    """Decode, fit inside max_size x max_size without enlarging, and re-encode as JPEG."""
    try:
        with Image.open(photo_path) as img:
            img = ImageOps.exif_transpose(img)
            exif = img.getexif() if keep_exif else None
            img = img.convert("RGB")
            img.thumbnail((max_size, max_size))
            buf = BytesIO()
            if exif:
                img.save(buf, format="JPEG", quality=quality, exif=exif.tobytes())
            else:
                img.save(buf, format="JPEG", quality=quality)
    except (OSError, ValueError, Image.DecompressionBombError) as exc:
        raise DecodeError(photo_path, f"cannot decode image ({exc})") from exc
    return buf.getvalue()


def write_asset(target: Path, payload: bytes) -> None:
    """Write payload via a temporary sibling so readers never see partial files."""
    tmp_path = target.with_name(f".{target.name}.tmp")
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        tmp_path.write_bytes(payload)
        tmp_path.replace(target)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise WriteError(target, f"cannot write asset ({exc})") from exc


def build_thumbnail(
    photo_path: Path,
    cache_dir: Path,
    max_size: int = 300,
    quality: int = 80,
) -> ThumbnailResult:
    """Create a cached JPEG thumbnail unless one already exists for this source."""
    thumb_path = thumbnail_path_for(photo_path, cache_dir)
    if thumb_path.exists():
        logger.debug("Thumbnail: %s exists; skipping", thumb_path.name)
        return ThumbnailResult(
            source_path=str(photo_path), thumbnail_path=str(thumb_path), status="skipped"
        )
    try:
        write_asset(thumb_path, encode_jpeg(photo_path, max_size, quality))
    except PhotoMapError as exc:
        logger.error("Thumbnail: failed for %s: %s", photo_path.name, exc)
        return ThumbnailResult(source_path=str(photo_path), status="failed", error=str(exc))
    logger.info("Thumbnail: generated %s", thumb_path.name)
    return ThumbnailResult(
        source_path=str(photo_path), thumbnail_path=str(thumb_path), status="created"
    )

from __future__ import annotations

import json
import logging
from datetime import datetime
from pathlib import Path
from typing import Optional

from photo_map.core.config import DEFAULT_FALLBACK_LAT, DEFAULT_FALLBACK_LNG
from photo_map.core.errors import PhotoMapError, WriteError
from photo_map.core.models import PhotoMetadata, RenamedSource

from .exif_reader import extract_metadata
from .thumbnailer import THUMBNAIL_SUFFIX, encode_jpeg, write_asset

logger = logging.getLogger(__name__)

JPEG_SUFFIXES = {".jpg", ".jpeg"}
SIDECAR_SUFFIX = ".json"
MAX_NAME_ATTEMPTS = 1000


def canonical_stem(captured_at: Optional[datetime], fallback: str) -> str:
    """Capture time with separators removed (2021:01:02 03:04:05 -> 20210102030405)."""
    if captured_at is None:
        return fallback
    return captured_at.strftime("%Y%m%d%H%M%S")


def _claim_target(photo_path: Path, stem: str, suffix: str) -> Path:
    """Atomically reserve a free file name next to photo_path.

    Returns photo_path itself when it already carries the wanted name.
    """
    for attempt in range(MAX_NAME_ATTEMPTS):
        name = f"{stem}{suffix}" if attempt == 0 else f"{stem}_{attempt}{suffix}"
        candidate = photo_path.with_name(name)
        if candidate == photo_path:
            return candidate
        try:
            candidate.touch(exist_ok=False)
        except FileExistsError:
            continue
        except OSError as exc:
            raise WriteError(candidate, f"cannot reserve name ({exc})") from exc
        return candidate
    raise WriteError(photo_path, f"no free name for stem {stem!r}")


def write_sidecar(target: Path, metadata: PhotoMetadata, original_name: str) -> Path:
    sidecar = target.with_suffix(SIDECAR_SUFFIX)
    payload = metadata.model_dump(mode="json")
    payload["original_filename"] = original_name
    write_asset(sidecar, json.dumps(payload, indent=2).encode("utf-8"))
    return sidecar


def _ensure_sidecar(photo_path: Path, metadata: PhotoMetadata) -> None:
    """Write the sidecar of an already renamed photo when an earlier run left none."""
    if metadata.captured_at is None or photo_path.with_suffix(SIDECAR_SUFFIX).exists():
        return
    write_sidecar(photo_path, metadata, photo_path.name)
    logger.info("Normalize: restored sidecar for %s", photo_path.name)


def normalize_source(
    photo_path: Path,
    max_size: int = 1024,
    quality: int = 80,
    fallback: tuple[float, float] = (DEFAULT_FALLBACK_LAT, DEFAULT_FALLBACK_LNG),
) -> Optional[RenamedSource]:
    """Rename a source photo after its capture time and bound its size.

    Photos that are not JPEG, or exceed max_size on either edge, are
    re-encoded as JPEG (EXIF kept). A JSON sidecar with the extracted
    metadata is written next to the result. Returns None when the file is
    already canonical. Raises DecodeError/WriteError.
    """
    metadata = extract_metadata(photo_path, fallback)
    stem = canonical_stem(metadata.captured_at, photo_path.stem)
    reencode = (
        photo_path.suffix.lower() not in JPEG_SUFFIXES
        or max(metadata.width, metadata.height) > max_size
    )
    if stem == photo_path.stem and not reencode:
        _ensure_sidecar(photo_path, metadata)
        return None

    suffix = THUMBNAIL_SUFFIX if reencode else photo_path.suffix
    target = _claim_target(photo_path, stem, suffix)
    if target == photo_path and not reencode:
        _ensure_sidecar(photo_path, metadata)
        return None
    try:
        if reencode:
            write_asset(target, encode_jpeg(photo_path, max_size, quality, keep_exif=True))
            if target != photo_path:
                photo_path.unlink()
        else:
            photo_path.replace(target)
    except PhotoMapError:
        if target != photo_path:
            target.unlink(missing_ok=True)
        raise
    except OSError as exc:
        if target != photo_path:
            target.unlink(missing_ok=True)
        raise WriteError(target, f"cannot replace source ({exc})") from exc

    sidecar = write_sidecar(target, metadata, photo_path.name)
    if target != photo_path:
        logger.info("Normalize: renamed %s -> %s", photo_path.name, target.name)
    else:
        logger.info("Normalize: re-encoded %s", target.name)
    return RenamedSource(
        original_path=str(photo_path), new_path=str(target), sidecar_path=str(sidecar)
    )

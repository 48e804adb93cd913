from __future__ import annotations

import logging
from pathlib import Path

from .scanner import scan_photos
from .thumbnailer import THUMBNAIL_SUFFIX

logger = logging.getLogger(__name__)


def find_orphans(photos_dir: Path, cache_dir: Path) -> list[Path]:
    """Derived assets whose source stem no longer exists in photos_dir."""
    if not cache_dir.is_dir():
        return []
    source_stems = {path.stem for path in scan_photos(photos_dir)}
    derived = sorted(
        path
        for path in cache_dir.iterdir()
        if path.is_file() and path.suffix.lower() == THUMBNAIL_SUFFIX
    )
    return [path for path in derived if path.stem not in source_stems]


def collect_orphans(photos_dir: Path, cache_dir: Path) -> list[Path]:
    """Delete orphaned thumbnails. Must run after every thumbnail task has finished."""
    removed: list[Path] = []
    for orphan in find_orphans(photos_dir, cache_dir):
        try:
            orphan.unlink()
        except FileNotFoundError:
            continue
        except OSError as exc:
            logger.error("Orphans: cannot remove %s: %s", orphan.name, exc)
            continue
        logger.info("Orphans: removed %s", orphan.name)
        removed.append(orphan)
    return removed

#!/usr/bin/env python
"""
Generate thumbnails for a photo directory and drop thumbnails whose source is gone.

Usage:
  python scripts/generate_thumbnails.py public/photos
  python scripts/generate_thumbnails.py ~/Pictures/trip --normalize
  THUMB_MAX_SIZE=400 python scripts/generate_thumbnails.py public/photos
"""
from __future__ import annotations

import argparse
import sys
from pathlib import Path

from photo_map.core.config import Settings
from photo_map.core.env import configure_logging, load_dotenv_if_present
from photo_map.ingest import generate_thumbnails


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="Generate thumbnails for a photo directory.")
    parser.add_argument(
        "directory",
        type=Path,
        nargs="?",
        help="Directory containing photos (defaults to PHOTOS_DIR)",
    )
    parser.add_argument(
        "--thumbnails",
        type=Path,
        help="Thumbnail output directory (defaults to <directory>/thumbnails)",
    )
    parser.add_argument(
        "--normalize",
        action="store_true",
        help="Rename sources after their capture time and re-encode them as bounded JPEGs",
    )
    args = parser.parse_args(argv)

    load_dotenv_if_present()
    configure_logging()
    settings = Settings.from_env(photos_dir=args.directory, thumbnails_dir=args.thumbnails)
    target = settings.photos_dir
    if not target.exists() or not target.is_dir():
        print(f"Directory not found or not a folder: {target}", file=sys.stderr)
        return 1

    report = generate_thumbnails(settings, normalize=args.normalize)
    if not report.results:
        print(f"No supported photos found under {target}")
    else:
        print(
            f"Thumbnails complete: {report.created} created, {report.skipped} skipped, "
            f"{report.failed} failed, {len(report.renamed)} renamed, "
            f"{len(report.removed_orphans)} orphans removed"
        )
    return 0


if __name__ == "__main__":
    sys.exit(main())

from __future__ import annotations

from pathlib import Path

SUPPORTED_EXTENSIONS = {".jpg", ".jpeg", ".png", ".gif", ".webp"}


def is_image_file(path: str | Path) -> bool:
    return Path(path).suffix.lower() in SUPPORTED_EXTENSIONS


def scan_photos(root: str | Path) -> list[Path]:
    """List supported image files directly under root, sorted by name.

    Subdirectories (the thumbnail cache included) are not descended into.
    """
    root_path = Path(root)
    if not root_path.is_dir():
        return []
    return sorted(
        path for path in root_path.iterdir() if path.is_file() and is_image_file(path)
    )

from __future__ import annotations

from pathlib import Path


class PhotoMapError(Exception):
    """Base error for per-file processing failures."""

    def __init__(self, path: str | Path, message: str) -> None:
        self.path = str(path)
        super().__init__(f"{path}: {message}")


class DecodeError(PhotoMapError):
    """The file is not a readable/supported image. The file is dropped."""


class TagError(PhotoMapError):
    """The EXIF container is absent or malformed. The file keeps fallback coordinates."""


class WriteError(PhotoMapError):
    """A derived asset could not be written."""

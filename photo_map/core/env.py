from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"
# Pillow logs every plugin probe and EXIF tag at DEBUG.
NOISY_LOGGERS = ("PIL",)


def load_dotenv_if_present(path: str | Path = ".env") -> bool:
    """Load PHOTOS_DIR, THUMB_* and friends from a .env file; real env vars win."""
    dotenv_path = Path(path)
    if not dotenv_path.is_file():
        return False
    return load_dotenv(dotenv_path=dotenv_path, override=False)


def configure_logging(default_level: str = "INFO") -> int:
    """Set the root level from LOG_LEVEL and keep image-library chatter at WARNING.

    Returns the level applied to the root logger.
    """
    level_name = os.getenv("LOG_LEVEL", default_level).upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    logging.basicConfig(format=os.getenv("LOG_FORMAT", LOG_FORMAT))
    logging.getLogger().setLevel(level)
    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
    return level

"""Ingest pipeline: scan photos, read EXIF metadata, build thumbnails."""

from .exif_reader import extract_metadata, parse_gps_coordinate
from .normalizer import normalize_source
from .orphans import collect_orphans, find_orphans
from .pipeline import (
    generate_thumbnails,
    generate_thumbnails_async,
    load_clusters,
    load_clusters_async,
    load_photo_records,
    load_photo_records_async,
    process_photo,
)
from .scanner import SUPPORTED_EXTENSIONS, scan_photos
from .thumbnailer import build_thumbnail, thumbnail_path_for

__all__ = [
    "SUPPORTED_EXTENSIONS",
    "build_thumbnail",
    "collect_orphans",
    "extract_metadata",
    "find_orphans",
    "generate_thumbnails",
    "generate_thumbnails_async",
    "load_clusters",
    "load_clusters_async",
    "load_photo_records",
    "load_photo_records_async",
    "normalize_source",
    "parse_gps_coordinate",
    "process_photo",
    "scan_photos",
    "thumbnail_path_for",
]

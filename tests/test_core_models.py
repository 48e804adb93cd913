from pathlib import Path

import pytest
from pydantic import ValidationError

from photo_map.core.config import Settings
from photo_map.core.models import BatchReport, PhotoRecord, ThumbnailResult


def test_photo_record_is_immutable() -> None:
    record = PhotoRecord(source_path="/tmp/photo.jpg", latitude=1.0, longitude=2.0)
    with pytest.raises(ValidationError):
        record.latitude = 3.0


def test_photo_record_rejects_negative_dimensions() -> None:
    with pytest.raises(ValidationError):
        PhotoRecord(source_path="/tmp/photo.jpg", latitude=1.0, longitude=2.0, width=-1)


def test_payload_uses_thumbnail_when_present() -> None:
    record = PhotoRecord(
        source_path="/data/photos/a.jpg",
        thumbnail_path="/data/photos/thumbnails/a.jpg",
        latitude=1.0,
        longitude=2.0,
        width=10,
        height=5,
    )
    payload = record.to_payload("/photos/")
    assert payload.model_dump() == {
        "src": "/photos/a.jpg",
        "thumbnail": "/photos/thumbnails/a.jpg",
        "lat": 1.0,
        "lng": 2.0,
        "width": 10,
        "height": 5,
        "filename": "a.jpg",
    }


def test_payload_falls_back_to_source() -> None:
    record = PhotoRecord(source_path="/data/photos/b.png", latitude=0.0, longitude=0.0)
    payload = record.to_payload()
    assert payload.thumbnail == payload.src == "/photos/b.png"


def test_batch_report_counts() -> None:
    report = BatchReport(
        results=[
            ThumbnailResult(source_path="a", status="created"),
            ThumbnailResult(source_path="b", status="skipped"),
            ThumbnailResult(source_path="c", status="failed", error="boom"),
            ThumbnailResult(source_path="d", status="created"),
        ]
    )
    assert (report.created, report.skipped, report.failed) == (2, 1, 1)


def test_settings_defaults() -> None:
    settings = Settings(photos_dir=Path("/srv/photos"))
    assert settings.thumbnails_dir == Path("/srv/photos/thumbnails")
    assert settings.fallback_coordinate == (25.0330, 121.5654)
    assert settings.cluster_distance == 0.005
    assert settings.thumb_max_size == 300


def test_settings_from_env(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> None:
    monkeypatch.setenv("PHOTOS_DIR", str(tmp_path))
    monkeypatch.setenv("THUMB_MAX_SIZE", "200")
    monkeypatch.setenv("CLUSTER_STRATEGY", "nearest")
    monkeypatch.setenv("PHOTO_MAP_FALLBACK_LAT", "48.8566")
    monkeypatch.delenv("THUMB_CACHE_DIR", raising=False)

    settings = Settings.from_env(cluster_distance=0.01)
    assert settings.photos_dir == tmp_path
    assert settings.thumbnails_dir == tmp_path / "thumbnails"
    assert settings.thumb_max_size == 200
    assert settings.cluster_strategy == "nearest"
    assert settings.cluster_distance == 0.01
    assert settings.fallback_lat == 48.8566


def test_settings_rejects_bad_values(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("CLUSTER_STRATEGY", "centroid")
    with pytest.raises(ValidationError):
        Settings.from_env()

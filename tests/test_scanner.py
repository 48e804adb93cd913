from pathlib import Path

from photo_map.ingest import scan_photos


def test_scan_photos_filters_extensions(photos_dir: Path, photo_factory) -> None:
    photo_factory(photos_dir / "b.JPG")
    photo_factory(photos_dir / "a.png")
    photo_factory(photos_dir / "c.webp")
    photo_factory(photos_dir / "d.gif", mode="L")
    (photos_dir / "notes.txt").write_text("skip me")
    (photos_dir / "meta.json").write_text("{}")
    nested = photos_dir / "thumbnails"
    nested.mkdir()
    photo_factory(nested / "e.jpg")

    names = [p.name for p in scan_photos(photos_dir)]
    assert names == ["a.png", "b.JPG", "c.webp", "d.gif"]


def test_scan_missing_directory(tmp_path: Path) -> None:
    assert scan_photos(tmp_path / "missing") == []

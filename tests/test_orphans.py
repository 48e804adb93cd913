from __future__ import annotations

from pathlib import Path

from photo_map.ingest import build_thumbnail, collect_orphans, find_orphans


def test_orphans_are_removed(photos_dir: Path, photo_factory) -> None:
    cache = photos_dir / "thumbnails"
    keep = photo_factory(photos_dir / "keep.jpg")
    gone = photo_factory(photos_dir / "gone.png")
    build_thumbnail(keep, cache)
    build_thumbnail(gone, cache)
    (cache / "notes.txt").write_text("not a thumbnail")

    gone.unlink()
    assert [p.name for p in find_orphans(photos_dir, cache)] == ["gone.jpg"]

    removed = collect_orphans(photos_dir, cache)
    assert [p.name for p in removed] == ["gone.jpg"]
    assert sorted(p.name for p in cache.iterdir()) == ["keep.jpg", "notes.txt"]


def test_missing_cache_dir_is_not_an_error(photos_dir: Path) -> None:
    assert collect_orphans(photos_dir, photos_dir / "thumbnails") == []

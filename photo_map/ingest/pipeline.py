from __future__ import annotations

import asyncio
import logging
import threading
from pathlib import Path
from typing import Awaitable, Callable, Optional, TypeVar

from photo_map.clusters import cluster_photos
from photo_map.core.config import Settings
from photo_map.core.errors import DecodeError, PhotoMapError
from photo_map.core.models import (
    BatchReport,
    Cluster,
    PhotoRecord,
    RenamedSource,
    ThumbnailResult,
)

from .exif_reader import extract_metadata
from .normalizer import normalize_source
from .orphans import collect_orphans
from .scanner import scan_photos
from .thumbnailer import build_thumbnail, thumbnail_path_for

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _resolve(future: asyncio.Future, result: object, error: Optional[BaseException]) -> None:
    # An abandoned job may finish after its timeout cancelled the future.
    if future.done():
        return
    if error is not None:
        future.set_exception(error)
    else:
        future.set_result(result)


class FileRunner:
    """Runs blocking per-file jobs on worker threads, at most `workers` at a time.

    A job's timeout starts only once it holds a worker slot, so queueing never
    counts against it. A job that outlives the timeout gives its slot back and
    is abandoned; its daemon thread is never joined, so one stuck file cannot
    hold the batch open.
    """

    def __init__(self, timeout: float, workers: int) -> None:
        self.timeout = timeout
        self._slots = asyncio.Semaphore(workers)

    async def run(self, func: Callable[..., T], *args: object) -> T:
        async with self._slots:
            loop = asyncio.get_running_loop()
            future: asyncio.Future = loop.create_future()
            worker = threading.Thread(
                target=self._work,
                args=(loop, future, func, args),
                name=f"photo-map-{getattr(func, '__name__', 'job')}",
                daemon=True,
            )
            async with asyncio.timeout(self.timeout):
                worker.start()
                return await future

    @staticmethod
    def _work(
        loop: asyncio.AbstractEventLoop,
        future: asyncio.Future,
        func: Callable[..., object],
        args: tuple,
    ) -> None:
        result: object = None
        error: Optional[BaseException] = None
        try:
            result = func(*args)
        except Exception as exc:
            error = exc
        try:
            loop.call_soon_threadsafe(_resolve, future, result, error)
        except RuntimeError:
            logger.debug("Pipeline: loop closed before abandoned job %s finished", func)


def _runner(settings: Settings) -> FileRunner:
    return FileRunner(timeout=settings.file_timeout, workers=settings.max_workers)


def process_photo(photo_path: Path, settings: Settings) -> PhotoRecord:
    """Build the PhotoRecord for one source file. Raises DecodeError."""
    metadata = extract_metadata(photo_path, settings.fallback_coordinate)
    thumb_path = thumbnail_path_for(photo_path, settings.thumbnails_dir)
    return PhotoRecord(
        source_path=str(photo_path),
        thumbnail_path=str(thumb_path) if thumb_path.exists() else None,
        latitude=metadata.latitude,
        longitude=metadata.longitude,
        width=metadata.width,
        height=metadata.height,
        captured_at=metadata.captured_at,
        has_gps=metadata.has_gps,
    )


def process_thumbnail(
    photo_path: Path, settings: Settings, normalize: bool = False
) -> tuple[ThumbnailResult, Optional[RenamedSource]]:
    """Optionally normalize the source, then build its thumbnail."""
    renamed = None
    if normalize:
        renamed = normalize_source(
            photo_path,
            max_size=settings.normalize_max_size,
            quality=settings.jpeg_quality,
            fallback=settings.fallback_coordinate,
        )
        if renamed:
            photo_path = Path(renamed.new_path)
    result = build_thumbnail(
        photo_path,
        settings.thumbnails_dir,
        max_size=settings.thumb_max_size,
        quality=settings.jpeg_quality,
    )
    return result, renamed


async def _load_record(
    runner: FileRunner, photo_path: Path, settings: Settings
) -> Optional[PhotoRecord]:
    try:
        return await runner.run(process_photo, photo_path, settings)
    except DecodeError as exc:
        logger.error("Pipeline: dropping %s: %s", photo_path.name, exc)
    except TimeoutError:
        logger.error(
            "Pipeline: dropping %s: timed out after %.1fs", photo_path.name, settings.file_timeout
        )
    except Exception:
        logger.exception("Pipeline: dropping %s: unexpected error", photo_path.name)
    return None


async def _thumbnail_task(
    runner: FileRunner, photo_path: Path, settings: Settings, normalize: bool
) -> tuple[ThumbnailResult, Optional[RenamedSource]]:
    error: str
    try:
        return await runner.run(process_thumbnail, photo_path, settings, normalize)
    except PhotoMapError as exc:
        error = str(exc)
        logger.error("Pipeline: failed %s: %s", photo_path.name, exc)
    except TimeoutError:
        error = f"timed out after {settings.file_timeout}s"
        logger.error("Pipeline: failed %s: %s", photo_path.name, error)
    except Exception as exc:
        error = repr(exc)
        logger.exception("Pipeline: failed %s: unexpected error", photo_path.name)
    return ThumbnailResult(source_path=str(photo_path), status="failed", error=error), None


async def _fan_out(
    paths: list[Path], make_task: Callable[[Path], Awaitable[T]]
) -> list[T]:
    """Run one task per file and wait for all of them."""
    async with asyncio.TaskGroup() as group:
        tasks = [group.create_task(make_task(path)) for path in paths]
    return [task.result() for task in tasks]


async def load_photo_records_async(settings: Settings) -> list[PhotoRecord]:
    paths = scan_photos(settings.photos_dir)
    logger.info("Pipeline: reading metadata for %d files in %s", len(paths), settings.photos_dir)
    runner = _runner(settings)
    results = await _fan_out(paths, lambda path: _load_record(runner, path, settings))
    return [record for record in results if record is not None]


async def load_clusters_async(settings: Settings) -> list[Cluster]:
    """Read every photo, then cluster them once all reads have finished."""
    records = await load_photo_records_async(settings)
    clusters = cluster_photos(
        records,
        distance_threshold=settings.cluster_distance,
        strategy=settings.cluster_strategy,
    )
    logger.info("Pipeline: %d photos in %d clusters", len(records), len(clusters))
    return clusters


async def generate_thumbnails_async(settings: Settings, normalize: bool = False) -> BatchReport:
    """Thumbnail every source photo, then remove thumbnails with no source left."""
    settings.thumbnails_dir.mkdir(parents=True, exist_ok=True)
    paths = scan_photos(settings.photos_dir)
    logger.info("Pipeline: thumbnailing %d files in %s", len(paths), settings.photos_dir)
    runner = _runner(settings)
    outcomes = await _fan_out(
        paths, lambda path: _thumbnail_task(runner, path, settings, normalize)
    )

    report = BatchReport()
    for result, renamed in outcomes:
        report.results.append(result)
        if renamed:
            report.renamed.append(renamed)
    removed = collect_orphans(settings.photos_dir, settings.thumbnails_dir)
    report.removed_orphans = [str(path) for path in removed]
    logger.info(
        "Pipeline: %d created, %d skipped, %d failed, %d orphans removed",
        report.created,
        report.skipped,
        report.failed,
        len(removed),
    )
    return report


def load_photo_records(settings: Settings) -> list[PhotoRecord]:
    return asyncio.run(load_photo_records_async(settings))


def load_clusters(settings: Settings) -> list[Cluster]:
    return asyncio.run(load_clusters_async(settings))


def generate_thumbnails(settings: Settings, normalize: bool = False) -> BatchReport:
    return asyncio.run(generate_thumbnails_async(settings, normalize=normalize))

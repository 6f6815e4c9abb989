"""Ingest: turn uploaded photos into gallery renditions and manifest entries.

Reads:  site/uploads/            (inbox, `.gitkeep` is ignored)
        site/public/data.json    (GalleryManifest, may be missing or corrupt)
Writes: site/public/img/full/<name>.webp
        site/public/img/thumb/<name>.webp
        site/public/data.json    (new records prepended, written once per batch)

Per-file failures are logged and the file stays in the inbox for the next run.
Failing to create the output directories, list the inbox or write the manifest
aborts the whole run.
"""
import logging
import random
from collections.abc import Callable
from datetime import datetime, timezone
from pathlib import Path

from models.ingest_report import FileFailure, IngestReport, ProcessedFile
from models.manifest import GalleryManifest, ImageRecord
from pipeline.decoder import decode, is_supported
from pipeline.encoder import encode
from pipeline.errors import (
    EncodeError,
    FileProcessingError,
    FilenameCollisionError,
    InboxEnumerationError,
    ManifestWriteError,
    OutputDirectoryError,
)
from pipeline.identity import assign_identity
from pipeline.manifest_store import load_manifest, merge_manifest, write_manifest
from pipeline.resize_policy import resize_target
from settings import Settings

logger = logging.getLogger(__name__)


def run(
    settings: Settings,
    *,
    clock: Callable[[], datetime] | None = None,
    rng: random.Random | None = None,
) -> IngestReport:
    """Process every supported file in the inbox and update the manifest.

    `clock` and `rng` feed the identity assigner; tests pass fixed ones.
    Returns an IngestReport; raises IngestError subclasses on fatal failures.
    """
    clock = clock or _utc_now
    rng = rng or random.Random()

    _ensure_dirs(settings)
    manifest = load_manifest(settings.manifest_path)

    entries = _enumerate_inbox(settings)
    report = IngestReport(manifest_size=len(manifest.images))
    if not entries:
        logger.info("No files to process in %s", settings.inbox_dir)
        return report

    logger.info("Found %d file(s) in %s", len(entries), settings.inbox_dir)
    _process_entries(entries, settings, manifest, clock, rng, report)

    if report.processed:
        merged = merge_manifest(manifest, report.new_records)
        try:
            write_manifest(settings.manifest_path, merged)
        except ManifestWriteError:
            _discard_renditions(report, settings)
            raise
        report.manifest_written = True
        report.manifest_size = len(merged.images)
    else:
        logger.info("No images were processed; manifest left untouched")

    report.removed = _clean_inbox(entries, settings, report)

    _log_summary(report)
    return report


# ---------------------------------------------------------------------------
# Per-file pipeline
# ---------------------------------------------------------------------------

def _process_entries(
    entries: list[Path],
    settings: Settings,
    published: GalleryManifest,
    clock: Callable[[], datetime],
    rng: random.Random,
    report: IngestReport,
) -> None:
    total = len(entries)
    produced: set[str] = set()

    for index, path in enumerate(entries, start=1):
        if not is_supported(path.name):
            logger.warning("  [%d/%d] %s — SKIPPED: not a supported image type", index, total, path.name)
            report.skipped.append(path.name)
            continue

        logger.info("  [%d/%d] Processing %s", index, total, path.name)
        try:
            processed = _process_file(path, settings, published, clock(), rng, produced)
        except FileProcessingError as exc:
            logger.warning("  [%d/%d] %s — FAILED: %s", index, total, path.name, exc.reason)
            report.failed.append(FileFailure(source=path.name, reason=exc.reason))
            continue

        record = processed.record
        produced.add(record.filename)
        report.processed.append(processed)
        logger.info(
            "  [%d/%d] %s → %s (full %dx%d, thumb %dx%d, %.1f%% smaller)",
            index, total, path.name, record.filename,
            record.full_width, record.full_height,
            record.thumb_width, record.thumb_height,
            processed.size_reduction * 100,
        )


def _process_file(
    path: Path,
    settings: Settings,
    published: GalleryManifest,
    now: datetime,
    rng: random.Random,
    produced: set[str],
) -> ProcessedFile:
    decoded = decode(path, path.name, settings.conversion_quality)
    identity = assign_identity(path.name, now, rng)
    _check_collision(path.name, identity.filename, settings, published, produced)

    full_target = resize_target(
        decoded.width, decoded.height, "full", settings.max_dimension, settings.thumb_max_width
    )
    thumb_target = resize_target(
        decoded.width, decoded.height, "thumb", settings.max_dimension, settings.thumb_max_width
    )

    full = encode(decoded, full_target, settings.full_dir / identity.filename, settings.quality)
    try:
        thumb = encode(decoded, thumb_target, settings.thumb_dir / identity.filename, settings.quality)
    except EncodeError:
        # Never leave a full rendition without its thumbnail.
        full.path.unlink(missing_ok=True)
        raise

    record = ImageRecord(
        id=identity.id,
        filename=identity.filename,
        full_width=full.width,
        full_height=full.height,
        thumb_width=thumb.width,
        thumb_height=thumb.height,
        captured_at=identity.captured_at,
    )
    return ProcessedFile(
        source=path.name,
        record=record,
        source_bytes=decoded.source_bytes,
        full_bytes=full.size_bytes,
    )


def _check_collision(
    source: str,
    filename: str,
    settings: Settings,
    published: GalleryManifest,
    produced: set[str],
) -> None:
    """Refuse output names owned by a manifest record or an earlier file in this batch.

    Renditions on disk without a manifest record are leftovers of an aborted
    run and are replaced.
    """
    if filename in produced:
        conflict = "an earlier file in this batch"
    elif published.by_filename(filename) is not None:
        conflict = "an image already in the gallery"
    else:
        if (settings.full_dir / filename).exists() or (settings.thumb_dir / filename).exists():
            logger.info("Replacing unreferenced rendition %s", filename)
        return

    if not settings.allow_overwrite:
        raise FilenameCollisionError(source, f"output name {filename} is already used by {conflict}")
    logger.warning("Overwriting %s, already used by %s", filename, conflict)


# ---------------------------------------------------------------------------
# Inbox
# ---------------------------------------------------------------------------

def _enumerate_inbox(settings: Settings) -> list[Path]:
    inbox = settings.inbox_dir
    if not inbox.exists():
        logger.info("Inbox directory not found: %s", inbox)
        return []
    try:
        return sorted(
            (p for p in inbox.iterdir() if p.is_file() and p.name != settings.placeholder_name),
            key=lambda p: p.name,
        )
    except OSError as exc:
        raise InboxEnumerationError(f"could not list inbox {inbox}: {exc}") from exc


def _clean_inbox(entries: list[Path], settings: Settings, report: IngestReport) -> list[str]:
    if settings.cleanup_policy == "all":
        targets = entries
    else:
        incorporated = {p.source for p in report.processed}
        targets = [p for p in entries if p.name in incorporated]

    removed: list[str] = []
    for path in targets:
        try:
            path.unlink()
        except OSError as exc:
            logger.warning("Could not remove %s from inbox: %s", path.name, exc)
            continue
        removed.append(path.name)

    logger.info("Cleaned up %d file(s) from %s", len(removed), settings.inbox_dir)
    return removed


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

def _ensure_dirs(settings: Settings) -> None:
    for directory in (settings.full_dir, settings.thumb_dir):
        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            raise OutputDirectoryError(f"could not create {directory}: {exc}") from exc


def _discard_renditions(report: IngestReport, settings: Settings) -> None:
    """Remove this batch's renditions after a failed manifest write."""
    for processed in report.processed:
        for directory in (settings.full_dir, settings.thumb_dir):
            path = directory / processed.record.filename
            try:
                path.unlink(missing_ok=True)
            except OSError as exc:
                logger.warning("Could not remove %s: %s", path, exc)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _log_summary(report: IngestReport) -> None:
    logger.info("Ingest complete")
    logger.info("  Processed:     %d", len(report.processed))
    logger.info("  Skipped:       %d", len(report.skipped))
    logger.info("  Failed:        %d", len(report.failed))
    logger.info("  Removed:       %d", len(report.removed))
    logger.info("  Gallery total: %d", report.manifest_size)

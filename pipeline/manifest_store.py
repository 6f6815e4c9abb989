"""Reading, merging and writing the gallery manifest (public/data.json)."""
import logging
import os
import tempfile
from pathlib import Path

from pydantic import ValidationError

from models.manifest import GalleryManifest, ImageRecord
from pipeline.errors import ManifestReadError, ManifestWriteError

logger = logging.getLogger(__name__)


def read_manifest(path: Path) -> GalleryManifest:
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise ManifestReadError(f"could not read {path}: {exc}") from exc
    try:
        return GalleryManifest.model_validate_json(raw)
    except ValidationError as exc:
        raise ManifestReadError(f"{path} is not a valid manifest: {exc}") from exc


def load_manifest(path: Path) -> GalleryManifest:
    """Like `read_manifest`, but a missing or corrupt file yields an empty manifest.

    A broken data.json must never block ingestion; the next write replaces it.
    """
    if not path.exists():
        logger.info("No existing manifest at %s, starting a new one", path)
        return GalleryManifest()
    try:
        manifest = read_manifest(path)
    except ManifestReadError as exc:
        logger.warning("%s — starting with an empty manifest", exc)
        return GalleryManifest()
    logger.info("Loaded manifest with %d image(s)", len(manifest.images))
    return manifest


def merge_manifest(existing: GalleryManifest, new_records: list[ImageRecord]) -> GalleryManifest:
    """New batch first, then everything already published, both in original order."""
    return GalleryManifest(images=[*new_records, *existing.images])


def write_manifest(path: Path, manifest: GalleryManifest) -> None:
    """Atomically replace `path` with the indented JSON form of `manifest`."""
    payload = manifest.model_dump_json(indent=2, by_alias=True) + "\n"
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    except OSError as exc:
        raise ManifestWriteError(f"could not write {path}: {exc}") from exc

    tmp_path = Path(tmp_name)
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(payload)
        os.chmod(tmp_path, 0o644)
        os.replace(tmp_path, path)
    except OSError as exc:
        tmp_path.unlink(missing_ok=True)
        raise ManifestWriteError(f"could not write {path}: {exc}") from exc

    logger.info("Wrote manifest with %d image(s) → %s", len(manifest.images), path)

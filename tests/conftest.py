from io import BytesIO
from pathlib import Path

import pytest
from PIL import Image

from settings import Settings


def make_image(path: Path, size: tuple[int, int], fmt: str | None = None, color="red") -> Path:
    """Write a solid-colour image of `size` to `path` (format from suffix unless given)."""
    Image.new("RGB", size, color).save(path, format=fmt)
    return path


def jpeg_bytes(size: tuple[int, int]) -> bytes:
    buffer = BytesIO()
    Image.new("RGB", size, "blue").save(buffer, format="JPEG", quality=90)
    return buffer.getvalue()


@pytest.fixture
def tmp_settings(tmp_path: Path) -> Settings:
    """Settings pointing at a fresh gallery root.

    Layout mirrors a real deployment:
        uploads/            inbox, tracked by an empty .gitkeep
        public/img/full/    created by the ingest run
        public/img/thumb/   created by the ingest run
        public/data.json    manifest, absent until the first run
    """
    inbox = tmp_path / "uploads"
    inbox.mkdir()
    (inbox / ".gitkeep").touch()
    return Settings(project_dir=tmp_path)

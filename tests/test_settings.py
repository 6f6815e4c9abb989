from pathlib import Path

import pytest
from pydantic import ValidationError

from settings import Settings


def test_settings_defaults():
    s = Settings()
    assert s.project_dir == Path("./site")
    assert s.max_dimension == 1920
    assert s.thumb_max_width == 500
    assert s.quality == 85
    assert s.placeholder_name == ".gitkeep"
    assert s.cleanup_policy == "processed"
    assert s.allow_overwrite is False


def test_settings_derived_paths():
    s = Settings(project_dir=Path("/tmp/gallery"))
    assert s.inbox_dir == Path("/tmp/gallery/uploads")
    assert s.full_dir == Path("/tmp/gallery/public/img/full")
    assert s.thumb_dir == Path("/tmp/gallery/public/img/thumb")
    assert s.manifest_path == Path("/tmp/gallery/public/data.json")


def test_settings_read_from_environment(monkeypatch):
    monkeypatch.setenv("GALLERY_MAX_DIMENSION", "1200")
    monkeypatch.setenv("GALLERY_CLEANUP_POLICY", "all")
    s = Settings()
    assert s.max_dimension == 1200
    assert s.cleanup_policy == "all"


def test_settings_are_immutable():
    s = Settings()
    with pytest.raises(ValidationError):
        s.quality = 50


def test_quality_must_be_percentage():
    with pytest.raises(ValidationError):
        Settings(quality=0)
    with pytest.raises(ValidationError):
        Settings(conversion_quality=101)


def test_dimensions_must_be_positive():
    with pytest.raises(ValidationError):
        Settings(max_dimension=0)
    with pytest.raises(ValidationError):
        Settings(thumb_max_width=-1)


def test_unknown_cleanup_policy_rejected():
    with pytest.raises(ValidationError):
        Settings(cleanup_policy="everything")


def test_log_level_normalised():
    assert Settings(log_level="debug").log_level == "DEBUG"
    with pytest.raises(ValidationError):
        Settings(log_level="chatty")

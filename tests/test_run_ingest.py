from conftest import make_image
from pipeline.manifest_store import read_manifest
from run_ingest import main


def test_exit_zero_on_empty_inbox(tmp_settings):
    assert main(["--project-dir", str(tmp_settings.project_dir)]) == 0


def test_processes_inbox(tmp_settings):
    make_image(tmp_settings.inbox_dir / "a.png", (300, 200))
    assert main(["--project-dir", str(tmp_settings.project_dir)]) == 0
    assert read_manifest(tmp_settings.manifest_path).images[0].filename == "a.webp"


def test_cleanup_flag(tmp_settings):
    (tmp_settings.inbox_dir / "notes.txt").write_text("hello")
    assert main(["--project-dir", str(tmp_settings.project_dir), "--cleanup", "all"]) == 0
    assert not (tmp_settings.inbox_dir / "notes.txt").exists()


def test_exit_one_on_fatal_error(tmp_path):
    (tmp_path / "public").write_text("not a directory")
    assert main(["--project-dir", str(tmp_path)]) == 1


def test_exit_one_on_invalid_configuration(tmp_path, monkeypatch):
    monkeypatch.setenv("GALLERY_QUALITY", "0")
    assert main(["--project-dir", str(tmp_path)]) == 1

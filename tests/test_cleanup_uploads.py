import os
import time

from core.config import reset_settings
from gateway.uploads import UploadedFile, UploadStore
from scripts.cleanup_uploads import cleanup_uploads, main


def _age(path, days):
    stamp = time.time() - days * 86400
    os.utime(path, (stamp, stamp))


def test_store_names_and_reopens(tmp_path):
    store = UploadStore(tmp_path / "uploads")
    first = store.save("scan.pdf", b"%PDF-1.7")
    second = store.save("noext", b"raw")

    assert first.path.parent == tmp_path / "uploads"
    assert first.path.suffix == ".pdf"
    assert second.path.suffix == ""
    assert first.path.name != second.path.name
    assert first.filename == "scan.pdf"
    assert first.read() == b"%PDF-1.7"
    with first.open() as a, first.open() as b:
        assert a.read(4) == b.read(4) == b"%PDF"


def test_in_memory_upload():
    upload = UploadedFile.from_bytes("a.txt", b"abc")
    assert upload.read() == b"abc"
    assert upload.read() == b"abc"


def test_cleanup_removes_only_expired(tmp_path):
    old = tmp_path / "1-old.png"
    fresh = tmp_path / "2-new.png"
    old.write_bytes(b"x" * 10)
    fresh.write_bytes(b"y")
    _age(old, 10)

    removed = cleanup_uploads(tmp_path, ttl_days=7)

    assert removed == [old]
    assert not old.exists()
    assert fresh.exists()


def test_cleanup_dry_run_keeps_files(tmp_path):
    old = tmp_path / "old.bin"
    old.write_bytes(b"x")
    _age(old, 30)

    assert cleanup_uploads(tmp_path, ttl_days=7, dry_run=True) == [old]
    assert old.exists()


def test_cleanup_missing_directory(tmp_path):
    assert cleanup_uploads(tmp_path / "missing", ttl_days=1) == []


def test_cli_entry_point(tmp_path):
    old = tmp_path / "old.bin"
    old.write_bytes(b"x")
    _age(old, 3)

    main(["--upload-dir", str(tmp_path), "--ttl-days", "1", "-v"])

    assert not old.exists()


def test_cli_defaults_to_configured_upload_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("UPLOAD_DIR", str(tmp_path))
    old = tmp_path / "old.bin"
    old.write_bytes(b"x")
    _age(old, 10)

    reset_settings()
    try:
        main(["--ttl-days", "7"])
    finally:
        reset_settings()

    assert not old.exists()

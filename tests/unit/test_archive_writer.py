"""Unit tests for packing files and directory trees."""

from __future__ import annotations

import hashlib
import zipfile
from pathlib import Path

import pytest
from packetzip.archive import ArchiveService
from packetzip.core.config import ConfigResolver
from packetzip.core.errors import ArchiveIOError, ArchiveNotFoundError, ConfigError, ErrorKind


def _names(archive: Path) -> list[str]:
    with zipfile.ZipFile(archive) as zf:
        return zf.namelist()


def _sha256(p: Path) -> str:
    return hashlib.sha256(p.read_bytes()).hexdigest()


def test_zip_file_single_entry_named_by_basename(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    src = tmp_path / "in" / "report.txt"
    src.parent.mkdir()
    src.write_bytes(b"quarterly numbers\n" * 100)
    out = tmp_path / "report.zip"

    assert archive_service.zip_file(src, out) is True

    with zipfile.ZipFile(out) as zf:
        assert zf.namelist() == ["report.txt"]
        info = zf.getinfo("report.txt")
        assert info.compress_type == zipfile.ZIP_DEFLATED
        assert zf.read("report.txt") == src.read_bytes()
        assert zf.testzip() is None


def test_zip_file_overwrites_existing_destination(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    out = tmp_path / "out.zip"
    out.write_bytes(b"old contents that are not a zip")
    src = tmp_path / "a.txt"
    src.write_bytes(b"a")

    archive_service.zip_file(src, out)

    assert _names(out) == ["a.txt"]


def test_zip_file_missing_source_raises_not_found(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    out = tmp_path / "out.zip"

    with pytest.raises(ArchiveNotFoundError) as excinfo:
        archive_service.zip_file(tmp_path / "nonexistent" / "path.txt", out)

    assert excinfo.value.kind == ErrorKind.NOT_FOUND
    assert excinfo.value.error_code == "PZ-ARC-001"
    assert isinstance(excinfo.value.__cause__, FileNotFoundError)
    # The sink is opened first, so an empty archive may remain; it has no entries.
    if out.exists():
        assert _names(out) == []


def test_zip_file_destination_in_missing_directory(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    src = tmp_path / "a.txt"
    src.write_bytes(b"a")

    with pytest.raises(ArchiveNotFoundError):
        archive_service.zip_file(src, tmp_path / "missing" / "out.zip")


def test_zip_multiple_file_writes_all_entries(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    sources = []
    for name, payload in [("one.txt", b"1" * 10), ("two.bin", b"\x00\x02" * 700), ("three", b"")]:
        p = tmp_path / name
        p.write_bytes(payload)
        sources.append(p)
    out = tmp_path / "multi.zip"

    assert archive_service.zip_multiple_file(sources, out) is True

    with zipfile.ZipFile(out) as zf:
        assert zf.namelist() == ["one.txt", "two.bin", "three"]
        for p in sources:
            assert zf.read(p.name) == p.read_bytes()


def test_zip_multiple_file_reopen_per_file_keeps_only_last(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    sources = []
    for name in ("a.txt", "b.txt", "c.txt"):
        p = tmp_path / name
        p.write_bytes(name.encode())
        sources.append(p)
    out = tmp_path / "legacy.zip"

    archive_service.zip_multiple_file(sources, out, reopen_per_file=True)

    assert _names(out) == ["c.txt"]


def test_zip_multiple_file_ignores_reopen_setting_from_environment(
    archive_service: ArchiveService, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setenv("PACKETZIP_ARCHIVES_MULTI_FILE_REOPEN_PER_FILE", "1")
    sources = []
    for name in ("a.txt", "b.txt", "c.txt"):
        p = tmp_path / name
        p.write_bytes(name.encode())
        sources.append(p)
    out = tmp_path / "all.zip"

    assert archive_service.zip_multiple_file(sources, out) is True

    assert _names(out) == ["a.txt", "b.txt", "c.txt"]


def test_zip_multiple_file_duplicate_basename_is_io_failure(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    (tmp_path / "a").mkdir()
    (tmp_path / "b").mkdir()
    (tmp_path / "a" / "x.txt").write_bytes(b"1")
    (tmp_path / "b" / "x.txt").write_bytes(b"2")

    with pytest.raises(ArchiveIOError) as excinfo:
        archive_service.zip_multiple_file(
            [tmp_path / "a" / "x.txt", tmp_path / "b" / "x.txt"], tmp_path / "dup.zip"
        )

    assert excinfo.value.kind == ErrorKind.IO


def test_zip_multiple_file_missing_member_aborts(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    a = tmp_path / "a.txt"
    a.write_bytes(b"a")

    with pytest.raises(ArchiveNotFoundError):
        archive_service.zip_multiple_file([a, tmp_path / "gone.txt"], tmp_path / "m.zip")


def test_zip_directory_entry_names_and_hidden_exclusion(
    archive_service: ArchiveService, sample_tree: Path, tmp_path: Path
) -> None:
    out = tmp_path / "tree.zip"

    assert archive_service.zip_directory(sample_tree, out) is True

    names = _names(out)
    assert names == [
        "docs/empty/",
        "docs/readme.txt",
        "docs/sub/data.bin",
        "docs/sub/deeper/note.txt",
    ]
    assert not any(".secret" in n or ".cache" in n for n in names)


def test_zip_directory_without_markers_emits_only_files(
    archive_service: ArchiveService, sample_tree: Path, tmp_path: Path
) -> None:
    out = tmp_path / "tree.zip"

    archive_service.zip_directory(sample_tree, out, directory_markers=False)

    with zipfile.ZipFile(out) as zf:
        assert all(not info.is_dir() for info in zf.infolist())
        assert "docs/empty/" not in zf.namelist()


def test_zip_directory_dir_with_only_hidden_children_gets_marker(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    root = tmp_path / "pkg"
    (root / "keep").mkdir(parents=True)
    (root / "keep" / ".gitkeep").write_bytes(b"")
    out = tmp_path / "pkg.zip"

    archive_service.zip_directory(root, out)

    assert _names(out) == ["pkg/keep/"]


def test_zip_directory_hidden_root_writes_nothing(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    root = tmp_path / ".private"
    root.mkdir()
    (root / "a.txt").write_bytes(b"a")
    out = tmp_path / "private.zip"

    assert archive_service.zip_directory(root, out) is True

    assert _names(out) == []


def test_zip_directory_missing_source_raises_not_found(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    with pytest.raises(ArchiveNotFoundError):
        archive_service.zip_directory(tmp_path / "no_such_dir", tmp_path / "x.zip")


def test_zip_directory_deterministic(sample_tree: Path, tmp_path: Path) -> None:
    resolver = ConfigResolver(
        cli_args={"archives": {"deterministic": True}},
        user_config_path=tmp_path / "nonexistent.yaml",
        system_config_path=tmp_path / "nonexistent_system.yaml",
    )
    svc = ArchiveService(resolver)

    svc.zip_directory(sample_tree, tmp_path / "a1.zip")
    svc.zip_directory(sample_tree, tmp_path / "a2.zip")

    assert _sha256(tmp_path / "a1.zip") == _sha256(tmp_path / "a2.zip")


def test_zip_directory_does_not_touch_source(
    archive_service: ArchiveService, sample_tree: Path, tmp_path: Path
) -> None:
    before = sorted(p.relative_to(sample_tree).as_posix() for p in sample_tree.rglob("*"))

    archive_service.zip_directory(sample_tree, tmp_path / "tree.zip")

    after = sorted(p.relative_to(sample_tree).as_posix() for p in sample_tree.rglob("*"))
    assert before == after


def test_zip_directory_skips_archive_written_inside_source(
    archive_service: ArchiveService, tmp_path: Path
) -> None:
    src = tmp_path / "d"
    src.mkdir()
    (src / "a.txt").write_bytes(b"a")
    out = src / "z.zip"

    archive_service.zip_directory(src, out)

    assert _names(out) == ["d/a.txt"]


@pytest.mark.parametrize("raw", ["big", "0"])
def test_invalid_buffer_setting_raises_io_failure(
    archive_service: ArchiveService, tmp_path: Path, monkeypatch: pytest.MonkeyPatch, raw: str
) -> None:
    monkeypatch.setenv("PACKETZIP_ARCHIVES_COPY_BUFFER_SIZE", raw)
    src = tmp_path / "a.txt"
    src.write_bytes(b"a")

    with pytest.raises(ArchiveIOError, match="Invalid archive settings") as excinfo:
        archive_service.zip_file(src, tmp_path / "a.zip")

    assert excinfo.value.kind == ErrorKind.IO
    assert isinstance(excinfo.value.__cause__, ConfigError)
    assert not (tmp_path / "a.zip").exists()

"""Archive writer: single file, multiple files, and directory trees.

Every payload is deflate-compressed and streamed through copy_stream, so no
source file is ever read fully into memory. Entry names always use '/'.
"""

from __future__ import annotations

import time
import zipfile
from collections.abc import Sequence
from pathlib import Path

from packetzip.core.errors import ArchiveIOError
from packetzip.core.logging import get_logger

from .hidden import is_hidden
from .streams import copy_stream
from .types import OpTotals, PackOptions, PathArg

_logger = get_logger(__name__)

# Entries at or above this size need zip64 headers up front when streamed.
_ZIP64_THRESHOLD = (1 << 31) - 1
_FIXED_DATE_TIME = (1980, 1, 1, 0, 0, 0)


def _open_sink(path: PathArg) -> zipfile.ZipFile:
    return zipfile.ZipFile(path, "w", compression=zipfile.ZIP_DEFLATED)


def _zipinfo_for(path: Path, arcname: str, options: PackOptions) -> zipfile.ZipInfo:
    zi = zipfile.ZipInfo.from_file(path, arcname, strict_timestamps=False)
    zi.compress_type = zipfile.ZIP_DEFLATED
    if options.deterministic:
        zi.date_time = _FIXED_DATE_TIME
        zi.external_attr = 0o644 << 16
    return zi


def _write_file_entry(
    zf: zipfile.ZipFile,
    path: Path,
    arcname: str,
    options: PackOptions,
    seen: set[str],
) -> int:
    if arcname in seen:
        raise ArchiveIOError("Duplicate entry name", path=arcname)

    with open(path, "rb") as src:
        zi = _zipinfo_for(path, arcname, options)
        with zf.open(zi, "w", force_zip64=zi.file_size >= _ZIP64_THRESHOLD) as dst:
            written = copy_stream(src, dst, options.buffer_size)

    seen.add(arcname)
    _logger.debug(f"archive.entry written name={arcname!r} bytes={written}")
    return written


def _write_dir_marker(
    zf: zipfile.ZipFile, name: str, options: PackOptions, seen: set[str]
) -> None:
    arcname = f"{name}/"
    if arcname in seen:
        raise ArchiveIOError("Duplicate entry name", path=arcname)

    date_time = _FIXED_DATE_TIME if options.deterministic else time.localtime()[:6]
    zi = zipfile.ZipInfo(arcname, date_time=date_time)
    zi.external_attr = (0o40755 << 16) | 0x10  # unix dir mode + MS-DOS directory flag
    zf.writestr(zi, b"")

    seen.add(arcname)
    _logger.debug(f"archive.entry written name={arcname!r} directory=True")


def zip_file(source: Path, destination: PathArg, options: PackOptions) -> OpTotals:
    """Write one file as the only entry of a new archive, named by its base name."""
    with _open_sink(destination) as zf:
        written = _write_file_entry(zf, source, source.name, options, set())
    return OpTotals(entries=1, bytes=written)


def zip_multiple_file(
    sources: Sequence[Path],
    destination: PathArg,
    options: PackOptions,
    *,
    reopen_per_file: bool = False,
) -> OpTotals:
    """Write each source as one entry named by its base name.

    With reopen_per_file the destination is truncated before every file, so
    only the last file survives. That mirrors archives produced by older
    releases and is off by default.
    """
    if reopen_per_file:
        total = 0
        for source in sources:
            with _open_sink(destination) as zf:
                total += _write_file_entry(zf, source, source.name, options, set())
        return OpTotals(entries=min(len(sources), 1), bytes=total)

    total = 0
    seen: set[str] = set()
    with _open_sink(destination) as zf:
        for source in sources:
            total += _write_file_entry(zf, source, source.name, options, seen)
    return OpTotals(entries=len(seen), bytes=total)


def _zip_tree(
    zf: zipfile.ZipFile,
    path: Path,
    name: str,
    options: PackOptions,
    seen: set[str],
    output: Path,
) -> OpTotals:
    if is_hidden(path):
        _logger.debug(f"archive.entry skipped hidden path={str(path)!r}")
        return OpTotals(entries=0, bytes=0)

    if not path.is_dir():
        written = _write_file_entry(zf, path, name, options, seen)
        return OpTotals(entries=1, bytes=written)

    children = list(path.iterdir())
    if options.sort_entries:
        children.sort(key=lambda p: p.name)

    entries = 0
    total = 0
    for child in children:
        if child.name == output.name and child.resolve() == output:
            _logger.debug(f"archive.entry skipped output path={str(child)!r}")
            continue
        sub = _zip_tree(zf, child, f"{name}/{child.name}", options, seen, output)
        entries += sub.entries
        total += sub.bytes

    if entries == 0 and options.directory_markers:
        _write_dir_marker(zf, name, options, seen)
        entries = 1
    return OpTotals(entries=entries, bytes=total)


def zip_directory(source: Path, destination: PathArg, options: PackOptions) -> OpTotals:
    """Write a directory tree into one archive.

    Entry names start with the source directory's own name. Hidden files and
    directories are skipped together with everything below them, and so is
    the archive being written when it lies inside the tree.
    """
    root_name = source.name or source.resolve().name
    output = Path(destination).resolve()
    with _open_sink(destination) as zf:
        return _zip_tree(zf, source, root_name, options, set(), output)

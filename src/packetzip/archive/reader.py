"""Archive reader: flat and directory-creating extraction.

Entries are processed strictly in container order; each entry stream is
closed before the next one is opened.
"""

from __future__ import annotations

import os
import zipfile
from pathlib import Path

from packetzip.core.errors import ArchiveIOError, ArchiveNullError
from packetzip.core.logging import get_logger

from .streams import COPY_BUFFER_SIZE, EXTRACT_BUFFER_SIZE, copy_stream
from .types import ArchiveEntry, OpTotals, PathArg

_logger = get_logger(__name__)


def _entry_name(info: zipfile.ZipInfo | None) -> str:
    if info is None or not info.filename:
        raise ArchiveNullError("Archive entry has no name")
    return info.filename


def _extract_entry(zf: zipfile.ZipFile, info: zipfile.ZipInfo, out: Path, buffer_size: int) -> int:
    with zf.open(info, "r") as src, open(out, "wb") as dst:
        return copy_stream(src, dst, buffer_size)


def unzip_file(
    archive: PathArg, prefix: str, *, buffer_size: int = COPY_BUFFER_SIZE
) -> OpTotals:
    """Extract every entry to prefix + entry name.

    The prefix is concatenated as-is (no separator is inserted) and no
    directories are created, so this only suits archives with flat entries.
    """
    files = 0
    total = 0
    with zipfile.ZipFile(archive, "r") as zf:
        for info in zf.infolist():
            name = _entry_name(info)
            out = Path(f"{prefix}{name}")
            total += _extract_entry(zf, info, out, buffer_size)
            files += 1
            _logger.debug(f"archive.entry extracted name={name!r} path={str(out)!r}")
    return OpTotals(entries=files, bytes=total)


def _ensure_inside(out: Path, root: Path, name: str) -> None:
    try:
        out.resolve().relative_to(root)
    except ValueError:
        raise ArchiveIOError("Archive entry escapes destination", path=name) from None


def unzip_directory(
    archive: PathArg, destination: PathArg, *, buffer_size: int = EXTRACT_BUFFER_SIZE
) -> OpTotals:
    """Extract an archive below destination, recreating its directory structure.

    destination is created when missing; calling this twice on the same
    destination is fine. Directory-marker entries become directories, and the
    parent directory of every file entry is created on demand.
    """
    dest = Path(destination)
    dest.mkdir(parents=True, exist_ok=True)
    dest_resolved = dest.resolve()

    entries = 0
    total = 0
    with zipfile.ZipFile(archive, "r") as zf:
        for info in zf.infolist():
            name = _entry_name(info)
            out = Path(f"{os.fspath(destination)}{os.sep}{name}")
            _ensure_inside(out, dest_resolved, name)

            if info.is_dir():
                out.mkdir(parents=True, exist_ok=True)
                _logger.debug(f"archive.entry created directory name={name!r}")
            else:
                out.parent.mkdir(parents=True, exist_ok=True)
                total += _extract_entry(zf, info, out, buffer_size)
                _logger.debug(f"archive.entry extracted name={name!r} path={str(out)!r}")
            entries += 1
    return OpTotals(entries=entries, bytes=total)


def list_entries(archive: PathArg) -> list[ArchiveEntry]:
    """Return the entries of an archive in container order."""
    with zipfile.ZipFile(archive, "r") as zf:
        return [
            ArchiveEntry(
                name=_entry_name(info),
                is_dir=info.is_dir(),
                size=int(info.file_size),
                compressed_size=int(info.compress_size),
            )
            for info in zf.infolist()
        ]

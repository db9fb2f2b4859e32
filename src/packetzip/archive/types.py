"""Archive capability types.

All public strings and paths must be ASCII-safe in logs.
"""

from __future__ import annotations

import os
from dataclasses import dataclass

from .streams import COPY_BUFFER_SIZE

PathArg = str | os.PathLike[str]


@dataclass(frozen=True)
class ArchiveEntry:
    """One entry of an archive, in container order."""

    name: str
    is_dir: bool
    size: int
    compressed_size: int


@dataclass(frozen=True)
class PackOptions:
    buffer_size: int = COPY_BUFFER_SIZE
    sort_entries: bool = True
    directory_markers: bool = True
    deterministic: bool = False


@dataclass(frozen=True)
class OpTotals:
    """Counts reported by a pack or unpack run."""

    entries: int
    bytes: int

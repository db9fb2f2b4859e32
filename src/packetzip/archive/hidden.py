"""Hidden filesystem entry detection."""

from __future__ import annotations

import os
import stat
from pathlib import Path


def is_hidden(path: Path) -> bool:
    """Return True when path is a hidden file or directory.

    POSIX: the base name starts with a dot.
    Windows: the entry carries FILE_ATTRIBUTE_HIDDEN (dot names count too).
    """
    if path.name.startswith("."):
        return True
    if os.name != "nt":
        return False
    try:
        st = os.stat(path, follow_symlinks=False)
    except OSError:
        return False
    attrs = getattr(st, "st_file_attributes", 0)
    return bool(attrs & stat.FILE_ATTRIBUTE_HIDDEN)

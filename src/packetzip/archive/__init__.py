"""Archive capability package."""

from .service import ArchiveService, configure, get_archive_service
from .streams import COPY_BUFFER_SIZE, EXTRACT_BUFFER_SIZE, copy_stream
from .types import ArchiveEntry, PackOptions

__all__ = [
    "COPY_BUFFER_SIZE",
    "EXTRACT_BUFFER_SIZE",
    "ArchiveEntry",
    "ArchiveService",
    "PackOptions",
    "configure",
    "copy_stream",
    "get_archive_service",
]

"""packetzip - pack files and directory trees into zip archives and back.

Public operations return True on success and raise an ArchiveError subclass
(ArchiveNotFoundError, ArchiveIOError, ArchiveNullError) on failure.
"""

__version__ = "1.0.0"

from packetzip.archive import ArchiveEntry, ArchiveService, configure, get_archive_service
from packetzip.archive.service import (
    list_entries,
    unzip_directory,
    unzip_file,
    zip_directory,
    zip_file,
    zip_multiple_file,
)
from packetzip.core.config import ConfigResolver
from packetzip.core.errors import (
    ArchiveError,
    ArchiveIOError,
    ArchiveNotFoundError,
    ArchiveNullError,
    ConfigError,
    ErrorKind,
    PacketZipError,
)

__all__ = [
    # Operations
    "zip_file",
    "zip_multiple_file",
    "zip_directory",
    "unzip_file",
    "unzip_directory",
    "list_entries",
    # Service
    "ArchiveService",
    "ArchiveEntry",
    "configure",
    "get_archive_service",
    "ConfigResolver",
    # Errors
    "PacketZipError",
    "ConfigError",
    "ArchiveError",
    "ArchiveNotFoundError",
    "ArchiveIOError",
    "ArchiveNullError",
    "ErrorKind",
]

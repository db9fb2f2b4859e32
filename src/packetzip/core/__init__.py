"""Shared infrastructure: configuration, errors, logging, diagnostics."""

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
from packetzip.core.events import EventBus, get_event_bus
from packetzip.core.logging import (
    VerbosityLevel,
    get_logger,
    get_verbosity,
    set_colors,
    set_verbosity,
)

__all__ = [
    "ArchiveError",
    "ArchiveIOError",
    "ArchiveNotFoundError",
    "ArchiveNullError",
    "ConfigError",
    "ConfigResolver",
    "ErrorKind",
    "EventBus",
    "PacketZipError",
    "VerbosityLevel",
    "get_event_bus",
    "get_logger",
    "get_verbosity",
    "set_colors",
    "set_verbosity",
]

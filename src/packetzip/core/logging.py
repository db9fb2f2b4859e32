"""Console logging for packetzip.

Three verbosity levels gate what is printed and published on the LogBus:
QUIET shows warnings and errors, NORMAL adds one summary line per operation,
DEBUG adds one line per archive entry.
"""

from __future__ import annotations

import sys
from enum import IntEnum

from packetzip.core.log_bus import LogRecord, get_log_bus


class VerbosityLevel(IntEnum):
    QUIET = 0
    NORMAL = 1
    DEBUG = 2


_VERBOSITY = VerbosityLevel.NORMAL
_USE_COLORS = True

_ANSI = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
}
_ANSI_RESET = "\033[0m"


def set_verbosity(level: int | VerbosityLevel) -> None:
    global _VERBOSITY
    _VERBOSITY = VerbosityLevel(level)


def get_verbosity() -> VerbosityLevel:
    return _VERBOSITY


def apply_logging_policy(level_name: str) -> None:
    """Set verbosity from a name returned by ConfigResolver.resolve_logging_level."""
    set_verbosity(VerbosityLevel[level_name.upper()])


def set_colors(enabled: bool) -> None:
    global _USE_COLORS
    _USE_COLORS = enabled


class PacketZipLogger:
    """Named logger; records go to the LogBus, then to stdout (errors to stderr)."""

    def __init__(self, name: str) -> None:
        self.name = name

    def _emit(self, threshold: VerbosityLevel, level_name: str, message: str) -> None:
        if threshold > _VERBOSITY:
            return

        tag = f"[{level_name.lower()}]"
        get_log_bus().publish(
            LogRecord(level_name=level_name, plain=f"{tag} {message}", logger_name=self.name)
        )

        stream = sys.stderr if level_name == "ERROR" else sys.stdout
        if _USE_COLORS and stream.isatty():
            tag = f"{_ANSI[level_name]}{tag}{_ANSI_RESET}"
        print(f"{tag} {message}", file=stream)

    def debug(self, message: str) -> None:
        self._emit(VerbosityLevel.DEBUG, "DEBUG", message)

    def info(self, message: str) -> None:
        self._emit(VerbosityLevel.NORMAL, "INFO", message)

    def warning(self, message: str) -> None:
        self._emit(VerbosityLevel.QUIET, "WARNING", message)

    def error(self, message: str) -> None:
        self._emit(VerbosityLevel.QUIET, "ERROR", message)


_LOGGERS: dict[str, PacketZipLogger] = {}


def get_logger(name: str = __name__) -> PacketZipLogger:
    """Return the shared logger for name (usually the calling module's __name__)."""
    return _LOGGERS.setdefault(name, PacketZipLogger(name))

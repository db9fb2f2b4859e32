"""Error handling with friendly messages."""

from __future__ import annotations

from enum import StrEnum


class PacketZipError(Exception):
    """Base exception for all packetzip errors."""

    def __init__(self, message: str, suggestion: str | None = None) -> None:
        self.message = message
        self.suggestion = suggestion
        super().__init__(message)

    def __str__(self) -> str:
        if self.suggestion:
            return f"{self.message}\nSuggestion: {self.suggestion}"
        return self.message


class ConfigError(PacketZipError):
    """Configuration error."""

    pass


class ErrorKind(StrEnum):
    """Failure kinds raised by archive operations."""

    NOT_FOUND = "not_found"
    IO = "io"
    NULL = "null"


class ArchiveError(PacketZipError):
    """Archive operation failed.

    Carries a stable error code and the kind of failure so callers can decide
    between retry, abort, or surfacing the error further up.
    """

    kind: ErrorKind = ErrorKind.IO
    error_code: str = "PZ-ARC-000"
    default_text: str = "Archive operation failed"
    default_suggestion: str | None = None

    def __init__(
        self,
        error_text: str | None = None,
        *,
        path: str | None = None,
        cause: BaseException | None = None,
        suggestion: str | None = None,
    ) -> None:
        self.error_text = error_text or self.default_text
        self.path = path
        self.cause = cause
        message = f"[{self.error_code}] {self.error_text}"
        if path is not None:
            message = f"{message}: {path}"
        super().__init__(message, suggestion or self.default_suggestion)


class ArchiveNotFoundError(ArchiveError):
    """A source file, archive, or output path could not be opened."""

    kind = ErrorKind.NOT_FOUND
    error_code = "PZ-ARC-001"
    default_text = "File not found or not accessible"
    default_suggestion = "Check that the path exists and is readable"


class ArchiveIOError(ArchiveError):
    """Reading, writing, or closing a stream failed."""

    kind = ErrorKind.IO
    error_code = "PZ-ARC-002"
    default_text = "Unable to read or write archive data"
    default_suggestion = "Delete the partial output and retry"


class ArchiveNullError(ArchiveError):
    """A required path or entry name was missing."""

    kind = ErrorKind.NULL
    error_code = "PZ-ARC-003"
    default_text = "Required value is missing"

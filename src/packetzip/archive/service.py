"""Archive capability service.

Stateless front door for packing and unpacking: resolves tunables from the
ConfigResolver, translates low-level failures into ArchiveError subclasses,
and emits operation.start / operation.end diagnostics for every call.

Every public operation returns True on success and raises
ArchiveNotFoundError, ArchiveIOError or ArchiveNullError on failure. A failed
operation may leave a partial archive or partial extraction behind; callers
should delete it before retrying.
"""

from __future__ import annotations

import os
import time
import traceback
import zipfile
import zlib
from collections.abc import Iterator, Sequence
from contextlib import contextmanager
from pathlib import Path
from typing import Any

from packetzip.core.config import ConfigResolver
from packetzip.core.diagnostics import build_envelope, install_jsonl_sink
from packetzip.core.errors import (
    ArchiveError,
    ConfigError,
    ArchiveIOError,
    ArchiveNotFoundError,
    ArchiveNullError,
)
from packetzip.core.events import get_event_bus
from packetzip.core.logging import apply_logging_policy, get_logger, set_colors

from . import reader, writer
from .types import ArchiveEntry, OpTotals, PackOptions, PathArg

_logger = get_logger(__name__)

# Raised when a path cannot be opened at all.
_NOT_FOUND_ERRORS = (FileNotFoundError, IsADirectoryError, NotADirectoryError, PermissionError)
_IO_ERRORS = (OSError, zipfile.BadZipFile, zlib.error, EOFError, RuntimeError)


def _short_traceback(*, max_lines: int = 20) -> str:
    tb_lines = traceback.format_exc().strip().splitlines()
    return "\n".join(tb_lines[-max_lines:])


def _safe_publish(event: str, payload: dict[str, Any]) -> None:
    try:
        get_event_bus().publish(event, payload)
    except Exception:
        # Diagnostics emission must never change the outcome of an operation.
        return


@contextmanager
def _observe_operation(*, operation: str, base: dict[str, Any]) -> Iterator[dict[str, Any]]:
    start = time.perf_counter()

    _safe_publish(
        "operation.start",
        build_envelope(
            event="operation.start", component="archive", operation=operation, data=dict(base)
        ),
    )

    summary: dict[str, Any] = {}
    try:
        yield summary
    except Exception as e:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(
            {
                "status": "failed",
                "duration_ms": duration_ms,
                "error_type": type(e).__name__,
                "error_code": getattr(e, "error_code", None),
                "error_message": str(e),
                "traceback": _short_traceback(),
            }
        )
        _safe_publish(
            "operation.end",
            build_envelope(
                event="operation.end", component="archive", operation=operation, data=end_data
            ),
        )
        _logger.warning(
            f"{operation} status=failed duration_ms={duration_ms} "
            f"error_type={type(e).__name__} error_code={end_data['error_code']!r} "
            f"source={base.get('source')!r} destination={base.get('destination')!r}"
        )
        raise
    else:
        duration_ms = int((time.perf_counter() - start) * 1000)
        end_data = dict(base)
        end_data.update(summary)
        end_data.update({"status": "succeeded", "duration_ms": duration_ms})
        _safe_publish(
            "operation.end",
            build_envelope(
                event="operation.end", component="archive", operation=operation, data=end_data
            ),
        )
        _logger.info(
            f"{operation} status=succeeded duration_ms={duration_ms} "
            f"source={base.get('source')!r} destination={base.get('destination')!r} "
            f"entries={end_data.get('entries')!r} bytes={end_data.get('bytes')!r}"
        )


@contextmanager
def _archive_errors(path: str) -> Iterator[None]:
    try:
        yield
    except ArchiveError:
        raise
    except ConfigError as e:
        raise ArchiveIOError(
            f"Invalid archive settings ({e.message})",
            path=path,
            cause=e,
            suggestion="Fix the archives.* value in the environment or config file",
        ) from e
    except _NOT_FOUND_ERRORS as e:
        missing = os.fsdecode(e.filename) if e.filename is not None else path
        raise ArchiveNotFoundError(path=missing, cause=e) from e
    except _IO_ERRORS as e:
        raise ArchiveIOError(
            f"{ArchiveIOError.default_text} ({type(e).__name__}: {e})", path=path, cause=e
        ) from e


def _require(**values: Any) -> None:
    for name, value in values.items():
        if value is None:
            raise ArchiveNullError(f"{name} is required")


def _record(summary: dict[str, Any], totals: OpTotals) -> None:
    summary["entries"] = totals.entries
    summary["bytes"] = totals.bytes


class ArchiveService:
    """Archive capability.

    Holds no state besides the resolver, so one instance can be shared freely
    as long as concurrent calls target different destinations.
    """

    def __init__(self, resolver: ConfigResolver | None = None) -> None:
        self._resolver = resolver or ConfigResolver()

    def zip_file(self, source_path: PathArg, destination_archive_path: PathArg) -> bool:
        """Pack a single file into a new archive under its base name."""
        base = {"source": _as_str(source_path), "destination": _as_str(destination_archive_path)}
        with _observe_operation(operation="archive.zip_file", base=base) as summary:
            _require(source_path=source_path, destination_archive_path=destination_archive_path)
            with _archive_errors(base["source"]):
                options = self._pack_options()
                totals = writer.zip_file(Path(source_path), destination_archive_path, options)
            _record(summary, totals)
        return True

    def zip_multiple_file(
        self,
        source_paths: Sequence[PathArg],
        destination_archive_path: PathArg,
        *,
        reopen_per_file: bool = False,
    ) -> bool:
        """Pack several files into one archive, one entry per file base name.

        Failure on any file aborts the run; entries written before it are not
        rolled back. reopen_per_file=True recreates the archive for every file,
        so only the last one is kept, as archives from older releases were.
        """
        base = {
            "source": None if source_paths is None else [_as_str(p) for p in source_paths],
            "destination": _as_str(destination_archive_path),
        }
        with _observe_operation(operation="archive.zip_multiple_file", base=base) as summary:
            _require(
                source_paths=source_paths, destination_archive_path=destination_archive_path
            )
            for i, p in enumerate(source_paths):
                if p is None:
                    raise ArchiveNullError(f"source_paths[{i}] is required")

            with _archive_errors(base["destination"]):
                options = self._pack_options()
                totals = writer.zip_multiple_file(
                    [Path(p) for p in source_paths],
                    destination_archive_path,
                    options,
                    reopen_per_file=reopen_per_file,
                )
            _record(summary, totals)
        return True

    def zip_directory(
        self,
        source_directory_path: PathArg,
        destination_archive_path: PathArg,
        *,
        sort_entries: bool | None = None,
        directory_markers: bool | None = None,
    ) -> bool:
        """Pack a directory tree, skipping hidden entries."""
        base = {
            "source": _as_str(source_directory_path),
            "destination": _as_str(destination_archive_path),
        }
        with _observe_operation(operation="archive.zip_directory", base=base) as summary:
            _require(
                source_directory_path=source_directory_path,
                destination_archive_path=destination_archive_path,
            )
            with _archive_errors(base["source"]):
                options = self._pack_options(
                    sort_entries=sort_entries, directory_markers=directory_markers
                )
                totals = writer.zip_directory(
                    Path(source_directory_path), destination_archive_path, options
                )
            _record(summary, totals)
        return True

    def unzip_file(self, archive_path: PathArg, destination_prefix: PathArg) -> bool:
        """Extract a flat archive by concatenating destination_prefix and entry name."""
        base = {"source": _as_str(archive_path), "destination": _as_str(destination_prefix)}
        with _observe_operation(operation="archive.unzip_file", base=base) as summary:
            _require(archive_path=archive_path, destination_prefix=destination_prefix)
            with _archive_errors(base["source"]):
                buffer_size = self._resolver.resolve_int("archives.copy_buffer_size", minimum=1)
                totals = reader.unzip_file(
                    archive_path, os.fspath(destination_prefix), buffer_size=buffer_size
                )
            _record(summary, totals)
        return True

    def unzip_directory(self, archive_path: PathArg, destination_root: PathArg) -> bool:
        """Extract an archive below destination_root, creating directories as needed."""
        base = {"source": _as_str(archive_path), "destination": _as_str(destination_root)}
        with _observe_operation(operation="archive.unzip_directory", base=base) as summary:
            _require(archive_path=archive_path, destination_root=destination_root)
            with _archive_errors(base["source"]):
                buffer_size = self._resolver.resolve_int("archives.extract_buffer_size", minimum=1)
                totals = reader.unzip_directory(
                    archive_path, destination_root, buffer_size=buffer_size
                )
            _record(summary, totals)
        return True

    def list_entries(self, archive_path: PathArg) -> list[ArchiveEntry]:
        """Return archive entries in container order."""
        _require(archive_path=archive_path)
        with _archive_errors(_as_str(archive_path)):
            return reader.list_entries(archive_path)

    def _pack_options(
        self,
        *,
        sort_entries: bool | None = None,
        directory_markers: bool | None = None,
    ) -> PackOptions:
        r = self._resolver
        return PackOptions(
            buffer_size=r.resolve_int("archives.copy_buffer_size", minimum=1),
            sort_entries=(
                r.resolve_bool("archives.sort_entries") if sort_entries is None else sort_entries
            ),
            directory_markers=(
                r.resolve_bool("archives.directory_markers")
                if directory_markers is None
                else directory_markers
            ),
            deterministic=r.resolve_bool("archives.deterministic"),
        )


def _as_str(value: PathArg | None) -> str | None:
    return None if value is None else os.fspath(value)


_default_service: ArchiveService | None = None


def get_archive_service() -> ArchiveService:
    """Get the process-wide ArchiveService built from the default resolver."""
    global _default_service
    if _default_service is None:
        _default_service = ArchiveService()
    return _default_service


def configure(resolver: ConfigResolver | None = None) -> ArchiveService:
    """Apply logging and diagnostics settings and install a default service.

    Safe to call more than once; the latest resolver governs diagnostics.
    """
    global _default_service
    resolver = resolver or ConfigResolver()
    apply_logging_policy(resolver.resolve_logging_level())
    set_colors(resolver.resolve_bool("logging.color"))
    install_jsonl_sink(resolver=resolver)
    _default_service = ArchiveService(resolver)
    return _default_service


def zip_file(source_path: PathArg, destination_archive_path: PathArg) -> bool:
    return get_archive_service().zip_file(source_path, destination_archive_path)


def zip_multiple_file(
    source_paths: Sequence[PathArg], destination_archive_path: PathArg
) -> bool:
    return get_archive_service().zip_multiple_file(source_paths, destination_archive_path)


def zip_directory(source_directory_path: PathArg, destination_archive_path: PathArg) -> bool:
    return get_archive_service().zip_directory(source_directory_path, destination_archive_path)


def unzip_file(archive_path: PathArg, destination_prefix: PathArg) -> bool:
    return get_archive_service().unzip_file(archive_path, destination_prefix)


def unzip_directory(archive_path: PathArg, destination_root: PathArg) -> bool:
    return get_archive_service().unzip_directory(archive_path, destination_root)


def list_entries(archive_path: PathArg) -> list[ArchiveEntry]:
    return get_archive_service().list_entries(archive_path)

"""Bounded-buffer byte copy shared by the archive writer and readers."""

from __future__ import annotations

from typing import BinaryIO

COPY_BUFFER_SIZE = 1024
EXTRACT_BUFFER_SIZE = 10000


def copy_stream(source: BinaryIO, sink: BinaryIO, buffer_size: int = COPY_BUFFER_SIZE) -> int:
    """Copy every remaining byte from source to sink and return the count.

    Reads at most buffer_size bytes at a time and stops on the first empty
    read. Read and write errors propagate unchanged.
    """
    if buffer_size <= 0:
        raise ValueError("buffer_size must be > 0")

    total = 0
    while True:
        chunk = source.read(buffer_size)
        if not chunk:
            break
        sink.write(chunk)
        total += len(chunk)
    return total

"""In-process fan-out of log records to subscribers (tests, host applications)."""

from __future__ import annotations

import contextlib
import sys
import traceback
from collections.abc import Callable
from dataclasses import dataclass


@dataclass(frozen=True)
class LogRecord:
    level_name: str
    plain: str
    logger_name: str


class LogBus:
    def __init__(self) -> None:
        self._subscribers: list[Callable[[LogRecord], None]] = []

    def subscribe(self, cb: Callable[[LogRecord], None]) -> None:
        self._subscribers.append(cb)

    def publish(self, record: LogRecord) -> None:
        for cb in list(self._subscribers):
            try:
                cb(record)
            except Exception:
                # Reporting through a logger here would publish again.
                with contextlib.suppress(Exception):
                    sys.stderr.write("LogBus subscriber failed\n" + traceback.format_exc())

    def clear(self) -> None:
        self._subscribers.clear()


_LOG_BUS = LogBus()


def get_log_bus() -> LogBus:
    return _LOG_BUS

"""Diagnostics envelopes and the JSONL sink.

Every envelope has exactly these keys::

    {"event": ..., "component": ..., "operation": ..., "timestamp": "...Z", "data": {...}}

The sink appends one JSON object per line to ``diagnostics.path`` while
``diagnostics.enabled`` is true. Both keys are read from the resolver passed
to the most recent install_jsonl_sink call, on every event.
"""

from __future__ import annotations

import json
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from packetzip.core.config import ConfigResolver
from packetzip.core.errors import ConfigError
from packetzip.core.events import get_event_bus
from packetzip.core.logging import get_logger

_logger = get_logger(__name__)

ENVELOPE_KEYS = frozenset({"event", "component", "operation", "timestamp", "data"})

_active_resolver: ConfigResolver | None = None


def build_envelope(
    *, event: str, component: str, operation: str, data: dict[str, Any]
) -> dict[str, Any]:
    timestamp = datetime.now(UTC).replace(microsecond=0).isoformat().replace("+00:00", "Z")
    return {
        "event": event,
        "component": component,
        "operation": operation,
        "timestamp": timestamp,
        "data": data,
    }


def _sink_target(resolver: ConfigResolver) -> Path | None:
    try:
        if not resolver.resolve_bool("diagnostics.enabled"):
            return None
        raw_path, _source = resolver.resolve("diagnostics.path")
    except ConfigError as e:
        _logger.warning(f"diagnostics disabled: {e}")
        return None
    return Path(str(raw_path)).expanduser()


def _write_envelope(event: str, data: dict[str, Any]) -> None:
    if _active_resolver is None:
        return
    target = _sink_target(_active_resolver)
    if target is None:
        return

    if not (isinstance(data, dict) and set(data) == ENVELOPE_KEYS):
        data = build_envelope(event=event, component="unknown", operation="unknown", data=data)

    line = json.dumps(data, ensure_ascii=True, separators=(",", ":"), sort_keys=True)
    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        with target.open("a", encoding="utf-8") as f:
            f.write(line + "\n")
    except OSError as e:
        _logger.warning(f"diagnostics write failed path={str(target)!r}: {e}")


def install_jsonl_sink(*, resolver: ConfigResolver) -> None:
    """Route events to the JSONL sink, governed by resolver from now on.

    Repeated calls swap the governing resolver; the sink stays subscribed once.
    """
    global _active_resolver
    _active_resolver = resolver
    get_event_bus().subscribe(_write_envelope)

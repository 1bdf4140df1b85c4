from __future__ import annotations

"""Explain Mode: one-line JSON trace events for taste-explorer milestones.

Enabled with the CLI `--explain` flag. Events are a closed set so a misspelt
name fails loudly in tests instead of silently never printing.
"""

import json
from typing import Any, Callable, Dict, Optional

EVENTS = frozenset(
    {
        "session_started",
        "session_resumed",
        "selection_recorded",
        "selection_skipped",
        "session_completed",
        "profile_derived",
        "export_written",
        "report_written",
        "history_recorded",
    }
)

_ENABLED = False
_SINK: Optional[Callable[[str], None]] = None


def enable(flag: bool = True, sink: Optional[Callable[[str], None]] = None) -> None:
    """Switch tracing on or off; `sink` receives each line instead of stdout."""
    global _ENABLED, _SINK
    _ENABLED = bool(flag)
    _SINK = sink


def enabled() -> bool:
    return _ENABLED


def format_event(event: str, payload: Dict[str, Any] | None = None) -> str:
    try:
        line = json.dumps(payload or {}, separators=(",", ":"), sort_keys=True, default=str)
    except (TypeError, ValueError):
        return f"[EXPLAIN] {event}"
    return f"[EXPLAIN] {event} :: {line}"


def trace(event: str, payload: Dict[str, Any] | None = None) -> None:
    if event not in EVENTS:
        raise ValueError(f"Unknown explain event: {event}")
    if not _ENABLED:
        return
    (_SINK or print)(format_event(event, payload))

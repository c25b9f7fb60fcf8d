"""Unified event schema and module-level emit helpers.

All timestamps use UTC ISO-8601 with ``Z`` suffix.  The ``emit()``
family of functions is safe to call from any context -- failures are
swallowed and printed to stderr.
"""

from __future__ import annotations

import sys
import time
import traceback
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------


class EventLevel(str, Enum):
    info = "info"
    warning = "warning"
    error = "error"


class EventType(str, Enum):
    # Resolution lifecycle
    resolve_started = "resolve_started"
    resolve_completed = "resolve_completed"

    # Per-formula diagnostics
    formula_error = "formula_error"
    circular_reference = "circular_reference"


# ---------------------------------------------------------------------------
# Error codes
# ---------------------------------------------------------------------------

FORMULA_EVAL_ERROR = "formula_eval_error"
FORMULA_REF_ERROR = "formula_ref_error"
FORMULA_DIV_ZERO = "formula_div_zero"
FORMULA_CIRCULAR = "formula_circular"


# ---------------------------------------------------------------------------
# Context truncation
# ---------------------------------------------------------------------------

_MAX_VALUE_LEN = 256


def truncate_context(context: dict[str, Any]) -> dict[str, Any]:
    """Return a copy of *context* with long string values truncated."""
    out: dict[str, Any] = {}
    for k, v in context.items():
        if isinstance(v, dict):
            out[k] = truncate_context(v)
        elif isinstance(v, str) and len(v) > _MAX_VALUE_LEN:
            out[k] = v[:_MAX_VALUE_LEN] + "...[truncated]"
        else:
            out[k] = v
    return out


# ---------------------------------------------------------------------------
# Attribution invariants
# ---------------------------------------------------------------------------

_CELL_EVENT_REQUIRED = {"table", "row", "col"}

_EVENT_REQUIRED_KEYS: dict[str, set[str]] = {
    EventType.resolve_started.value: {"tables"},
    EventType.resolve_completed.value: {"tables", "formulas"},
    EventType.formula_error.value: _CELL_EVENT_REQUIRED,
    EventType.circular_reference.value: _CELL_EVENT_REQUIRED,
}


def _validate_attribution(event: GridcalcEvent) -> GridcalcEvent:
    """Check required context keys; downgrade to warning if missing."""
    required = _EVENT_REQUIRED_KEYS.get(EventType(event.event_type).value, set())
    missing = required - set(event.context.keys())
    if not missing:
        return event
    ctx = dict(event.context)
    ctx["_missing_attribution"] = sorted(missing)
    return event.model_copy(update={"level": EventLevel.warning, "context": ctx})


# ---------------------------------------------------------------------------
# Event model
# ---------------------------------------------------------------------------


def _utc_now() -> str:
    """Return current UTC timestamp in ISO-8601 with Z suffix."""
    return datetime.now(timezone.utc).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


class GridcalcEvent(BaseModel):
    """A single structured log event."""

    schema_version: int = 1
    ts: str = Field(default_factory=_utc_now)
    level: EventLevel
    event_type: EventType
    context: dict[str, Any] = Field(default_factory=dict)
    message: str = ""
    error_code: str | None = None


def make_cell_event(
    event_type: EventType,
    level: EventLevel,
    message: str,
    *,
    table: int,
    row: int,
    col: int,
    error_code: str | None = None,
    extra: dict[str, Any] | None = None,
) -> GridcalcEvent:
    """Build an event with guaranteed cell attribution context."""
    ctx: dict[str, Any] = {"table": table, "row": row, "col": col}
    if extra:
        ctx.update(extra)
    return GridcalcEvent(
        level=level,
        event_type=event_type,
        message=message,
        context=ctx,
        error_code=error_code,
    )


# ---------------------------------------------------------------------------
# Module-level sink reference
# ---------------------------------------------------------------------------

# Set by ``configure_sink``; None means events are discarded.
_sink: Any = None  # EventSink | None


def configure_sink(log_dir: Path | str | None, *, fsync: bool = False) -> None:
    """Route events to ``<log_dir>/events.ndjson``.

    Passing ``None`` disables the sink again.  Until this is called,
    ``emit()`` silently discards events.
    """
    global _sink
    from gridcalc.logging.sink import EventSink

    if log_dir is None:
        _sink = None
        return
    _sink = EventSink(Path(log_dir), fsync=fsync)


def get_sink() -> Any:
    """Return the module-level sink, or None."""
    return _sink


# ---------------------------------------------------------------------------
# Rate-limited stderr warnings
# ---------------------------------------------------------------------------

_last_stderr_ts: float = 0.0
_STDERR_INTERVAL_SECS = 60.0


def _stderr_warning(msg: str) -> None:
    """Print a warning to stderr, rate-limited to one per 60 seconds."""
    global _last_stderr_ts
    now = time.monotonic()
    if now - _last_stderr_ts < _STDERR_INTERVAL_SECS:
        return
    _last_stderr_ts = now
    try:
        print(f"[gridcalc] {msg}", file=sys.stderr)
    except Exception:
        pass


# ---------------------------------------------------------------------------
# Safe emit helpers
# ---------------------------------------------------------------------------


def emit(event: GridcalcEvent) -> None:
    """Write an event to the configured sink.

    **Never raises.**  On failure, prints a rate-limited warning to stderr.

    Truncates long context values and validates attribution before writing.
    """
    try:
        sink = get_sink()
        if sink is None:
            return
        event = event.model_copy(update={"context": truncate_context(event.context)})
        event = _validate_attribution(event)
        sink.write(event)
    except Exception:
        _stderr_warning(f"logging failed: {traceback.format_exc()}")


def emit_info(
    event_type: EventType,
    message: str,
    context: dict[str, Any] | None = None,
) -> None:
    """Convenience: emit an info-level event."""
    emit(
        GridcalcEvent(
            level=EventLevel.info,
            event_type=event_type,
            message=message,
            context=context or {},
        )
    )


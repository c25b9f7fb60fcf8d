"""Structured event logging for gridcalc.

Provides a unified event schema, a filesystem NDJSON sink, and safe
emit helpers that never raise uncaught exceptions.
"""

from gridcalc.logging.events import (
    EventLevel,
    EventType,
    GridcalcEvent,
    configure_sink,
    emit,
    emit_info,
    get_sink,
    make_cell_event,
)
from gridcalc.logging.sink import EventSink

__all__ = [
    "EventLevel",
    "EventSink",
    "EventType",
    "GridcalcEvent",
    "configure_sink",
    "emit",
    "emit_info",
    "get_sink",
    "make_cell_event",
]

"""Filesystem NDJSON event sink with locked appends.

Events are appended to ``<log_dir>/events.ndjson``, one JSON line per
event, written with ``json.dumps(sort_keys=True)`` for deterministic
output.

Each append acquires an exclusive ``fcntl.flock`` on the file and reads
acquire a shared lock.  On platforms without ``fcntl`` (Windows),
locking is skipped with a stderr warning.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Any

from gridcalc.logging.events import GridcalcEvent

# Try to import fcntl for file locking (Unix only)
try:
    import fcntl

    _HAS_FCNTL = True
except ImportError:
    _HAS_FCNTL = False
    print(
        "[gridcalc] fcntl not available; log file locking disabled",
        file=sys.stderr,
    )

EVENTS_FILENAME = "events.ndjson"


class EventSink:
    """Append-only NDJSON log writer with file locking."""

    def __init__(self, log_dir: Path, *, fsync: bool = False) -> None:
        self.log_dir = log_dir
        self.path = log_dir / EVENTS_FILENAME
        self._fsync = fsync
        self.log_dir.mkdir(parents=True, exist_ok=True)

    def write(self, event: GridcalcEvent) -> None:
        """Append *event* to the log."""
        line = json.dumps(event.model_dump(mode="json"), sort_keys=True, default=str) + "\n"
        with open(self.path, "a", encoding="utf-8") as f:
            if _HAS_FCNTL:
                fcntl.flock(f.fileno(), fcntl.LOCK_EX)
            try:
                f.write(line)
                f.flush()
                if self._fsync:
                    os.fsync(f.fileno())
            finally:
                if _HAS_FCNTL:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)

    def read_events(
        self,
        *,
        level: str | None = None,
        event_type: str | None = None,
        limit: int = 200,
    ) -> list[dict[str, Any]]:
        """Read events, most-recent-first, with optional filters.

        Lines that are not valid JSON are skipped.
        """
        if not self.path.exists():
            return []
        with open(self.path, encoding="utf-8") as f:
            if _HAS_FCNTL:
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
            try:
                lines = f.readlines()
            finally:
                if _HAS_FCNTL:
                    fcntl.flock(f.fileno(), fcntl.LOCK_UN)

        events: list[dict[str, Any]] = []
        for line in lines:
            line = line.strip()
            if not line:
                continue
            try:
                events.append(json.loads(line))
            except json.JSONDecodeError:
                continue

        if level:
            events = [e for e in events if e.get("level") == level]
        if event_type:
            events = [e for e in events if e.get("event_type") == event_type]

        events.reverse()
        return events[:limit]

"""Shared fixtures for gridcalc tests."""

from __future__ import annotations

from typing import Any

import pytest

from gridcalc.logging.events import configure_sink
from gridcalc.models import Table, normalize_workbook


def make_workbook(*tables: list[list[Any]]) -> list[Table]:
    """Build a workbook from tables of raw cell values (or cell dicts)."""
    return normalize_workbook(list(tables))


@pytest.fixture(autouse=True)
def _reset_event_sink():
    """Keep the module-level event sink from leaking between tests."""
    yield
    configure_sink(None)

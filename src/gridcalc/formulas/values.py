"""Value coercion shared by the resolver, the functions and the evaluator."""

from __future__ import annotations

import datetime
import math
import re
from typing import Any

# Spreadsheet epoch: serial 1 is 1900-01-01 under the 1900 leap-year bug.
EXCEL_EPOCH = datetime.date(1899, 12, 30)

# Plain decimal text: optional sign, digits with an optional fraction, optional exponent.
_DECIMAL_RE = re.compile(r"[+-]?(?:\d+\.?\d*|\.\d+)(?:[eE][+-]?\d+)?")


def date_to_serial(value: datetime.date) -> int | float:
    """Convert a date (or datetime) to a spreadsheet serial number."""
    if isinstance(value, datetime.datetime):
        delta = value - datetime.datetime.combine(EXCEL_EPOCH, datetime.time())
        return delta.total_seconds() / 86400
    return (value - EXCEL_EPOCH).days


def is_blank(value: Any) -> bool:
    """True for ``None`` and whitespace-only strings."""
    return value is None or (isinstance(value, str) and not value.strip())


def to_number(value: Any) -> int | float | None:
    """Coerce *value* to a number, or return ``None`` if it is not numeric.

    Booleans count as 1/0, dates as serial numbers, and strings are parsed
    after stripping whitespace; only plain decimal text counts.  NaN and
    blanks are not numbers.
    """
    if isinstance(value, bool):
        return int(value)
    if isinstance(value, (int, float)):
        return None if math.isnan(value) else value
    if isinstance(value, datetime.date):
        return date_to_serial(value)
    if isinstance(value, str):
        text = value.strip()
        if not text:
            return None
        if not _DECIMAL_RE.fullmatch(text):
            return None
        if "." in text or "e" in text or "E" in text:
            return float(text)
        return int(text)
    return None


def numeric_string_to_number(value: Any) -> Any:
    """Return the number for a numeric-looking string, else *value* unchanged."""
    if isinstance(value, str):
        number = to_number(value)
        if number is not None:
            return number
    return value

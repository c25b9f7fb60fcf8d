"""Excel-style display formatting for resolved cell values.

Supports the common subset of number format codes:

- ``General`` / empty, ``@`` (text)
- Digit patterns with optional grouping and decimals: ``0``, ``0.00``,
  ``#,##0``, ``#,##0.00``
- Percent: ``0%``, ``0.00%`` (the value is multiplied by 100)
- Currency and literals: ``$#,##0.00``, ``[$€]#,##0.00``, ``0.0" kg"``
- Up to four ``;``-separated sections (positive; negative; zero; text)
- Color tags such as ``[Red]`` which set the text color
- Dates: ``yyyy-mm-dd``, ``mm/dd/yyyy``, ``d mmm yyyy`` ...
"""

from __future__ import annotations

import datetime
import re
from typing import Any, Protocol

from gridcalc.formulas.values import EXCEL_EPOCH, to_number
from gridcalc.models import FormattedValue

GENERAL = "General"

_COLORS = {
    "black": "black",
    "blue": "blue",
    "cyan": "cyan",
    "green": "green",
    "magenta": "magenta",
    "red": "red",
    "white": "white",
    "yellow": "yellow",
}

_SECTION_SPLIT_RE = re.compile(r';(?=(?:[^"]*"[^"]*")*[^"]*$)')
_COLOR_RE = re.compile(r"\[(" + "|".join(_COLORS) + r")\]", re.IGNORECASE)
_CURRENCY_RE = re.compile(r"\[\$([^\]\-]*)(?:-[^\]]*)?\]")
_BRACKET_RE = re.compile(r"\[[^\]]*\]")
_NUMBER_RE = re.compile(r"[#0?][#0?,]*(?:\.[#0?]*)?|\.[#0?]+")
_DATE_TOKEN_RE = re.compile(r"yyyy|yy|mmmm|mmm|mm|m|dddd|ddd|dd|d", re.IGNORECASE)
_LITERAL_RE = re.compile(r'"([^"]*)"|\\(.)|_(.)|\*(.)')


class Formatter(Protocol):
    """Display formatter contract used by the workbook resolver."""

    def format(self, value: Any, format_string: str) -> FormattedValue:
        ...


def display_text(value: Any) -> str:
    """Plain string form of a value, used when no format applies."""
    if value is None:
        return ""
    if isinstance(value, bool):
        return "TRUE" if value else "FALSE"
    if isinstance(value, float):
        if value.is_integer() and abs(value) < 1e15:
            return str(int(value))
        return f"{value:.10g}"
    if isinstance(value, datetime.date):
        return value.isoformat()
    return str(value)


def _split_sections(format_string: str) -> list[str]:
    return _SECTION_SPLIT_RE.split(format_string)


def _literal(text: str) -> str:
    """Render the literal parts of a format section."""

    def repl(m: re.Match) -> str:
        if m.group(1) is not None:
            return m.group(1)
        if m.group(2) is not None:
            return m.group(2)
        if m.group(3) is not None:
            return " "
        return ""

    return _LITERAL_RE.sub(repl, text)


def _outside_quotes(section: str) -> str:
    return re.sub(r'"[^"]*"', "", section)


def _extract_color(section: str) -> tuple[str, str | None]:
    m = _COLOR_RE.search(section)
    if not m:
        return section, None
    return _COLOR_RE.sub("", section), _COLORS[m.group(1).lower()]


def _prepare(section: str) -> tuple[str, str | None]:
    section, color = _extract_color(section)
    section = _CURRENCY_RE.sub(lambda m: f'"{m.group(1)}"', section)
    section = _BRACKET_RE.sub("", section)
    return section, color


def _is_date_section(section: str) -> bool:
    bare = _outside_quotes(section)
    return not re.search(r"[0#?]", bare) and bool(_DATE_TOKEN_RE.search(bare))


def _render_date(value: datetime.date, section: str) -> str:
    def repl(m: re.Match) -> str:
        token = m.group(0).lower()
        if token == "yyyy":
            return f"{value.year:04d}"
        if token == "yy":
            return f"{value.year % 100:02d}"
        if token == "mmmm":
            return value.strftime("%B")
        if token == "mmm":
            return value.strftime("%b")
        if token == "mm":
            return f"{value.month:02d}"
        if token == "m":
            return str(value.month)
        if token == "dddd":
            return value.strftime("%A")
        if token == "ddd":
            return value.strftime("%a")
        if token == "dd":
            return f"{value.day:02d}"
        return str(value.day)

    out = []
    pos = 0
    # Quoted literals are copied verbatim, tokens elsewhere are substituted.
    for m in re.finditer(r'"[^"]*"', section):
        out.append(_DATE_TOKEN_RE.sub(repl, section[pos:m.start()]))
        out.append(m.group(0)[1:-1])
        pos = m.end()
    out.append(_DATE_TOKEN_RE.sub(repl, section[pos:]))
    return "".join(out)


def _render_number(number: float, section: str) -> str:
    if "%" in _outside_quotes(section):
        number *= 100
    bare = _outside_quotes(section)
    m = _NUMBER_RE.search(bare)
    if not m:
        return _literal(section)
    pattern = m.group(0)
    int_part, _, frac_part = pattern.partition(".")
    decimals = len(frac_part)
    if "," in int_part:
        body = f"{number:,.{decimals}f}"
    else:
        body = f"{number:.{decimals}f}"
    # Locate the pattern in the original section to keep literals around it.
    start = section.find(pattern)
    if start < 0:
        return body
    prefix = _literal(section[:start])
    suffix = _literal(section[start + len(pattern):])
    return prefix + body + suffix


def _as_date(value: Any) -> datetime.date | None:
    if isinstance(value, datetime.date):
        return value
    number = to_number(value)
    if number is None or isinstance(value, bool):
        return None
    try:
        return EXCEL_EPOCH + datetime.timedelta(days=int(number))
    except OverflowError:
        return None


def format_value(value: Any, format_string: str | None) -> FormattedValue:
    """Format *value* for display according to an Excel number format."""
    if not format_string or format_string.strip().lower() == GENERAL.lower():
        return FormattedValue(display_value=display_text(value))
    if format_string.strip() == "@":
        return FormattedValue(display_value=display_text(value))
    if value is None or isinstance(value, bool):
        return FormattedValue(display_value=display_text(value))

    sections = _split_sections(format_string)

    if isinstance(value, datetime.date):
        section, color = _prepare(sections[0])
        if _is_date_section(section):
            return FormattedValue(display_value=_render_date(value, section), text_color=color)
        value = to_number(value)

    number = value if isinstance(value, (int, float)) else to_number(value)
    if number is None:
        # Text: use the fourth section when present, else show as-is.
        if len(sections) >= 4 and isinstance(value, str):
            section, color = _prepare(sections[3])
            text = value.join(_literal(part) for part in section.split("@"))
            return FormattedValue(display_value=text, text_color=color)
        return FormattedValue(display_value=display_text(value))

    if number < 0 and len(sections) >= 2:
        raw_section, negative_sign = sections[1], False
        number = -number
    elif number == 0 and len(sections) >= 3:
        raw_section, negative_sign = sections[2], False
    else:
        raw_section, negative_sign = sections[0], number < 0
        number = abs(number)

    section, color = _prepare(raw_section)
    if _is_date_section(section):
        date = _as_date(number)
        if date is None:
            return FormattedValue(display_value=display_text(value))
        return FormattedValue(display_value=_render_date(date, section), text_color=color)

    text = _render_number(number, section)
    if negative_sign:
        text = "-" + text
    return FormattedValue(display_value=text, text_color=color)


class ExcelFormatter:
    """Default formatter backed by ``format_value()``."""

    def format(self, value: Any, format_string: str) -> FormattedValue:
        return format_value(value, format_string)

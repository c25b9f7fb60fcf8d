"""Tests for Excel-style display formatting."""

from __future__ import annotations

import datetime

import pytest

from gridcalc.formatting import ExcelFormatter, display_text, format_value


class TestDisplayText:
    @pytest.mark.parametrize(
        "value, expected",
        [
            (None, ""),
            (True, "TRUE"),
            (False, "FALSE"),
            (3, "3"),
            (3.0, "3"),
            (-0.5, "-0.5"),
            (1 / 3, "0.3333333333"),
            ("text", "text"),
            (datetime.date(2024, 1, 15), "2024-01-15"),
        ],
    )
    def test_display_text(self, value, expected: str) -> None:
        assert display_text(value) == expected


class TestNumberFormats:
    @pytest.mark.parametrize(
        "value, fmt, expected",
        [
            (1234.5, "General", "1234.5"),
            (1234.5, "", "1234.5"),
            (1234.5, "@", "1234.5"),
            (1234.567, "0", "1235"),
            (1234.567, "0.00", "1234.57"),
            (1234567.891, "#,##0", "1,234,568"),
            (1234.5, "#,##0.00", "1,234.50"),
            (0.256, "0%", "26%"),
            (0.256, "0.0%", "25.6%"),
            (1234.5, "$#,##0.00", "$1,234.50"),
            (1000, "[$€]#,##0.00", "€1,000.00"),
            (5, '0.0" kg"', "5.0 kg"),
            ("12", "0.00", "12.00"),
        ],
    )
    def test_format(self, value, fmt: str, expected: str) -> None:
        assert format_value(value, fmt).display_value == expected

    def test_negative_without_negative_section(self) -> None:
        assert format_value(-2, "0.00").display_value == "-2.00"

    def test_negative_section(self) -> None:
        assert format_value(-2, "0.00;(0.00)").display_value == "(2.00)"

    def test_zero_section(self) -> None:
        assert format_value(0, '0;-0;"zero"').display_value == "zero"

    def test_text_section(self) -> None:
        assert format_value("abc", '0;-0;0;"Text: "@').display_value == "Text: abc"

    def test_text_without_text_section(self) -> None:
        assert format_value("abc", "0.00").display_value == "abc"

    def test_none_and_bool_unformatted(self) -> None:
        assert format_value(None, "0.00").display_value == ""
        assert format_value(True, "0.00").display_value == "TRUE"


class TestColors:
    def test_color_tag(self) -> None:
        result = format_value(3, "[Blue]0.00")
        assert result.display_value == "3.00"
        assert result.text_color == "blue"

    def test_color_on_negative_section(self) -> None:
        result = format_value(-1234.5, "#,##0.00;[Red]-#,##0.00")
        assert result.display_value == "-1,234.50"
        assert result.text_color == "red"

    def test_no_color(self) -> None:
        assert format_value(3, "0").text_color is None


class TestDateFormats:
    def test_date_value(self) -> None:
        d = datetime.date(2024, 1, 5)
        assert format_value(d, "yyyy-mm-dd").display_value == "2024-01-05"
        assert format_value(d, "m/d/yy").display_value == "1/5/24"
        assert format_value(d, "d mmm yyyy").display_value == "5 Jan 2024"
        assert format_value(d, "mmmm").display_value == "January"

    def test_serial_number(self) -> None:
        assert format_value(45306, "yyyy-mm-dd").display_value == "2024-01-15"

    def test_quoted_literal_in_date(self) -> None:
        d = datetime.date(2024, 1, 5)
        assert format_value(d, 'yyyy"d"mm').display_value == "2024d01"

    def test_date_with_number_format(self) -> None:
        d = datetime.date(2024, 1, 15)
        assert format_value(d, "0").display_value == "45306"


class TestExcelFormatter:
    def test_delegates_to_format_value(self) -> None:
        assert ExcelFormatter().format(0.5, "0%").display_value == "50%"

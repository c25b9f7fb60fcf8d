"""Tests for A1 reference parsing and cell/range lookup."""

from __future__ import annotations

import pytest

from conftest import make_workbook
from gridcalc.formulas.errors import REF
from gridcalc.formulas.references import (
    Coordinate,
    column_index,
    column_letters,
    expand_coordinates,
    expand_range,
    get_cell_value,
    make_reference,
    parse_reference,
)
from gridcalc.models import Cell


# ────────────────────────────────────────────────────────────────
# Column letters
# ────────────────────────────────────────────────────────────────


class TestColumns:
    @pytest.mark.parametrize(
        "letters, index",
        [("A", 0), ("B", 1), ("Z", 25), ("AA", 26), ("AB", 27), ("AZ", 51), ("BA", 52)],
    )
    def test_column_index(self, letters: str, index: int) -> None:
        assert column_index(letters) == index

    def test_lowercase_letters(self) -> None:
        assert column_index("ab") == 27

    def test_letters_round_trip(self) -> None:
        for idx in (0, 25, 26, 27, 701, 702):
            assert column_index(column_letters(idx)) == idx

    def test_make_reference(self) -> None:
        assert make_reference(0, 0) == "A1"
        assert make_reference(9, 27) == "AB10"


# ────────────────────────────────────────────────────────────────
# parse_reference
# ────────────────────────────────────────────────────────────────


class TestParseReference:
    def test_simple(self) -> None:
        assert parse_reference("A1") == Coordinate(row=0, col=0)

    def test_zero_based(self) -> None:
        coord = parse_reference("C5")
        assert (coord.row, coord.col) == (4, 2)

    def test_case_insensitive(self) -> None:
        assert parse_reference("b2") == parse_reference("B2")

    def test_absolute_flags(self) -> None:
        coord = parse_reference("$B$3")
        assert (coord.row, coord.col) == (2, 1)
        assert coord.absolute_row is True
        assert coord.absolute_col is True

    def test_mixed_absolute(self) -> None:
        coord = parse_reference("B$3")
        assert coord.absolute_row is True
        assert coord.absolute_col is False

    def test_multi_letter_column(self) -> None:
        assert parse_reference("AA1").col == 26
        assert parse_reference("AB1").col == 27

    @pytest.mark.parametrize("text", ["1A", "A", "$", "", "A0", "A-1", "A1B", "$$A1", "A1:B2"])
    def test_malformed_returns_none(self, text: str) -> None:
        assert parse_reference(text) is None

    def test_non_string_returns_none(self) -> None:
        assert parse_reference(None) is None  # type: ignore[arg-type]


# ────────────────────────────────────────────────────────────────
# get_cell_value
# ────────────────────────────────────────────────────────────────


class TestGetCellValue:
    def test_raw_value(self) -> None:
        wb = make_workbook([[1, 2], [3, 4]])
        assert get_cell_value("B2", wb, 0) == 4

    def test_resolved_value_preferred(self) -> None:
        wb = [[[Cell(value="=1+1", resolved=True, resolved_value=2)]]]
        assert get_cell_value("A1", wb, 0) == 2

    def test_unresolved_formula_returns_raw(self) -> None:
        wb = make_workbook([["=1+1"]])
        assert get_cell_value("A1", wb, 0) == "=1+1"

    @pytest.mark.parametrize("ref", ["1A", "A", "$"])
    def test_malformed_reference(self, ref: str) -> None:
        wb = make_workbook([[1]])
        assert get_cell_value(ref, wb, 0) == REF

    def test_missing_row(self) -> None:
        wb = make_workbook([[1]])
        assert get_cell_value("A9", wb, 0) == REF

    def test_ragged_row_gap(self) -> None:
        wb = make_workbook([[1, 2, 3], [4]])
        assert get_cell_value("C1", wb, 0) == 3
        assert get_cell_value("C2", wb, 0) == REF

    def test_table_out_of_bounds(self) -> None:
        wb = make_workbook([[1]])
        assert get_cell_value("A1", wb, 1) == REF
        assert get_cell_value("A1", wb, -1) == REF

    def test_other_table(self) -> None:
        wb = make_workbook([[1]], [[2]])
        assert get_cell_value("A1", wb, 1) == 2

    def test_custom_reader(self) -> None:
        wb = make_workbook([[1]])
        assert get_cell_value("A1", wb, 0, read=lambda cell, t: ("read", t)) == ("read", 0)


# ────────────────────────────────────────────────────────────────
# expand_range
# ────────────────────────────────────────────────────────────────


class TestExpandRange:
    def test_row_major_values(self) -> None:
        wb = make_workbook([[1, 2], [3, 4]])
        assert expand_range("A1:B2", wb, 0) == [1, 2, 3, 4]

    def test_corner_order_irrelevant(self) -> None:
        wb = make_workbook([[1, 2], [3, 4]])
        assert expand_range("B2:A1", wb, 0) == expand_range("A1:B2", wb, 0)
        assert expand_range("A2:B1", wb, 0) == [1, 2, 3, 4]
        assert expand_coordinates("B2:A1") == expand_coordinates("A1:B2")

    def test_non_numeric_dropped(self) -> None:
        wb = make_workbook([[1], ["x"], [3]])
        assert expand_range("A1:A3", wb, 0) == [1, 3]

    def test_numeric_strings_coerced(self) -> None:
        wb = make_workbook([["1.5", " 2 ", ""]])
        assert expand_range("A1:C1", wb, 0) == [1.5, 2]

    def test_non_decimal_text_dropped(self) -> None:
        wb = make_workbook([["1_000", "inf", "nan", "0x10", "1e2", "-.5"]])
        assert expand_range("A1:F1", wb, 0) == [100.0, -0.5]

    def test_blank_and_missing_cells_skipped(self) -> None:
        wb = make_workbook([[1, None], [2]])
        assert expand_range("A1:C3", wb, 0) == [1, 2]

    def test_lowercase_range(self) -> None:
        wb = make_workbook([[1, 2]])
        assert expand_range("a1:b1", wb, 0) == [1, 2]

    def test_resolved_values_used(self) -> None:
        wb = [[[Cell(value=1), Cell(value="=A1*10", resolved=True, resolved_value=10)]]]
        assert expand_range("A1:B1", wb, 0) == [1, 10]

    def test_table_out_of_bounds_returns_none(self) -> None:
        wb = make_workbook([[1]])
        assert expand_range("A1:A2", wb, 3) is None

    @pytest.mark.parametrize("text", ["A1", "A1:B", "1A:B2", "A1:B2:C3", ":"])
    def test_malformed_returns_none(self, text: str) -> None:
        wb = make_workbook([[1]])
        assert expand_range(text, wb, 0) is None

    def test_coordinates(self) -> None:
        assert expand_coordinates("A1:B2") == [
            Coordinate(0, 0),
            Coordinate(0, 1),
            Coordinate(1, 0),
            Coordinate(1, 1),
        ]

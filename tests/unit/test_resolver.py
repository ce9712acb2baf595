"""
Unit tests for the directional resolver (sheet_unpivot.resolver).

Each test places a handful of header cells around one data cell and
checks which header governs it.
"""

from __future__ import annotations

import pytest

from sheet_unpivot.cells import Cell, as_cells
from sheet_unpivot.directions import Direction
from sheet_unpivot.exceptions import UnresolvedHeaderError
from sheet_unpivot.resolver import HeaderIndex, ResolutionReport, resolve


def _headers(*positions: tuple[int, int]) -> list[Cell]:
    return [Cell(r, c, "character", f"h{r}{c}") for r, c in positions]


def _resolved(data: tuple[int, int], headers: list[Cell], direction: str) -> tuple[int, int] | None:
    found = resolve(Cell(*data, "numeric", 1.0), headers, direction)
    return None if found is None else found.position


class TestCardinal:
    """Tests for N, S, E, W."""

    def test_w_picks_nearest_on_same_row(self):
        headers = _headers((3, 1), (3, 3), (3, 7), (2, 4))
        assert _resolved((3, 5), headers, "W") == (3, 3)

    def test_w_ignores_other_rows(self):
        headers = _headers((2, 1), (4, 1))
        assert _resolved((3, 5), headers, "W") is None

    def test_n_picks_nearest_above(self):
        headers = _headers((1, 2), (2, 2), (5, 2))
        assert _resolved((4, 2), headers, "N") == (2, 2)

    def test_s_picks_nearest_below(self):
        headers = _headers((1, 2), (6, 2), (9, 2))
        assert _resolved((4, 2), headers, "S") == (6, 2)

    def test_e_picks_nearest_right(self):
        headers = _headers((3, 1), (3, 6), (3, 8))
        assert _resolved((3, 2), headers, "E") == (3, 6)

    def test_header_at_data_position_never_matches(self):
        headers = _headers((3, 3))
        for direction in Direction:
            assert _resolved((3, 3), headers, direction) is None


class TestCompound:
    """Tests for the eight compound directions."""

    def test_nnw_spanning_headers(self):
        headers = _headers((1, 2), (1, 4))
        assert _resolved((3, 2), headers, "NNW") == (1, 2)
        assert _resolved((3, 3), headers, "NNW") == (1, 2)
        assert _resolved((3, 4), headers, "NNW") == (1, 4)
        assert _resolved((3, 9), headers, "NNW") == (1, 4)

    def test_nnw_nothing_to_the_left(self):
        headers = _headers((1, 2), (1, 4))
        assert _resolved((3, 1), headers, "NNW") is None

    def test_nnw_nearest_row_wins_over_column(self):
        headers = _headers((1, 3), (2, 2))
        assert _resolved((4, 3), headers, "NNW") == (2, 2)

    def test_nnw_skips_rows_with_no_candidate(self):
        headers = _headers((1, 1), (2, 5))
        assert _resolved((4, 3), headers, "NNW") == (1, 1)

    def test_wnw(self):
        headers = _headers((2, 1), (4, 1))
        assert _resolved((5, 3), headers, "WNW") == (4, 1)
        assert _resolved((3, 2), headers, "WNW") == (2, 1)
        assert _resolved((1, 2), headers, "WNW") is None

    @pytest.mark.parametrize(
        "direction, headers, data, expected",
        [
            ("NNE", [(1, 2), (1, 5)], (3, 3), (1, 5)),
            ("SSW", [(5, 1), (5, 4)], (2, 3), (5, 1)),
            ("SSE", [(5, 1), (5, 4)], (2, 3), (5, 4)),
            ("WSW", [(2, 1), (6, 1)], (4, 3), (6, 1)),
            ("ENE", [(2, 9), (6, 9)], (4, 3), (2, 9)),
            ("ESE", [(2, 9), (6, 9)], (4, 3), (6, 9)),
        ],
    )
    def test_other_compounds(self, direction, headers, data, expected):
        assert _resolved(data, _headers(*headers), direction) == expected

    def test_relaxed_axis_is_inclusive(self):
        headers = _headers((1, 3))
        assert _resolved((2, 3), headers, "NNE") == (1, 3)
        assert _resolved((2, 3), headers, "NNW") == (1, 3)


class TestProximity:
    """Tests for ABOVE, BELOW, LEFT, RIGHT."""

    def test_above_nearest_by_distance(self):
        headers = _headers((1, 2), (1, 6))
        assert _resolved((3, 3), headers, "ABOVE") == (1, 2)
        assert _resolved((3, 5), headers, "ABOVE") == (1, 6)

    def test_tie_goes_to_smaller_col(self):
        headers = _headers((1, 6), (1, 2))
        assert _resolved((3, 4), headers, "ABOVE") == (1, 2)

    def test_tie_goes_to_smaller_row(self):
        headers = _headers((2, 1), (1, 2))
        assert _resolved((3, 3), headers, "ABOVE") == (1, 2)

    def test_strict_half_plane(self):
        headers = _headers((3, 1))
        assert _resolved((3, 3), headers, "ABOVE") is None
        assert _resolved((3, 3), headers, "LEFT") == (3, 1)

    def test_below_and_right(self):
        headers = _headers((5, 3), (2, 8))
        assert _resolved((3, 3), headers, "BELOW") == (5, 3)
        assert _resolved((3, 3), headers, "RIGHT") == (2, 8)


class TestHeaderIndex:
    """Tests for HeaderIndex."""

    def test_empty_index(self):
        index = HeaderIndex([], [], "N")
        assert len(index) == 0
        assert index.lookup(2, 2) is None

    def test_from_cells_returns_positions(self):
        headers = as_cells([["a", "b", "c"]])
        index = HeaderIndex.from_cells(headers, "N")
        assert index.lookup_many([2, 2, 2], [1, 2, 3]) == [0, 1, 2]

    def test_alias_direction(self):
        index = HeaderIndex([1], [1], "up-left")
        assert index.direction is Direction.NNW

    def test_length_mismatch(self):
        with pytest.raises(ValueError):
            HeaderIndex([1, 2], [1], "N")

    def test_resolve_accepts_cell_table(self):
        headers = as_cells([["Female", "Male"]])
        found = resolve(Cell(3, 1, "numeric", 2.0), headers, "NNW")
        assert found is not None
        assert found.value == "Female"


class TestResolutionReport:
    """Tests for ResolutionReport."""

    def test_empty_report_does_not_raise(self):
        report = ResolutionReport()
        assert report.count == 0
        report.raise_for_unresolved()

    def test_by_field_and_frame(self):
        report = ResolutionReport()
        report.record([2, 3], [1, 1], Direction.NNW, "sex")
        report.record([3], [1], Direction.N, "name")
        assert report.by_field() == {"sex": [(2, 1), (3, 1)], "name": [(3, 1)]}
        frame = report.to_frame()
        assert list(frame.columns) == ["row", "col", "direction", "name"]
        assert list(frame["direction"]) == ["NNW", "NNW", "N"]

    def test_raise_names_positions(self):
        report = ResolutionReport()
        report.record([4], [1], Direction.W, "subject")
        with pytest.raises(UnresolvedHeaderError, match=r"\(4, 1\)") as exc_info:
            report.raise_for_unresolved()
        assert exc_info.value.unresolved[0].name == "subject"

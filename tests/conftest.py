"""
Shared test fixtures for sheet-unpivot tests.

The grids here are small, hand-checkable pivot tables used across unit
and integration tests.  Each is written as a list of rows exactly as it
would look in the spreadsheet (``None`` = blank cell).
"""

import pytest

from sheet_unpivot.cells import Cell, as_cells, cells_from_records
from sheet_unpivot.formats import Format, FormatTable

# ---------------------------------------------------------------------------
# Grids
# ---------------------------------------------------------------------------

# Two header rows: sex spans two name columns each, written in the
# left-most one.  Column 1 holds the subject.
SCORES_GRID = [
    [None, "Female", None, "Male", None],
    [None, "matilda", "jason", "ulysses", "felicity"],
    ["history", 2, 8, 4, 6],
    ["maths", 5, 7, 3, 1],
]

# Bold group names (rows 1 and 4) above the items they group, in the same
# column as the items.
GROUPED_GRID = [
    ["Fruit", None],
    ["apple", 1],
    ["pear", 2],
    ["Veg", None],
    ["leek", 3],
]
GROUPED_BOLD_ROWS = {1, 4}


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------

@pytest.fixture()
def scores_cells():
    return as_cells(SCORES_GRID)


@pytest.fixture()
def grouped_formats() -> FormatTable:
    """Format 0 is plain, format 1 is bold."""
    return FormatTable([Format(), Format(bold=True)])


@pytest.fixture()
def grouped_cells():
    records = []
    for i, values in enumerate(GROUPED_GRID, start=1):
        for j, value in enumerate(values, start=1):
            format_id = 1 if (j == 1 and i in GROUPED_BOLD_ROWS) else 0
            records.append(Cell.from_value(i, j, value, format_id=format_id))
    return cells_from_records(records)


# ---------------------------------------------------------------------------
# Pytest markers
# ---------------------------------------------------------------------------
def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line(
        "markers",
        "integration: mark test as integration test (runs recipes end to end on disk)",
    )

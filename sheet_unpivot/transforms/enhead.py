"""
Header association ("enhead") for sheet-unpivot.

Joins a data-cell table against one header-cell table using a compass
direction.  Each data cell gains one new column holding the value of the
header that governs it.

Chaining:
  Each call reads only the data cells' ``row``/``col``, never columns that
  earlier calls attached, so independent ``enhead()`` calls commute:

      data = enhead(data, col_headers, "N", "year")
      data = enhead(data, row_headers, "W", "region")

  gives the same ``year`` and ``region`` values in either order.

Unmatched data cells:
  Get ``None`` for the new field.  This is not an error -- sparse and
  ragged tables are normal.  Pass a ``ResolutionReport`` to collect the
  positions (strict mode).
"""

from __future__ import annotations

import logging

import pandas as pd

from sheet_unpivot.cells import cell_values
from sheet_unpivot.directions import Direction
from sheet_unpivot.exceptions import CellTableError
from sheet_unpivot.resolver import HeaderIndex, ResolutionReport

logger = logging.getLogger(__name__)


def blank_mask(cells: pd.DataFrame, values: str | None = None) -> pd.Series:
    """Cells that carry no header value.

    With *values* set, a cell is blank when that column is missing;
    otherwise when its ``data_type`` is ``blank`` or ``is_blank`` is set.
    """
    if values is not None:
        return cells[values].isna()
    mask = cells["data_type"].eq("blank") if "data_type" in cells.columns else pd.Series(False, index=cells.index)
    if "is_blank" in cells.columns:
        mask = mask | cells["is_blank"].eq(True)
    return mask


def header_values(headers: pd.DataFrame, values: str | None = None) -> pd.Series:
    """The value each header contributes: its typed value, or column *values*."""
    if values is None:
        return cell_values(headers)
    if values not in headers.columns:
        raise CellTableError(
            f"Header value column '{values}' not found. Columns: {list(headers.columns)}"
        )
    series = headers[values].astype(object)
    return series.where(series.notna(), None)


def enhead(
    data_cells: pd.DataFrame,
    header_cells: pd.DataFrame,
    direction: str | Direction,
    name: str,
    *,
    values: str | None = None,
    drop_blank: bool = True,
    report: ResolutionReport | None = None,
) -> pd.DataFrame:
    """Attach header values to data cells.

    Args:
        data_cells: Cell table of data cells.
        header_cells: Cell table of header cells for *one* header level.
            Must not contain the data cells themselves.
        direction: Where the headers sit relative to the data (see
            ``sheet_unpivot.directions``).
        name: Name of the new column.
        values: Take header values from this column instead of the typed
            value columns.
        drop_blank: Ignore blank header cells, so a blank never shadows
            the real header further away.
        report: If given, unmatched data cells are recorded on it.

    Returns:
        A copy of *data_cells* with column *name* added (object dtype,
        ``None`` where no header matched).

    Raises:
        ValueError: If *name* already exists in *data_cells*, or the
            direction is unknown.
        CellTableError: If either table lacks ``row``/``col``.
    """
    direction = Direction.parse(direction)
    for label, table in (("data", data_cells), ("header", header_cells)):
        if "row" not in table.columns or "col" not in table.columns:
            raise CellTableError(f"{label} cells need 'row' and 'col' columns")
    if name in data_cells.columns:
        raise ValueError(f"Column '{name}' already exists in the data cells")

    if values is not None and values not in header_cells.columns:
        raise CellTableError(
            f"Header value column '{values}' not found. Columns: {list(header_cells.columns)}"
        )

    headers = header_cells
    if drop_blank and not headers.empty:
        headers = headers[~blank_mask(headers, values)]

    index = HeaderIndex.from_cells(headers, direction)
    hvalues = header_values(headers, values).tolist()
    found = index.lookup_many(data_cells["row"], data_cells["col"])

    out = data_cells.copy()
    out[name] = pd.Series(
        [None if i is None else hvalues[i] for i in found],
        index=data_cells.index,
        dtype=object,
    )

    missing = [k for k, i in enumerate(found) if i is None]
    logger.debug(
        "enhead %s -> '%s': %d data cells, %d headers, %d unmatched",
        direction.value, name, len(data_cells), len(headers), len(missing),
    )
    if missing and report is not None:
        unmatched = data_cells.iloc[missing]
        report.record(unmatched["row"], unmatched["col"], direction, name)
        logger.warning(
            "enhead %s -> '%s': %d data cell(s) have no header",
            direction.value, name, len(missing),
        )
    return out

"""
Implicit-header promotion ("behead") for sheet-unpivot.

Works on a single mixed cell table.  Each call peels off the outermost
header level on one side of the table:

  N-side directions (N, NNW, NNE, ABOVE)   -> the top-most row
  S-side directions (S, SSW, SSE, BELOW)   -> the bottom-most row
  W-side directions (W, WNW, WSW, LEFT)    -> the left-most column
  E-side directions (E, ENE, ESE, RIGHT)   -> the right-most column

The peeled cells are removed and every remaining cell is enheaded against
them.  Repeated calls peel successive levels, outer to inner:

    cells = behead(cells, "NNW", "sex")   # row 1: Female . Male .
    cells = behead(cells, "N", "name")    # row 2: matilda jason ...
    cells = behead(cells, "W", "subject") # col 1: history, maths, ...

``behead_if()`` peels only the cells of that row/column matching a
predicate, for tables where headers share a column with data or
sub-headers (e.g. bold group names above indented items).
"""

from __future__ import annotations

import logging
from collections.abc import Callable

import pandas as pd

from sheet_unpivot.directions import Direction
from sheet_unpivot.resolver import ResolutionReport
from sheet_unpivot.transforms.enhead import enhead

logger = logging.getLogger(__name__)


def outer_level(cells: pd.DataFrame, direction: str | Direction) -> pd.Series:
    """Mask of the cells in the extreme row/column for *direction*."""
    side = Direction.parse(direction).side
    if cells.empty:
        return pd.Series(False, index=cells.index)
    if side == "N":
        return cells["row"] == cells["row"].min()
    if side == "S":
        return cells["row"] == cells["row"].max()
    if side == "W":
        return cells["col"] == cells["col"].min()
    return cells["col"] == cells["col"].max()


def _promote(
    cells: pd.DataFrame,
    header_mask: pd.Series,
    direction: Direction,
    name: str,
    values: str | None,
    drop_blank: bool,
    report: ResolutionReport | None,
) -> pd.DataFrame:
    headers = cells[header_mask]
    data = cells[~header_mask]
    logger.debug(
        "behead %s -> '%s': peeling %d header cells, %d cells remain",
        direction.value, name, len(headers), len(data),
    )
    out = enhead(
        data, headers, direction, name,
        values=values, drop_blank=drop_blank, report=report,
    )
    return out.reset_index(drop=True)


def behead(
    cells: pd.DataFrame,
    direction: str | Direction,
    name: str,
    *,
    values: str | None = None,
    drop_blank: bool = True,
    report: ResolutionReport | None = None,
) -> pd.DataFrame:
    """Strip one header level from *cells* and attach it as column *name*.

    Args:
        cells: Mixed cell table (headers + data).
        direction: Where the headers sit relative to the data.
        name: Name of the new column.
        values: Take header values from this column instead of the typed
            value columns.
        drop_blank: Blank cells in the peeled level are not headers.
        report: If given, cells left without a header are recorded on it.

    Returns:
        The remaining cells with column *name* added; cells with no
        header get ``None``.
    """
    direction = Direction.parse(direction)
    return _promote(
        cells, outer_level(cells, direction), direction, name,
        values, drop_blank, report,
    )


def behead_if(
    cells: pd.DataFrame,
    predicate: Callable[[pd.DataFrame], pd.Series],
    direction: str | Direction,
    name: str,
    *,
    values: str | None = None,
    drop_blank: bool = True,
    report: ResolutionReport | None = None,
) -> pd.DataFrame:
    """Like ``behead()``, but only cells matching *predicate* are headers.

    Cells of the outer row/column that fail the predicate stay in the
    table as ordinary cells.

    Args:
        predicate: Callable taking the cell table and returning a boolean
            mask, e.g. ``formats.predicate(bold=True)``.

    Example::

        is_bold = formats.predicate(bold=True)
        cells = behead_if(cells, is_bold, "WNW", "field")
        cells = behead(cells, "W", "item")
    """
    direction = Direction.parse(direction)
    matched = pd.Series(predicate(cells), index=cells.index).fillna(False).astype(bool)
    return _promote(
        cells, outer_level(cells, direction) & matched, direction, name,
        values, drop_blank, report,
    )

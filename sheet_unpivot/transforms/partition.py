"""
Partitioning for sheet-unpivot.

A sheet often holds several small tables laid out in a grid (one per
region, one per year, ...).  Given the corner cell of each table --
chosen by the caller, e.g. every cell whose text is "Region" -- each cell
is assigned to the corner at or above it *and* at or to the left of it.

Rows are split at the corner rows and columns at the corner columns,
independently, so corners must line up in a grid (a missing grid corner
raises ``ValueError``).  Each part can then be
beheaded separately (``df.groupby(["corner_row", "corner_col"])``).
"""

from __future__ import annotations

import logging

import numpy as np
import pandas as pd

from sheet_unpivot.cells import positions

logger = logging.getLogger(__name__)


def _split(values: pd.Series, cuts: np.ndarray) -> pd.Series:
    idx = np.searchsorted(cuts, values.to_numpy(), side="right") - 1
    assigned = pd.array(cuts[np.clip(idx, 0, None)], dtype="Int64")
    assigned[idx < 0] = pd.NA
    return pd.Series(assigned, index=values.index)


def partition(
    cells: pd.DataFrame,
    corners: pd.DataFrame,
    *,
    strict: bool = True,
) -> pd.DataFrame:
    """Assign every cell to a table by its nearest up-left corner.

    Args:
        cells: Cell table.
        corners: Cell table of corner cells (only ``row``/``col`` used).
        strict: Drop cells above or left of every corner.  If ``False``
            they are kept with missing corners.

    Returns:
        A copy of *cells* with ``corner_row`` and ``corner_col`` (Int64).

    Raises:
        ValueError: If *corners* is empty, the output columns exist, or
            the corners do not line up in a grid (some cell would be
            assigned a row/column pair that is not a corner).
    """
    if corners.empty:
        raise ValueError("partition() needs at least one corner cell")
    clash = [c for c in ("corner_row", "corner_col") if c in cells.columns]
    if clash:
        raise ValueError(f"Columns {clash} already exist")

    out = cells.copy()
    out["corner_row"] = _split(cells["row"], np.unique(corners["row"].to_numpy()))
    out["corner_col"] = _split(cells["col"], np.unique(corners["col"].to_numpy()))

    outside = out["corner_row"].isna() | out["corner_col"].isna()
    corner_set = set(positions(corners))
    stray = [
        (int(r), int(c))
        for r, c, cr, cc in zip(out["row"], out["col"], out["corner_row"], out["corner_col"])
        if not (pd.isna(cr) or pd.isna(cc)) and (int(cr), int(cc)) not in corner_set
    ]
    if stray:
        raise ValueError(
            f"Corners do not line up in a grid: cells {stray[:10]} fall under "
            f"no corner. Corners: {sorted(corner_set)}"
        )

    if strict and outside.any():
        logger.debug("partition: dropping %d cells outside every corner", int(outside.sum()))
        out = out[~outside].reset_index(drop=True)
    return out

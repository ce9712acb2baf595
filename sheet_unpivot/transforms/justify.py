"""
Header justification for sheet-unpivot.

Spreadsheet authors often centre a header over the block it governs, or
place it in a merged cell whose value lives in an arbitrary corner.  The
compass directions assume headers sit on an edge of their block, so such
headers resolve wrongly.

``justify()`` moves each header cell to a caller-chosen *corner* cell
(typically the top-left cell of the block, found by border formatting or
by position), keeping the header's value and formatting.  After that,
a compound direction such as ``NNW`` resolves exactly as it would for a
natively corner-aligned layout.
"""

from __future__ import annotations

import logging
from typing import Literal

import pandas as pd

from sheet_unpivot.cells import positions
from sheet_unpivot.exceptions import CardinalityMismatchError

logger = logging.getLogger(__name__)


def _pair_by_key(
    header_cells: pd.DataFrame, corner_cells: pd.DataFrame, key: str
) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Pair headers with corners sharing the same *key* (``row`` or ``col``)."""
    for label, table in (("header", header_cells), ("corner", corner_cells)):
        dupes = table[table.duplicated(key, keep=False)]
        if not dupes.empty:
            raise CardinalityMismatchError(
                f"Ambiguous correspondence: several {label} cells share a {key}",
                headers=len(header_cells),
                corners=len(corner_cells),
                positions=positions(dupes),
            )

    header_keys, corner_keys = set(header_cells[key]), set(corner_cells[key])
    if header_keys != corner_keys:
        unpaired = pd.concat([
            header_cells[~header_cells[key].isin(corner_keys)],
            corner_cells[~corner_cells[key].isin(header_keys)],
        ])
        raise CardinalityMismatchError(
            f"No matching {key} for some header/corner cells",
            headers=len(header_cells),
            corners=len(corner_cells),
            positions=positions(unpaired),
        )
    return (
        header_cells.sort_values(key, kind="stable"),
        corner_cells.sort_values(key, kind="stable"),
    )


def justify(
    header_cells: pd.DataFrame,
    corner_cells: pd.DataFrame,
    *,
    match: Literal["order", "row", "col"] = "order",
) -> pd.DataFrame:
    """Move header cells to corner positions.

    Args:
        header_cells: Cell table of headers to move.
        corner_cells: Cell table of target positions; only ``row`` and
            ``col`` are used.
        match: How headers pair with corners:
            ``"order"`` -- both sorted by (row, col), paired in turn;
            ``"row"`` -- pair cells on the same row (row headers);
            ``"col"`` -- pair cells in the same column (column headers).

    Returns:
        The header cells with ``row``/``col`` replaced by their corner's;
        every other column is copied from the header.

    Raises:
        CardinalityMismatchError: If the counts differ, the pairing is
            ambiguous, or two headers would land on one corner.
        ValueError: If *match* is unknown.
    """
    if len(header_cells) != len(corner_cells):
        raise CardinalityMismatchError(
            f"justify() needs one corner per header: got {len(header_cells)} "
            f"header cells and {len(corner_cells)} corner cells",
            headers=len(header_cells),
            corners=len(corner_cells),
        )

    dupes = corner_cells[corner_cells.duplicated(["row", "col"], keep=False)]
    if not dupes.empty:
        raise CardinalityMismatchError(
            "Several corner cells share a position",
            headers=len(header_cells),
            corners=len(corner_cells),
            positions=positions(dupes),
        )

    if match == "order":
        headers = header_cells.sort_values(["row", "col"], kind="stable")
        corners = corner_cells.sort_values(["row", "col"], kind="stable")
    elif match in ("row", "col"):
        headers, corners = _pair_by_key(header_cells, corner_cells, match)
    else:
        raise ValueError(f"Unknown match mode {match!r}; expected 'order', 'row' or 'col'")

    out = headers.reset_index(drop=True)
    out["row"] = corners["row"].to_numpy()
    out["col"] = corners["col"].to_numpy()
    logger.debug("justify: moved %d header cells (match=%s)", len(out), match)
    return out

"""
Sentinel isolation for sheet-unpivot.

Statistical tables mark special conditions with in-band text such as
``"..C"`` (confidential), ``"…"`` (not available) or ``"-"`` among
otherwise numeric cells.  Left in place they turn a numeric column into
text and get lost in coercion.

``isolate_sentinels()`` moves those markers to their own column so the
value column only holds real values and the marker survives as data.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

import pandas as pd

from sheet_unpivot.exceptions import CellTableError

logger = logging.getLogger(__name__)


def isolate_sentinels(
    cells: pd.DataFrame,
    value_field: str,
    sentinel_values: Iterable[Any],
    *,
    into: str = "sentinel",
) -> pd.DataFrame:
    """Move sentinel values out of *value_field* into column *into*.

    Args:
        cells: Cell table (or any tidy table).
        value_field: Column holding the sentinels, e.g. ``"character"``.
        sentinel_values: The marker values to isolate.
        into: Name of the new column.

    Returns:
        A copy of *cells* where sentinel rows have *value_field* cleared
        and the marker in *into*; other rows have ``None`` in *into* and
        are otherwise unchanged.

    Raises:
        CellTableError: If *value_field* is not a column.
        ValueError: If *into* already exists.
    """
    if value_field not in cells.columns:
        raise CellTableError(
            f"Column '{value_field}' not found. Columns: {list(cells.columns)}"
        )
    if into in cells.columns:
        raise ValueError(f"Column '{into}' already exists")

    sentinels = list(sentinel_values)
    is_sentinel = cells[value_field].isin(sentinels)

    out = cells.copy()
    out[into] = cells[value_field].astype(object).where(is_sentinel, None)
    out.loc[is_sentinel, value_field] = None
    logger.debug(
        "isolate_sentinels '%s': %d of %d cells moved to '%s'",
        value_field, int(is_sentinel.sum()), len(cells), into,
    )
    return out

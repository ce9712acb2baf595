"""
Reshaping transforms for sheet-unpivot: long <-> wide.

- ``spatter()``: widen a tidy cell table.  Values of a *key* column become
  column names; each cell's value is taken from its own typed column (as
  chosen by ``data_type``), so a widened column of numbers stays numeric
  even when another widened column holds text.
- ``gather()``: the "extra-tidy" inverse.  Every (row, column) pair of an
  ordinary DataFrame becomes one record ``{row, col, variable, value}``.

Collision policy:
  ``spatter()`` never overwrites.  If two records land on the same output
  cell it raises ``AmbiguousWideningError`` naming both source positions --
  usually a sign that a header level was not attached, so two
  observations look identical.
"""

from __future__ import annotations

import logging
import numbers
from collections.abc import Sequence
from typing import Any

import pandas as pd

from sheet_unpivot.cells import CELL_ATTRIBUTE_COLUMNS, TYPED_COLUMNS, cell_values
from sheet_unpivot.exceptions import AmbiguousWideningError, CellTableError, TypeMismatchError

logger = logging.getLogger(__name__)


def _is_valid_key(value: Any) -> bool:
    """Keys must be text or (non-missing, non-boolean) numbers."""
    if isinstance(value, str):
        return True
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        return False
    return not pd.isna(value)


def _record_positions(records: pd.DataFrame) -> list[tuple[int, int]]:
    """Source ``(row, col)`` of each record; 0 where the column was dropped."""
    n = len(records)
    rows = records["row"].tolist() if "row" in records.columns else [0] * n
    cols = records["col"].tolist() if "col" in records.columns else [0] * n
    return [(int(r), int(c)) for r, c in zip(rows, cols)]


def spatter(
    records: pd.DataFrame,
    key: str,
    *,
    values: str | None = None,
    types: str = "data_type",
    id_columns: Sequence[str] | None = None,
) -> pd.DataFrame:
    """Spread a key column across new columns (long -> wide).

    Args:
        records: Tidy cell table, e.g. the output of ``behead()``.
        key: Column whose values become the new column names.
        values: Take cell values from this column.  If ``None``, each
            record's value comes from the typed column selected by *types*.
        types: Discriminator column used when *values* is ``None``.
        id_columns: Columns identifying one output row.  Defaults to every
            column except *key*, the value/type columns and the per-cell
            attribute columns (``col``, typed columns, ``is_blank``,
            ``format_id``).

    Returns:
        One row per distinct id tuple (first-seen order) and one column per
        distinct key (first-seen order) after the id columns.  Missing
        combinations are missing values.

    Raises:
        CellTableError: If *key*, *values* or *types* is not a column.
        TypeMismatchError: If a key value is not text or numeric.
        AmbiguousWideningError: If two records map to the same output cell.
    """
    for column in (key, values if values is not None else types):
        if column not in records.columns:
            raise CellTableError(
                f"Column '{column}' not found. Columns: {list(records.columns)}"
            )

    if values is not None:
        value_series = records[values].astype(object)
        value_series = value_series.where(value_series.notna(), None)
        value_columns = {values}
    else:
        value_series = cell_values(records, types=types)
        value_columns = {types, *TYPED_COLUMNS.values()}

    if id_columns is None:
        id_columns = [
            c for c in records.columns
            if c != key and c not in value_columns and c not in CELL_ATTRIBUTE_COLUMNS
        ]
    else:
        id_columns = list(id_columns)
        missing = [c for c in id_columns if c not in records.columns]
        if missing:
            raise CellTableError(f"id columns {missing} not found. Columns: {list(records.columns)}")

    where = _record_positions(records)
    keys = records[key].tolist()
    bad = [where[i] for i, k in enumerate(keys) if not _is_valid_key(k)]
    if bad:
        raise TypeMismatchError(
            f"spatter() key '{key}' must be text or numeric; found unusable values at", bad
        )

    ids = records[list(id_columns)].astype(object)
    ids = ids.where(ids.notna(), None)
    if id_columns:
        group_keys = list(ids.itertuples(index=False, name=None))
    else:
        # no id columns: every record lands in one output row
        group_keys = [()] * len(records)

    groups: dict[tuple, dict[Any, Any]] = {}
    seen: dict[tuple[tuple, Any], tuple[int, int]] = {}
    key_order: dict[Any, None] = {}
    for i, (group, k, v) in enumerate(zip(group_keys, keys, value_series)):
        slot = (group, k)
        if slot in seen:
            raise AmbiguousWideningError(k, [seen[slot], where[i]], group)
        seen[slot] = where[i]
        key_order.setdefault(k, None)
        groups.setdefault(group, {})[k] = v

    new_columns = list(key_order)
    clash = [k for k in new_columns if k in id_columns]
    if clash:
        raise ValueError(f"Key values {clash} collide with id column names")

    rows = [{**dict(zip(id_columns, group)), **widened} for group, widened in groups.items()]
    out = pd.DataFrame(rows, columns=[*id_columns, *new_columns]).infer_objects()
    logger.debug(
        "spatter '%s': %d records -> %d rows x %d new columns",
        key, len(records), len(out), len(new_columns),
    )
    return out


def gather(
    df: pd.DataFrame,
    *,
    id_columns: Sequence[str] | None = None,
    var_name: str = "variable",
    value_name: str = "value",
) -> pd.DataFrame:
    """Melt an ordinary DataFrame into extra-tidy records.

    Every (row, non-id column) pair becomes one record with fields
    ``row``, ``col`` (1-indexed positions in *df*), the id columns,
    *var_name* (the column name) and *value_name* (the value), in
    row-major order.  Nothing is lost: ``spatter()`` on the result (with
    ``col`` dropped) rebuilds *df*.

    Raises:
        ValueError: If an output field name collides with a column of *df*.
    """
    id_columns = list(id_columns or [])
    reserved = {"row", "col", var_name, value_name}
    clash = sorted(reserved & set(map(str, df.columns)))
    if clash:
        raise ValueError(f"gather() output fields {clash} collide with columns of the input")

    positions = {name: j for j, name in enumerate(df.columns, start=1)}
    value_vars = [c for c in df.columns if c not in id_columns]

    long = df.reset_index(drop=True).melt(
        id_vars=id_columns,
        value_vars=value_vars,
        var_name=var_name,
        value_name=value_name,
        ignore_index=False,
    )
    long.insert(0, "row", long.index.to_numpy() + 1)
    long.insert(1, "col", long[var_name].map(positions).astype("int64"))
    long = long.sort_values(["row", "col"], kind="stable").reset_index(drop=True)
    return long[["row", "col", *id_columns, var_name, value_name]]

"""
Cell table reader for sheet-unpivot.

Loads a cell table written by an external spreadsheet importer -- one row
per cell with ``row``, ``col``, ``data_type`` and the typed value columns
(see ``sheet_unpivot.cells``) -- from CSV or Parquet, and coerces it to the
canonical dtypes.

Only ``row``, ``col`` and ``data_type`` are required; absent typed columns
are added empty.  ``local_format_id`` is accepted as an alias of
``format_id``.

Why CSV is read with ``keep_default_na=False``:
  Text cells like "NA" or "null" are real header values in many sheets.
  Only truly empty fields count as missing.
"""

from __future__ import annotations

import logging
from pathlib import Path
from typing import Any

import pandas as pd
import pyarrow.parquet as pq

from sheet_unpivot.cells import CELL_COLUMNS, coerce_cell_dtypes, validate_cells
from sheet_unpivot.exceptions import CellTableError

logger = logging.getLogger(__name__)

_COLUMN_ALIASES = {"local_format_id": "format_id"}

_TRUE = {"true", "t", "1", "yes"}
_FALSE = {"false", "f", "0", "no"}


def _to_bool(value: Any) -> bool | None:
    if value is None or pd.isna(value):
        return None
    if isinstance(value, bool):
        return value
    text = str(value).strip().lower()
    if text in _TRUE:
        return True
    if text in _FALSE:
        return False
    raise CellTableError(f"Cannot read {value!r} as a boolean")


def read_cells(path: str | Path) -> pd.DataFrame:
    """Read a cell table from CSV or Parquet.

    Args:
        path: ``.csv`` or ``.parquet`` file.

    Returns:
        A validated cell table with canonical dtypes.  Extra columns are
        kept as read.

    Raises:
        FileNotFoundError: If the file does not exist.
        ValueError: If the file extension is unsupported.
        CellTableError: If the table is malformed.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Cell table not found: {path}")

    suffix = path.suffix.lower()
    if suffix == ".csv":
        df = pd.read_csv(
            path,
            encoding="utf-8-sig",
            keep_default_na=False,
            na_values=[""],
            dtype={"data_type": str, "character": str, "error": str},
        )
    elif suffix in (".parquet", ".pq"):
        df = pq.read_table(path).to_pandas()
    else:
        raise ValueError(
            f"Unsupported cell table format: '{suffix}'. Supported formats: ['.csv', '.parquet']"
        )

    df = df.rename(columns={k: v for k, v in _COLUMN_ALIASES.items() if k in df.columns})
    missing = [c for c in ("row", "col", "data_type") if c not in df.columns]
    if missing:
        raise CellTableError(
            f"Cell table {path.name} is missing columns {missing}. "
            f"Columns found: {list(df.columns[:12])}"
        )

    for column in CELL_COLUMNS:
        if column not in df.columns:
            df[column] = None
    if "is_blank" in df.columns and df["is_blank"].isna().all():
        df["is_blank"] = df["data_type"].eq("blank")

    df["logical"] = df["logical"].map(_to_bool).astype(object)
    df["is_blank"] = df["is_blank"].map(_to_bool).astype(object)

    df = coerce_cell_dtypes(df)
    validate_cells(df)
    logger.info("Read %d cells from %s", len(df), path)
    return df

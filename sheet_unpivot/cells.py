"""
Cell model for sheet-unpivot.

A *cell table* is the engine's working collection: a pandas DataFrame with
one row per spreadsheet cell and the canonical columns below.  Every
transform in ``sheet_unpivot.transforms`` consumes and returns cell tables
(plus any extra columns attached by earlier stages).

Canonical columns:
  row, col     -- 1-indexed position, unique per table
  data_type    -- one of DATA_TYPES; selects which typed column is active
  character    -- text value
  numeric      -- number value (float)
  logical      -- boolean value
  date         -- date/time value (datetime64)
  error        -- spreadsheet error code, e.g. "#N/A"
  is_blank     -- blank flag
  format_id    -- index into a FormatTable (nullable Int64)

Why one typed column per data type:
  A header row can mix text and numbers (e.g. "Total" next to 2019).
  Keeping the types apart means nothing is coerced until the caller asks
  for it, and ``spatter()`` can widen mixed-type values correctly.

The single-cell ``Cell`` dataclass is used for the resolver's per-cell API
and for building cell tables from Python objects.
"""

from __future__ import annotations

import numbers
from collections.abc import Iterable, Iterator, Sequence
from dataclasses import dataclass
from datetime import date, datetime
from typing import Any, Literal

import numpy as np
import pandas as pd

from sheet_unpivot.exceptions import CellTableError, TypeMismatchError

DataType = Literal["character", "numeric", "logical", "date", "error", "blank"]

DATA_TYPES: tuple[str, ...] = ("character", "numeric", "logical", "date", "error", "blank")

# data_type -> the column holding its value ("blank" has none)
TYPED_COLUMNS: dict[str, str] = {
    "character": "character",
    "numeric": "numeric",
    "logical": "logical",
    "date": "date",
    "error": "error",
}

CELL_COLUMNS: list[str] = [
    "row", "col", "data_type",
    "character", "numeric", "logical", "date", "error",
    "is_blank", "format_id",
]

# Per-cell attributes (vary from cell to cell even within one observation)
CELL_ATTRIBUTE_COLUMNS: frozenset[str] = frozenset(
    ["col", "data_type", *TYPED_COLUMNS.values(), "is_blank", "format_id"]
)


@dataclass(frozen=True)
class Cell:
    """A single spreadsheet cell.

    Attributes:
        row: 1-indexed row.
        col: 1-indexed column.
        data_type: Discriminator; exactly one typed value is active.
        value: The active typed value (``None`` for blanks).
        format_id: Opaque index into a ``FormatTable``.
    """

    row: int
    col: int
    data_type: DataType = "blank"
    value: Any = None
    format_id: int | None = None

    @property
    def position(self) -> tuple[int, int]:
        return (self.row, self.col)

    @property
    def is_blank(self) -> bool:
        return self.data_type == "blank"

    @classmethod
    def from_value(cls, row: int, col: int, value: Any, format_id: int | None = None) -> Cell:
        """Build a cell, inferring ``data_type`` from the Python value."""
        data_type, typed = classify_value(value)
        return cls(row=row, col=col, data_type=data_type, value=typed, format_id=format_id)


def classify_value(value: Any) -> tuple[str, Any]:
    """Infer ``(data_type, typed_value)`` for a plain Python value.

    ``None``, NaN, NaT, ``pd.NA`` and the empty string are blank.
    Booleans are checked before numbers because ``bool`` is an ``int``
    subclass.

    Raises:
        TypeMismatchError: If the value has no cell representation.
    """
    if isinstance(value, str):
        return ("blank", None) if value == "" else ("character", value)
    if value is None or (pd.api.types.is_scalar(value) and pd.isna(value)):
        return "blank", None
    if isinstance(value, (bool, np.bool_)):
        return "logical", bool(value)
    if isinstance(value, numbers.Number):
        try:
            number = float(value)
        except TypeError as exc:
            raise TypeMismatchError(f"Unsupported numeric cell value: {value!r}") from exc
        return "numeric", number
    if isinstance(value, (datetime, date, np.datetime64)):
        return "date", pd.Timestamp(value)
    raise TypeMismatchError(
        f"Unsupported cell value type {type(value).__name__}: {value!r}"
    )


# ---------------------------------------------------------------------------
# Building cell tables
# ---------------------------------------------------------------------------

def coerce_cell_dtypes(df: pd.DataFrame) -> pd.DataFrame:
    """Coerce the canonical columns of *df* to their canonical dtypes.

    Extra columns are left untouched.  Missing text/boolean values become
    ``None`` so object columns never hold a stray float NaN.
    """
    df = df.copy()
    df["row"] = df["row"].astype("int64")
    df["col"] = df["col"].astype("int64")
    df["data_type"] = df["data_type"].astype(str)
    for column in ("character", "logical", "error"):
        series = df[column].astype(object)
        df[column] = series.where(series.notna(), None)
    df["numeric"] = pd.to_numeric(df["numeric"], errors="coerce").astype("float64")
    df["date"] = pd.to_datetime(df["date"], errors="coerce")
    df["is_blank"] = df["is_blank"].eq(True)
    df["format_id"] = pd.to_numeric(df["format_id"], errors="coerce").astype("Int64")
    return df


def empty_cells() -> pd.DataFrame:
    """An empty cell table with canonical columns and dtypes."""
    return coerce_cell_dtypes(pd.DataFrame({c: [] for c in CELL_COLUMNS}))


def cells_from_records(cells: Iterable[Cell]) -> pd.DataFrame:
    """Build a cell table from ``Cell`` objects (insertion order kept)."""
    data: dict[str, list[Any]] = {c: [] for c in CELL_COLUMNS}
    for cell in cells:
        if cell.data_type not in DATA_TYPES:
            raise TypeMismatchError(
                f"Unknown data_type {cell.data_type!r}", [cell.position]
            )
        data["row"].append(cell.row)
        data["col"].append(cell.col)
        data["data_type"].append(cell.data_type)
        for data_type, column in TYPED_COLUMNS.items():
            data[column].append(cell.value if cell.data_type == data_type else None)
        data["is_blank"].append(cell.data_type == "blank")
        data["format_id"].append(cell.format_id)

    if not data["row"]:
        return empty_cells()
    df = coerce_cell_dtypes(pd.DataFrame(data, columns=CELL_COLUMNS))
    validate_cells(df)
    return df


def as_cells(data: pd.DataFrame | Sequence[Sequence[Any]], header: bool = False) -> pd.DataFrame:
    """Turn an ordinary grid into a cell table.

    Each value becomes one cell at its 1-indexed grid position.  Ragged
    lists are padded with blanks.

    Args:
        data: A DataFrame, or a list of rows.
        header: If ``True`` and *data* is a DataFrame, its column names
            become row 1 and the data start at row 2.

    Returns:
        A validated cell table, row-major order.
    """
    if not isinstance(data, pd.DataFrame):
        data = pd.DataFrame(list(data))

    records: list[Cell] = []
    offset = 0
    if header:
        offset = 1
        for j, name in enumerate(data.columns, start=1):
            records.append(Cell.from_value(1, j, name))

    for i, values in enumerate(data.itertuples(index=False, name=None), start=1 + offset):
        for j, value in enumerate(values, start=1):
            records.append(Cell.from_value(i, j, value))

    return cells_from_records(records)


# ---------------------------------------------------------------------------
# Reading values back out
# ---------------------------------------------------------------------------

def cell_values(df: pd.DataFrame, types: str = "data_type") -> pd.Series:
    """The active typed value of every cell, as an object Series.

    *types* names the discriminator column.  Blank cells (and cells whose
    typed column is empty) yield ``None``.
    """
    values = pd.Series([None] * len(df), index=df.index, dtype=object)
    for data_type, column in TYPED_COLUMNS.items():
        if column not in df.columns:
            continue
        mask = df[types] == data_type
        if mask.any():
            values[mask] = df.loc[mask, column].astype(object)
    return values.where(values.notna(), None)


def iter_cells(df: pd.DataFrame) -> Iterator[Cell]:
    """Yield a ``Cell`` for every row of a cell table."""
    values = cell_values(df)
    format_ids = df["format_id"] if "format_id" in df.columns else pd.Series(pd.NA, index=df.index)
    for row, col, data_type, value, format_id in zip(
        df["row"], df["col"], df["data_type"], values, format_ids
    ):
        yield Cell(
            row=int(row),
            col=int(col),
            data_type=data_type,
            value=value,
            format_id=None if pd.isna(format_id) else int(format_id),
        )


def pack(df: pd.DataFrame, value_name: str = "value") -> pd.DataFrame:
    """Collapse the typed value columns into a single object column.

    The ``data_type`` column is kept so that ``unpack()`` can restore the
    typed columns.
    """
    if value_name in df.columns:
        raise ValueError(f"Column '{value_name}' already exists")
    packed = df.drop(columns=[c for c in TYPED_COLUMNS.values() if c in df.columns])
    packed[value_name] = cell_values(df)
    return packed


def unpack(df: pd.DataFrame, value_name: str = "value") -> pd.DataFrame:
    """Inverse of ``pack()``: spread *value_name* back into typed columns."""
    if value_name not in df.columns:
        raise CellTableError(f"Column '{value_name}' not found. Columns: {list(df.columns)}")
    unpacked = df.drop(columns=[value_name])
    for data_type, column in TYPED_COLUMNS.items():
        mask = df["data_type"] == data_type
        unpacked[column] = df[value_name].where(mask, None)
    unpacked["numeric"] = pd.to_numeric(unpacked["numeric"], errors="coerce").astype("float64")
    unpacked["date"] = pd.to_datetime(unpacked["date"], errors="coerce")
    for column in ("character", "logical", "error"):
        unpacked[column] = unpacked[column].astype(object).where(unpacked[column].notna(), None)
    return unpacked


# ---------------------------------------------------------------------------
# Validation
# ---------------------------------------------------------------------------

def validate_cells(df: pd.DataFrame, required: Iterable[str] = ("row", "col", "data_type")) -> None:
    """Check that *df* is a well-formed cell table.

    Raises:
        CellTableError: If required columns are missing, positions are not
            positive, ``data_type`` is unknown, or two cells share a
            position.
    """
    missing = [c for c in required if c not in df.columns]
    if missing:
        raise CellTableError(
            f"Cell table is missing columns {missing}. Columns found: {list(df.columns)}"
        )

    bad = df[(df["row"] < 1) | (df["col"] < 1)]
    if not bad.empty:
        positions = list(zip(bad["row"].astype(int), bad["col"].astype(int)))
        raise CellTableError(f"Positions must be 1-indexed; found {positions[:10]}")

    unknown = df[~df["data_type"].isin(DATA_TYPES)] if "data_type" in df.columns else df.iloc[0:0]
    if not unknown.empty:
        raise CellTableError(
            f"Unknown data_type values {sorted(unknown['data_type'].astype(str).unique())}. "
            f"Expected one of {list(DATA_TYPES)}"
        )

    dupes = df[df.duplicated(["row", "col"], keep=False)]
    if not dupes.empty:
        positions = sorted(set(zip(dupes["row"].astype(int), dupes["col"].astype(int))))
        raise CellTableError(f"Duplicate cell positions: {positions[:10]}")


def positions(df: pd.DataFrame) -> list[tuple[int, int]]:
    """``(row, col)`` pairs of a cell table, in table order."""
    return [(int(r), int(c)) for r, c in zip(df["row"], df["col"])]

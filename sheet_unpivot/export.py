"""
Exporter for sheet-unpivot.

Writes a tidy (or widened) table to the output directory as CSV or
Parquet.

Output file naming convention:
  {table_name}.{format}  -- e.g., "tidy.parquet", "scores.csv"

Why Parquet is the default:
- Preserves column dtypes (no re-parsing on load).
- Columnar compression reduces file size significantly.

Header columns attached by ``enhead()`` are object columns and may mix
text with numbers (a "Total" header next to years).  Arrow needs one type
per column, so such columns are written as text; a warning names them.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from pathlib import Path
from typing import Literal

import pandas as pd

from sheet_unpivot.exceptions import ExportError

logger = logging.getLogger(__name__)


def _arrow_safe(df: pd.DataFrame) -> pd.DataFrame:
    """Cast mixed-type object columns to text so Arrow can store them."""
    mixed: list[str] = []
    out = df
    for column in df.columns:
        if df[column].dtype != object:
            continue
        kinds = {type(v) for v in df[column] if v is not None and not pd.isna(v)}
        if len(kinds) > 1:
            if out is df:
                out = df.copy()
            out[column] = df[column].map(lambda v: None if v is None or pd.isna(v) else str(v))
            mixed.append(str(column))
    if mixed:
        logger.warning("Columns with mixed value types written as text: %s", mixed)
    return out


def _write_csv(df: pd.DataFrame, path: Path) -> None:
    df.to_csv(path, index=False, encoding="utf-8-sig")


def _write_parquet(df: pd.DataFrame, path: Path) -> None:
    _arrow_safe(df).to_parquet(path, index=False, engine="pyarrow")


# output_format -> writer(df, path)
_WRITERS: dict[str, Callable[[pd.DataFrame, Path], None]] = {
    "csv": _write_csv,
    "parquet": _write_parquet,
}


def export_table(
    df: pd.DataFrame,
    output_dir: str | Path,
    table_name: str = "tidy",
    output_format: Literal["csv", "parquet"] = "parquet",
) -> str:
    """Write one table to ``{output_dir}/{table_name}.{output_format}``.

    The output directory is created recursively if it does not exist.

    Returns:
        The path written, as a string.

    Raises:
        ExportError: If *output_format* is unsupported, or the directory
            or file cannot be written.
    """
    writer = _WRITERS.get(output_format)
    if writer is None:
        raise ExportError(
            f"Unsupported output format: '{output_format}'. "
            f"Supported formats: {sorted(_WRITERS)}"
        )

    file_path = Path(output_dir) / f"{table_name}.{output_format}"
    try:
        file_path.parent.mkdir(parents=True, exist_ok=True)
        writer(df, file_path)
    except Exception as exc:
        raise ExportError(f"Could not write table '{table_name}' to {file_path}: {exc}") from exc

    logger.info(
        "Exported table '%s' -> %s (%d rows, %d cols)",
        table_name, file_path.name, len(df), len(df.columns),
    )
    return str(file_path)

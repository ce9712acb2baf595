"""
Internal pipeline orchestration for sheet-unpivot.

Extracted from ``__init__.py`` so the module-level ``run()`` and callers
holding an in-memory ``RecipeConfig`` share the same
load -> transform -> export sequence.

This module is **not** part of the public API.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field

import pandas as pd

from sheet_unpivot.config import RecipeConfig
from sheet_unpivot.exceptions import ConfigValidationError
from sheet_unpivot.export import export_table
from sheet_unpivot.formats import FormatTable, load_formats
from sheet_unpivot.reader import read_cells
from sheet_unpivot.resolver import ResolutionReport
from sheet_unpivot.transforms.pipeline import RecipePipeline

logger = logging.getLogger(__name__)


@dataclass
class RecipeResult:
    """What a recipe run produced.

    Attributes:
        table: The final table, after ``keep_columns`` selection.
        report: Unresolved headers collected during the run.
        written: Output file paths (empty when export was skipped).
    """

    table: pd.DataFrame
    report: ResolutionReport
    written: list[str] = field(default_factory=list)


def select_columns(table: pd.DataFrame, keep_columns: list[str] | None) -> pd.DataFrame:
    """Apply the recipe's ``keep_columns`` selection.

    Raises:
        ConfigValidationError: If a requested column does not exist.
    """
    if keep_columns is None:
        return table
    missing = [c for c in keep_columns if c not in table.columns]
    if missing:
        raise ConfigValidationError(
            f"output.keep_columns {missing} not in the result. "
            f"Available columns: {list(table.columns)}"
        )
    return table[keep_columns]


def run_recipe(
    recipe: RecipeConfig,
    cells: pd.DataFrame | None = None,
    formats: FormatTable | None = None,
    export: bool = True,
) -> RecipeResult:
    """Load inputs, run the recipe's steps, and optionally export.

    Steps:
      1. Read the cell table (unless *cells* is given).
      2. Load the format table if the recipe names one (unless given).
      3. Run ``RecipePipeline``.
      4. Select ``keep_columns`` and export.

    Args:
        recipe: The validated RecipeConfig.
        cells: Pre-loaded cell table; skips reading ``source.cells_path``.
        formats: Pre-loaded format table.
        export: If ``False``, return the result without writing files.

    Returns:
        A ``RecipeResult``.
    """
    # 1. Cells
    if cells is None:
        cells = read_cells(recipe.source.cells_path)

    # 2. Formats
    if formats is None and recipe.source.formats_path:
        formats = load_formats(recipe.source.formats_path)

    # 3. Transform
    result = RecipePipeline(recipe, formats=formats).run(cells)
    table = select_columns(result.table, recipe.output.keep_columns)

    # 4. Export
    written: list[str] = []
    if export:
        written.append(
            export_table(
                table,
                output_dir=recipe.output.output_dir,
                table_name=recipe.output.table_name,
                output_format=recipe.output.output_format,
            )
        )
    logger.info("Recipe complete: %d rows, wrote %d files", len(table), len(written))
    return RecipeResult(table=table, report=result.report, written=written)

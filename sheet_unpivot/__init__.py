"""
sheet-unpivot: turn pivot-table spreadsheet cells into tidy data.

Works on *cell tables* -- one row per spreadsheet cell with its position,
typed value and format id -- as produced by a spreadsheet importer or by
``as_cells()`` from an ordinary grid.  The caller decides which cells are
headers; the engine works out which header governs each data cell.

Public API surface:

- ``behead(cells, direction, name)`` -- peel the outer header level off a
  mixed cell table and attach it to the remaining cells.
- ``behead_if(cells, predicate, direction, name)`` -- same, for headers
  picked out by a predicate (e.g. bold formatting).
- ``enhead(data_cells, header_cells, direction, name)`` -- join data cells
  to a separate header table.
- ``justify(header_cells, corner_cells)`` -- move centred headers to the
  corners of the blocks they govern.
- ``spatter(records, key)`` / ``gather(df)`` -- long <-> wide.
- ``isolate_sentinels(cells, value_field, sentinel_values)`` -- move
  markers like "..C" out of the value column.
- ``partition(cells, corners)`` -- split a sheet of several tables.
- ``run(recipe_path)`` -- run a YAML recipe end to end and export.

Example::

    import sheet_unpivot as su

    cells = su.as_cells([
        [None, "Female", None, "Male", None],
        [None, "matilda", "jason", "ulysses", "felicity"],
        ["history", 2, 8, 4, 6],
    ])
    tidy = (
        cells
        .pipe(su.behead, "NNW", "sex")
        .pipe(su.behead, "N", "name")
        .pipe(su.behead, "W", "subject")
    )
"""

from __future__ import annotations

import logging
from pathlib import Path

from sheet_unpivot._pipeline import RecipeResult, run_recipe
from sheet_unpivot.cells import (
    Cell,
    as_cells,
    cell_values,
    cells_from_records,
    iter_cells,
    pack,
    unpack,
    validate_cells,
)
from sheet_unpivot.config import RecipeConfig, load_recipe, save_recipe
from sheet_unpivot.directions import Direction
from sheet_unpivot.formats import Format, FormatTable, load_formats
from sheet_unpivot.reader import read_cells
from sheet_unpivot.resolver import HeaderIndex, ResolutionReport, UnresolvedHeader, resolve
from sheet_unpivot.transforms import (
    behead,
    behead_if,
    enhead,
    gather,
    isolate_sentinels,
    justify,
    partition,
    spatter,
)

__all__ = [
    "Cell",
    "Direction",
    "Format",
    "FormatTable",
    "HeaderIndex",
    "RecipeConfig",
    "RecipeResult",
    "ResolutionReport",
    "UnresolvedHeader",
    "as_cells",
    "behead",
    "behead_if",
    "cell_values",
    "cells_from_records",
    "enhead",
    "gather",
    "isolate_sentinels",
    "iter_cells",
    "justify",
    "load_formats",
    "load_recipe",
    "pack",
    "partition",
    "read_cells",
    "resolve",
    "run",
    "save_recipe",
    "spatter",
    "unpack",
    "validate_cells",
]

logger = logging.getLogger(__name__)


def run(recipe_path: str | Path, export: bool = True) -> RecipeResult:
    """Run a recipe YAML end to end.

    Orchestration:
      1. ``load_recipe()`` -> ``RecipeConfig`` (Pydantic validation on load).
      2. ``read_cells()`` on ``source.cells_path``; ``load_formats()`` on
         ``source.formats_path`` if set.
      3. ``RecipePipeline.run()`` over the cells.
      4. ``export_table()`` to ``output.output_dir`` (unless *export* is
         ``False``).

    Args:
        recipe_path: Path to the recipe YAML.
        export: Write the output file.

    Returns:
        A ``RecipeResult`` with the final table, the unresolved-header
        report and the written paths.

    Raises:
        FileNotFoundError: If the recipe or an input file does not exist.
        pydantic.ValidationError: If the recipe fails schema validation.
        CellTableError: If the cell table is malformed.
        UnresolvedHeaderError: In a strict recipe with unmatched cells.
        AmbiguousWideningError: If a spatter step would overwrite values.
    """
    logger.info("run() -- recipe_path=%s", recipe_path)
    recipe = load_recipe(recipe_path)
    logger.info(
        "Loaded recipe: %d step(s), strict=%s, output=%s",
        len(recipe.steps), recipe.strict, recipe.output.output_format,
    )
    return run_recipe(recipe, export=export)
